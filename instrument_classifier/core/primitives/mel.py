"""
Mel filterbank construction.

Triangular filters over linear FFT bins, built on the HTK Mel scale
(mel = 2595·log10(1 + hz/700)) with bin edges rounded to the nearest FFT bin.
This is NOT librosa.filters.mel (Slaney scale, continuous edges, area
normalization): the model was trained on this exact construction.

Bin mapping: bin = round(hz · num_bins / sample_rate), clamped to
[0, num_bins − 1], where num_bins = fft_size // 2 + 1. Rounding is half away
from zero.

Degenerate filters: when adjacent edges fall on the same bin the slope
denominator is clamped to 1. A filter whose three edges coincide has no
support and stays an all-zero row; it never raises and never yields NaN.
"""

from dataclasses import dataclass
from typing import Tuple

import librosa
import numpy as np


def hz_to_mel(hz):
    """HTK Mel scale."""
    return librosa.hz_to_mel(hz, htk=True)


def mel_to_hz(mel):
    """Inverse HTK Mel scale."""
    return librosa.mel_to_hz(mel, htk=True)


def _round_half_away(x: np.ndarray) -> np.ndarray:
    # np.round is banker's rounding, 2.5 -> 2
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def mel_bin_edges(
    num_mels: int,
    num_bins: int,
    sample_rate: int,
    f_min: float,
    f_max: float,
) -> np.ndarray:
    """
    FFT bin index of each of the num_mels + 2 filter edges.

    Returns:
        int64 array of length num_mels + 2, non-decreasing
    """
    mel_min = hz_to_mel(f_min)
    mel_max = hz_to_mel(f_max)

    i = np.arange(num_mels + 2, dtype=np.float64)
    mel_points = mel_min + i * (mel_max - mel_min) / (num_mels + 1)
    hz_points = mel_to_hz(mel_points)

    bins = _round_half_away(hz_points * num_bins / sample_rate)
    return np.clip(bins, 0, num_bins - 1).astype(np.int64)


def mel_filterbank(
    num_mels: int,
    num_bins: int,
    sample_rate: int,
    f_min: float = 0.0,
    f_max: float = 8000.0,
) -> np.ndarray:
    """
    Build the (num_mels, num_bins) triangular filter matrix.

    Args:
        num_mels: Number of Mel bands
        num_bins: Number of non-redundant FFT bins (fft_size // 2 + 1)
        sample_rate: Sample rate in Hz
        f_min: Lowest filter edge in Hz
        f_max: Highest filter edge in Hz

    Returns:
        Read-only float64 matrix of non-negative weights
    """
    if num_mels < 1 or num_bins < 1:
        raise ValueError(f"num_mels and num_bins must be positive, got {num_mels}, {num_bins}")

    bins = mel_bin_edges(num_mels, num_bins, sample_rate, f_min, f_max)
    filterbank = np.zeros((num_mels, num_bins), dtype=np.float64)

    for m in range(num_mels):
        left, center, right = int(bins[m]), int(bins[m + 1]), int(bins[m + 2])

        if center > left:
            j = np.arange(left, center)
            filterbank[m, left:center] = (j - left) / max(center - left, 1)
        if right > center:
            j = np.arange(center, right)
            filterbank[m, center:right] = (right - j) / max(right - center, 1)

    filterbank.setflags(write=False)
    return filterbank


@dataclass(frozen=True)
class FilterbankReport:
    """Diagnostics for a constructed filterbank."""
    num_mels: int
    num_bins: int
    empty_rows: Tuple[int, ...]

    @property
    def is_degenerate(self) -> bool:
        return len(self.empty_rows) > 0


def filterbank_report(filterbank: np.ndarray) -> FilterbankReport:
    """Report the rows of a filterbank that carry no weight."""
    row_sums = filterbank.sum(axis=1)
    empty = tuple(int(i) for i in np.flatnonzero(row_sums <= 0.0))
    return FilterbankReport(
        num_mels=filterbank.shape[0],
        num_bins=filterbank.shape[1],
        empty_rows=empty,
    )
