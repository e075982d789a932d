"""Immutable mono sample buffer."""

from typing import Optional

import numpy as np

DEFAULT_SAMPLE_RATE = 44100


class SampleBuffer:
    """
    Mono PCM samples in [-1, 1] at a fixed sample rate.

    The samples are copied on construction and stored read-only. A
    SampleBuffer can be passed anywhere an array of samples is accepted.
    """

    __slots__ = ('_samples', 'sample_rate')

    def __init__(self, samples, sample_rate: int = DEFAULT_SAMPLE_RATE):
        data = np.array(samples, dtype=np.float64)
        if data.ndim != 1:
            raise ValueError(f"Sample buffer must be mono (1-D), got shape {data.shape}")
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        data.setflags(write=False)
        self._samples = data
        self.sample_rate = int(sample_rate)

    @classmethod
    def from_array(cls, samples, sample_rate: int = DEFAULT_SAMPLE_RATE) -> 'SampleBuffer':
        return cls(samples, sample_rate)

    @classmethod
    def from_file(cls, path: str, sample_rate: int = DEFAULT_SAMPLE_RATE,
                  duration: Optional[float] = None) -> 'SampleBuffer':
        """Load, downmix and resample an audio file."""
        from .loader import AudioLoader
        return AudioLoader(sample_rate=sample_rate).load(path, duration=duration)

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @property
    def duration_sec(self) -> float:
        return self._samples.shape[0] / self.sample_rate

    def __len__(self) -> int:
        return self._samples.shape[0]

    def __array__(self, dtype=None, copy=None):
        if dtype is None or np.dtype(dtype) == self._samples.dtype:
            return self._samples.copy() if copy else self._samples
        return self._samples.astype(dtype)

    def __repr__(self):
        return f"SampleBuffer({len(self)} samples, {self.sample_rate} Hz, {self.duration_sec:.2f}s)"
