"""Unit tests for core/primitives layer.

Tests pure numeric building blocks with synthetic data:
    - complex.py: value type arithmetic and twiddle factors
    - fft.py: radix-2 transform (numpy path and Complex reference path)
    - window.py: Hann window
    - mel.py: HTK Mel scale, bin edges, triangular filterbank

No audio files needed.
"""

import pytest
import numpy as np

from instrument_classifier.core.errors import InvalidLengthError
from instrument_classifier.core.primitives import (
    Complex,
    fft,
    fft_complex,
    is_power_of_two,
    next_power_of_two,
    hann_window,
    hz_to_mel,
    mel_to_hz,
    mel_bin_edges,
    mel_filterbank,
    filterbank_report,
)
from instrument_classifier.core.primitives.mel import _round_half_away


# =============================================================================
# COMPLEX TESTS
# =============================================================================

@pytest.mark.unit
class TestComplex:
    """Tests for the Complex value type."""

    def test_arithmetic(self):
        a = Complex(1.0, 2.0)
        b = Complex(3.0, -1.0)

        assert a + b == Complex(4.0, 1.0)
        assert a - b == Complex(-2.0, 3.0)
        # (1 + 2i)(3 - i) = 3 - i + 6i - 2i² = 5 + 5i
        assert a * b == Complex(5.0, 5.0)

    def test_magnitude_and_power(self):
        c = Complex(3.0, 4.0)
        assert c.magnitude() == pytest.approx(5.0)
        assert c.power() == pytest.approx(25.0)

    def test_default_imaginary_is_zero(self):
        assert Complex(2.5).imag == 0.0

    def test_from_value(self):
        assert Complex.from_value(2) == Complex(2.0, 0.0)
        assert Complex.from_value(1 - 3j) == Complex(1.0, -3.0)
        c = Complex(0.5, 0.5)
        assert Complex.from_value(c) is c

    def test_twiddle(self):
        """e^(-2πik/n): k=0 is 1, k=n/4 is -i."""
        w0 = Complex.twiddle(0, 8)
        w2 = Complex.twiddle(2, 8)

        assert w0.real == pytest.approx(1.0)
        assert w0.imag == pytest.approx(0.0)
        assert w2.real == pytest.approx(0.0, abs=1e-12)
        assert w2.imag == pytest.approx(-1.0)

    def test_immutable(self):
        c = Complex(1.0, 1.0)
        with pytest.raises(Exception):
            c.real = 2.0


# =============================================================================
# FFT TESTS
# =============================================================================

@pytest.mark.unit
class TestFFT:
    """Tests for the radix-2 FFT."""

    def test_power_of_two_helpers(self):
        assert [n for n in range(0, 20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]
        assert next_power_of_two(1) == 1
        assert next_power_of_two(5) == 8
        assert next_power_of_two(2048) == 2048

    @pytest.mark.invariant
    @pytest.mark.parametrize("n", [1, 2, 4, 8, 16, 64, 256, 1024, 2048])
    def test_impulse_gives_flat_spectrum(self, n):
        """FFT of a unit impulse is 1 + 0i in every bin."""
        x = np.zeros(n)
        x[0] = 1.0

        spectrum = fft(x)

        assert spectrum.shape == (n,)
        assert np.allclose(spectrum.real, 1.0, atol=1e-9)
        assert np.allclose(spectrum.imag, 0.0, atol=1e-9)

    @pytest.mark.parametrize("n", [2, 8, 128, 2048])
    def test_matches_numpy(self, n):
        rng = np.random.default_rng(n)
        x = rng.standard_normal(n) + 1j * rng.standard_normal(n)

        assert np.allclose(fft(x), np.fft.fft(x), atol=1e-8 * n)

    @pytest.mark.invariant
    def test_linearity(self):
        rng = np.random.default_rng(7)
        x = rng.standard_normal(256)
        y = rng.standard_normal(256)
        a, b = 0.3, -2.0

        assert np.allclose(fft(a * x + b * y), a * fft(x) + b * fft(y), atol=1e-9)

    def test_sine_peaks_at_its_bin(self):
        n = 64
        k = 5
        x = np.sin(2 * np.pi * k * np.arange(n) / n)

        magnitude = np.abs(fft(x))

        assert set(np.argsort(magnitude)[-2:]) == {k, n - k}
        assert magnitude[k] == pytest.approx(n / 2)

    def test_batched_frames(self):
        """Leading axes are transformed independently."""
        rng = np.random.default_rng(3)
        frames = rng.standard_normal((5, 32))

        batched = fft(frames)

        assert batched.shape == (5, 32)
        for i in range(5):
            assert np.allclose(batched[i], fft(frames[i]))

    def test_reference_path_matches(self):
        rng = np.random.default_rng(11)
        x = rng.standard_normal(16)

        reference = fft_complex(x.tolist())
        fast = fft(x)

        assert len(reference) == 16
        assert np.allclose([c.as_complex() for c in reference], fast, atol=1e-9)

    def test_reference_path_accepts_complex_values(self):
        result = fft_complex([Complex(1.0, 0.0), 0.0, 0j, 0])
        assert all(c == Complex(1.0, 0.0) for c in result)

    def test_input_not_modified(self):
        x = np.arange(8, dtype=np.float64)
        before = x.copy()
        fft(x)
        assert np.array_equal(x, before)

    @pytest.mark.parametrize("n", [0, 3, 6, 1000])
    def test_invalid_length(self, n):
        with pytest.raises(InvalidLengthError):
            fft(np.zeros(n))
        with pytest.raises(InvalidLengthError):
            fft_complex([0.0] * n)

    def test_invalid_length_is_value_error(self):
        with pytest.raises(ValueError):
            fft(np.zeros(12))


# =============================================================================
# WINDOW TESTS
# =============================================================================

@pytest.mark.unit
class TestHannWindow:
    """Tests for hann_window()."""

    def test_known_values(self):
        assert np.allclose(hann_window(5), [0.0, 0.5, 1.0, 0.5, 0.0])

    def test_length_one(self):
        assert np.array_equal(hann_window(1), [1.0])

    def test_symmetric_and_bounded(self):
        w = hann_window(2048)
        assert w.shape == (2048,)
        assert np.allclose(w, w[::-1])
        assert w.min() >= 0.0 and w.max() <= 1.0

    def test_read_only(self):
        w = hann_window(16)
        with pytest.raises(ValueError):
            w[0] = 1.0

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            hann_window(0)


# =============================================================================
# MEL FILTERBANK TESTS
# =============================================================================

@pytest.mark.unit
class TestMelScale:
    """Tests for HTK Mel conversion and bin edges."""

    def test_htk_formula(self):
        assert hz_to_mel(0.0) == pytest.approx(0.0)
        assert hz_to_mel(700.0) == pytest.approx(2595.0 * np.log10(2.0))

    def test_round_trip(self):
        hz = np.array([0.0, 100.0, 1000.0, 8000.0])
        assert np.allclose(mel_to_hz(hz_to_mel(hz)), hz)

    def test_round_half_away_from_zero(self):
        values = np.array([0.5, 1.5, 2.5, 2.4, -2.5])
        assert np.array_equal(_round_half_away(values), [1.0, 2.0, 3.0, 2.0, -3.0])

    @pytest.mark.invariant
    def test_edges_non_decreasing_and_clamped(self):
        edges = mel_bin_edges(128, 1025, 44100, 0.0, 8000.0)

        assert edges.shape == (130,)
        assert np.all(np.diff(edges) >= 0)
        assert edges.min() >= 0 and edges.max() <= 1024

    def test_edges_clamped_above_nyquist(self):
        edges = mel_bin_edges(10, 257, 16000, 0.0, 20000.0)
        assert edges.max() == 256


@pytest.mark.unit
class TestMelFilterbank:
    """Tests for mel_filterbank()."""

    def test_shape_and_non_negative(self):
        fb = mel_filterbank(128, 1025, 44100)
        assert fb.shape == (128, 1025)
        assert np.all(fb >= 0.0)
        assert np.all(np.isfinite(fb))

    @pytest.mark.invariant
    def test_well_formed_rows(self):
        """40 Mels at 44.1 kHz / 2048-point FFT: every filter has support.

        Each row is a triangle with peak 1.0 at the center bin and sum
        (right - left) / 2.
        """
        edges = mel_bin_edges(40, 1025, 44100, 0.0, 8000.0)
        fb = mel_filterbank(40, 1025, 44100, 0.0, 8000.0)

        assert np.all(np.diff(edges) > 0)
        assert not filterbank_report(fb).is_degenerate

        for m in range(40):
            left, center, right = edges[m], edges[m + 1], edges[m + 2]
            row = fb[m]
            assert row[center] == pytest.approx(1.0)
            assert row.sum() == pytest.approx((right - left) / 2.0)
            assert np.all(row[:left] == 0.0)
            assert np.all(row[right:] == 0.0)

    def test_default_configuration_has_empty_rows(self):
        """128 Mels over 0-8 kHz at 2048 points: low filters collapse."""
        fb = mel_filterbank(128, 1025, 44100, 0.0, 8000.0)
        report = filterbank_report(fb)

        assert report.is_degenerate
        assert report.num_mels == 128
        for m in report.empty_rows:
            assert np.all(fb[m] == 0.0)

    @pytest.mark.invariant
    def test_degenerate_does_not_raise(self):
        """Many filters in a tiny band: collapsed rows are zero, never NaN."""
        fb = mel_filterbank(200, 1025, 44100, 0.0, 50.0)

        assert np.all(np.isfinite(fb))
        assert np.all(fb >= 0.0)
        assert filterbank_report(fb).is_degenerate

    def test_read_only(self):
        fb = mel_filterbank(10, 257, 16000)
        with pytest.raises(ValueError):
            fb[0, 0] = 1.0

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            mel_filterbank(0, 257, 16000)
        with pytest.raises(ValueError):
            mel_filterbank(10, 0, 16000)
