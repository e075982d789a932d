"""
Layer 1: PRIMITIVES - pure numeric building blocks.

- Complex: value type used by the reference FFT
- fft / fft_complex: radix-2 Cooley-Tukey transform
- hann_window: analysis window
- mel_filterbank: HTK-scale triangular filters over FFT bins
"""

from .complex import Complex
from .fft import fft, fft_complex, is_power_of_two, next_power_of_two
from .window import hann_window
from .mel import (
    hz_to_mel,
    mel_to_hz,
    mel_bin_edges,
    mel_filterbank,
    filterbank_report,
    FilterbankReport,
)

__all__ = [
    'Complex',
    'fft',
    'fft_complex',
    'is_power_of_two',
    'next_power_of_two',
    'hann_window',
    'hz_to_mel',
    'mel_to_hz',
    'mel_bin_edges',
    'mel_filterbank',
    'filterbank_report',
    'FilterbankReport',
]
