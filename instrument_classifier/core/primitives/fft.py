"""
Radix-2 Cooley-Tukey FFT.

Decimation in time, no scaling (unnormalized forward transform, same
convention as numpy.fft.fft). Two paths share the exact combine formulas:

    X[k]       = E[k] + w_k·O[k]
    X[k + n/2] = E[k] - w_k·O[k]        w_k = e^(-2πik/n)

- fft():         numpy path, transforms the last axis and accepts batches of
                 frames (..., n). Even/odd halves of every node on a level are
                 stacked so each recursion level is a single call.
- fft_complex(): pure-Python path over Complex values, one frame at a time.
                 Used as the reference implementation in tests.
"""

from typing import List, Sequence

import numpy as np

from ..errors import InvalidLengthError
from .complex import Complex


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ..."""
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    p = 1
    while p < n:
        p *= 2
    return p


def _check_length(n: int) -> None:
    if not is_power_of_two(n):
        raise InvalidLengthError(
            f"FFT length must be a power of 2, got {n}",
            data={"length": n},
        )


def _twiddles(n: int) -> np.ndarray:
    """e^(-2πik/n) for k in [0, n/2)."""
    angle = -2.0 * np.pi * np.arange(n // 2) / n
    return np.cos(angle) + 1j * np.sin(angle)


def _fft_recursive(x: np.ndarray) -> np.ndarray:
    n = x.shape[-1]
    if n == 1:
        return x

    # Transform even and odd halves together: (..., 2, n/2)
    halves = _fft_recursive(np.stack((x[..., 0::2], x[..., 1::2]), axis=-2))
    even = halves[..., 0, :]
    odd = halves[..., 1, :]

    t = _twiddles(n) * odd
    return np.concatenate((even + t, even - t), axis=-1)


def fft(x) -> np.ndarray:
    """
    Discrete Fourier transform along the last axis.

    Args:
        x: Real or complex samples, shape (n,) or (..., n); n must be a power of 2

    Returns:
        complex128 array of the same shape

    Raises:
        InvalidLengthError: If n is not a power of two (or is zero)
    """
    arr = np.asarray(x, dtype=np.complex128)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    _check_length(arr.shape[-1])
    return _fft_recursive(arr)


def fft_complex(x: Sequence) -> List[Complex]:
    """
    Reference FFT over Complex values.

    Args:
        x: Sequence of real numbers, Python complex or Complex values

    Returns:
        List of Complex of the same length
    """
    values = [Complex.from_value(v) for v in x]
    _check_length(len(values))
    return _fft_values(values)


def _fft_values(values: List[Complex]) -> List[Complex]:
    n = len(values)
    if n == 1:
        return [values[0]]

    even = _fft_values(values[0::2])
    odd = _fft_values(values[1::2])

    half = n // 2
    result = [Complex(0.0, 0.0)] * n
    for k in range(half):
        t = odd[k] * Complex.twiddle(k, n)
        result[k] = even[k] + t
        result[k + half] = even[k] - t
    return result
