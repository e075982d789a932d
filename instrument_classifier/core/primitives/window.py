"""Analysis window coefficients."""

import numpy as np


def hann_window(n: int) -> np.ndarray:
    """
    Symmetric Hann window w[i] = 0.5·(1 − cos(2πi/(n−1))).

    Args:
        n: Window length (fft_size)

    Returns:
        Read-only float64 array of length n. n == 1 gives [1.0].
    """
    if n < 1:
        raise ValueError(f"Window length must be positive, got {n}")

    if n == 1:
        window = np.ones(1, dtype=np.float64)
    else:
        i = np.arange(n, dtype=np.float64)
        window = 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (n - 1)))

    window.setflags(write=False)
    return window
