"""Minimal complex-number value type used by the reference FFT path."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    """Complex value (real, imag). Immutable, compared by value."""
    real: float
    imag: float = 0.0

    def __add__(self, other: 'Complex') -> 'Complex':
        return Complex(self.real + other.real, self.imag + other.imag)

    def __sub__(self, other: 'Complex') -> 'Complex':
        return Complex(self.real - other.real, self.imag - other.imag)

    def __mul__(self, other: 'Complex') -> 'Complex':
        return Complex(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    def magnitude(self) -> float:
        """Euclidean norm sqrt(re² + im²)."""
        return math.sqrt(self.real * self.real + self.imag * self.imag)

    def power(self) -> float:
        """Squared magnitude re² + im²."""
        return self.real * self.real + self.imag * self.imag

    def as_complex(self) -> complex:
        return complex(self.real, self.imag)

    @classmethod
    def from_value(cls, value) -> 'Complex':
        """Build from a real number, Python complex or Complex."""
        if isinstance(value, Complex):
            return value
        c = complex(value)
        return cls(c.real, c.imag)

    @classmethod
    def twiddle(cls, k: int, n: int) -> 'Complex':
        """Twiddle factor e^(-2πik/n)."""
        angle = -2.0 * math.pi * k / n
        return cls(math.cos(angle), math.sin(angle))
