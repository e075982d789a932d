"""Audio input: sample buffers and file loading."""

from .buffer import SampleBuffer, DEFAULT_SAMPLE_RATE
from .loader import AudioLoader

__all__ = ['SampleBuffer', 'DEFAULT_SAMPLE_RATE', 'AudioLoader']
