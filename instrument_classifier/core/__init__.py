"""
Core feature extraction.

Layers:
1. PRIMITIVES - complex arithmetic, FFT, window, Mel filterbank
2. ENGINE     - SpectrogramEngine (single-shot features)
3. SEGMENTS   - SegmentedFeatureExtractor (multi-segment features)

Usage:
    from instrument_classifier.core import SpectrogramEngine, get_preset
    engine = SpectrogramEngine(get_preset('single_shot_v1'))
    tensor = engine.extract(samples)
    model_input = engine.prepare_model_input(tensor)
"""

from .errors import (
    ClassifierError,
    FeatureExtractionError,
    InvalidLengthError,
    EmptyBufferError,
    NonPowerOfTwoFFTSizeError,
    ShapeMismatchError,
    DecisionError,
    NoLabelsError,
    ConfigurationError,
    AudioLoadError,
    InferenceError,
)
from .spectrogram import (
    NormalizationPolicy,
    TensorLayout,
    SpectrogramConfig,
    SpectrogramEngine,
    FeatureTensor,
    PRESETS,
    get_preset,
    resolve_shape,
)
from .segments import SegmentConfig, SegmentedFeatureExtractor

__all__ = [
    # Errors
    'ClassifierError',
    'FeatureExtractionError',
    'InvalidLengthError',
    'EmptyBufferError',
    'NonPowerOfTwoFFTSizeError',
    'ShapeMismatchError',
    'DecisionError',
    'NoLabelsError',
    'ConfigurationError',
    'AudioLoadError',
    'InferenceError',
    # Engine
    'NormalizationPolicy',
    'TensorLayout',
    'SpectrogramConfig',
    'SpectrogramEngine',
    'FeatureTensor',
    'PRESETS',
    'get_preset',
    'resolve_shape',
    # Segments
    'SegmentConfig',
    'SegmentedFeatureExtractor',
]
