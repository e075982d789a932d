"""Lao instrument classifier: Mel-spectrogram features and decision core."""

__version__ = "0.1.0"

from .audio import SampleBuffer, AudioLoader
from .core import (
    SpectrogramConfig,
    SpectrogramEngine,
    SegmentConfig,
    SegmentedFeatureExtractor,
    NormalizationPolicy,
    TensorLayout,
    get_preset,
)
from .classification import (
    DecisionResult,
    DecisionThresholds,
    InstrumentClassifier,
    ResultAggregator,
    decide,
)

__all__ = [
    'SampleBuffer',
    'AudioLoader',
    'SpectrogramConfig',
    'SpectrogramEngine',
    'SegmentConfig',
    'SegmentedFeatureExtractor',
    'NormalizationPolicy',
    'TensorLayout',
    'get_preset',
    'DecisionResult',
    'DecisionThresholds',
    'InstrumentClassifier',
    'ResultAggregator',
    'decide',
]
