"""Classification decision and result handling."""

from .types import (
    Instrument,
    DecisionResult,
    LAO_INSTRUMENTS,
    UNKNOWN_ID,
    lao_instruments,
    default_labels,
    find_by_id,
)
from .decision import (
    DecisionThresholds,
    decide,
    decide_with,
    normalize_output,
    normalized_entropy,
    unknown_result,
)
from .aggregator import ResultAggregator
from .classifier import InstrumentClassifier, load_labels

__all__ = [
    'Instrument',
    'DecisionResult',
    'LAO_INSTRUMENTS',
    'UNKNOWN_ID',
    'lao_instruments',
    'default_labels',
    'find_by_id',
    'DecisionThresholds',
    'decide',
    'decide_with',
    'normalize_output',
    'normalized_entropy',
    'unknown_result',
    'ResultAggregator',
    'InstrumentClassifier',
    'load_labels',
]
