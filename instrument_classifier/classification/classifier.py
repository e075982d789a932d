"""End-to-end classification: sample buffer -> features -> model -> decision."""

from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from ..core.errors import ClassifierError, InferenceError, NoLabelsError
from ..core.segments import SegmentConfig, SegmentedFeatureExtractor
from ..core.spectrogram import SpectrogramConfig, SpectrogramEngine
from ..utils import get_config, get_logger
from .aggregator import ResultAggregator
from .decision import DecisionThresholds, decide_with, unknown_result
from .types import DecisionResult, default_labels

logger = get_logger(__name__)

# External model: input tensor with batch axis -> output vector (or [1, n])
ModelFn = Callable[[np.ndarray], Any]


def load_labels(text: Optional[str]) -> List[str]:
    """
    Parse a newline-delimited label file.

    Blank lines are skipped. Empty or missing text gives the catalog ids.
    """
    labels = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not labels:
        logger.warning("No labels supplied, using default Lao instrument labels")
        return default_labels()
    return labels


class InstrumentClassifier:
    """
    Runs the feature pipeline, the external model and the decision rule.

    Two feature modes:
        segmented=True   (1, max_segments, feature_dim) via SegmentedFeatureExtractor
        segmented=False  engine.prepare_model_input() of a single-shot tensor
    """

    def __init__(
        self,
        model: ModelFn,
        labels: Optional[Sequence[str]] = None,
        engine_config: Optional[SpectrogramConfig] = None,
        segment_config: Optional[SegmentConfig] = None,
        segmented: bool = True,
        thresholds: Optional[DecisionThresholds] = None,
        aggregator: Optional[ResultAggregator] = None,
    ):
        """
        Initialize classifier.

        Args:
            model: External inference callable
            labels: Ordered labels aligned with the model output (default: catalog ids)
            engine_config: Feature configuration
            segment_config: Segmentation parameters (segmented mode)
            segmented: Use multi-segment features
            thresholds: Decision operating point
            aggregator: Recent-results history (default: 10 entries)
        """
        self.model = model
        self.labels = list(labels) if labels is not None else default_labels()
        if not self.labels:
            raise NoLabelsError("Label set is empty", data={})

        self.engine = SpectrogramEngine(engine_config)
        self.segmented = segmented
        self.extractor = SegmentedFeatureExtractor(self.engine, segment_config) if segmented else None
        self.thresholds = thresholds or DecisionThresholds()
        self.aggregator = aggregator or ResultAggregator()

        logger.info("Instrument classifier ready", data={
            "labels": self.labels,
            "segmented": segmented,
            "confidence_threshold": self.thresholds.confidence,
            "entropy_threshold": self.thresholds.entropy,
        })

    @classmethod
    def from_config(cls, model: ModelFn, config: Any = None) -> 'InstrumentClassifier':
        """Build from a Config object (default: global config)."""
        if config is None:
            config = get_config()

        labels = config.get('classification.labels')
        segmented = bool(config.get('segments.enabled', True))
        return cls(
            model=model,
            labels=labels if labels else None,
            engine_config=SpectrogramConfig.from_config(config),
            segment_config=SegmentConfig.from_config(config) if segmented else None,
            segmented=segmented,
            thresholds=DecisionThresholds.from_config(config),
            aggregator=ResultAggregator(int(config.get('history.max_recent', 10))),
        )

    def prepare_input(self, buffer) -> np.ndarray:
        """
        Model input tensor for a buffer, with batch axis.

        Raises:
            EmptyBufferError, ShapeMismatchError: Feature preconditions
        """
        if self.segmented:
            return self.extractor.extract_tensor(buffer)[np.newaxis, ...]
        tensor = self.engine.extract(buffer)
        return self.engine.prepare_model_input(tensor)

    def run_model(self, model_input: np.ndarray) -> np.ndarray:
        """
        Call the external model and flatten its output.

        Raises:
            InferenceError: If the model raises, returns something that is
                not numeric, or returns NaN/inf
        """
        try:
            output = np.asarray(self.model(model_input), dtype=np.float64).reshape(-1)
        except Exception as e:
            raise InferenceError(f"Model inference failed: {e}", cause=e) from e

        if not np.all(np.isfinite(output)):
            raise InferenceError(
                "Model output contains non-finite values",
                data={"outputs": int(output.shape[0])},
            )
        return output

    def classify(self, buffer) -> DecisionResult:
        """
        Classify one buffer and record the result.

        Feature preconditions propagate. Inference failures give the
        deterministic unknown result instead.
        """
        model_input = self.prepare_input(buffer)

        try:
            output = self.run_model(model_input)
        except ClassifierError:
            logger.warning("Falling back to unknown result", data={"labels": len(self.labels)})
            result = unknown_result(self.labels)
        else:
            result = decide_with(output, self.labels, self.thresholds)

        return self.aggregator.add(result)

    @property
    def recent_results(self) -> List[DecisionResult]:
        return self.aggregator.recent
