"""
Segmented feature extraction for the attention-style model.

A long buffer is cut into fixed-duration, overlapping segments. Each segment
goes through the SpectrogramEngine and is flattened to a fixed feature_dim
(zero-padded or truncated). The output always has max_segments slots:
missing segments are zero vectors.

    segment_length = int(segment_duration · sample_rate)
    segment_hop    = int(segment_length · (1 − overlap))
    n_segments     = min(max_segments, 1 + (len − segment_length) // segment_hop)

Segments that would run past the end of the buffer are dropped, never
zero-extended.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..utils.logger import get_logger
from .errors import ConfigurationError, EmptyBufferError
from .spectrogram import SpectrogramEngine

logger = get_logger(__name__)


@dataclass(frozen=True)
class SegmentConfig:
    """Segmentation parameters."""
    segment_duration: float = 4.0
    overlap: float = 0.5
    max_segments: int = 5
    # None = num_mels * frames_per_segment
    feature_dim: Optional[int] = None

    def validate(self) -> 'SegmentConfig':
        """Raise ConfigurationError for out-of-range values, else return self."""
        problems = []
        if self.segment_duration <= 0:
            problems.append("segment_duration must be positive")
        if not 0.0 <= self.overlap < 1.0:
            problems.append("overlap must be in [0, 1)")
        if self.max_segments < 1:
            problems.append("max_segments must be at least 1")
        if self.feature_dim is not None and self.feature_dim < 1:
            problems.append("feature_dim must be positive")

        if problems:
            raise ConfigurationError(
                "Invalid segment configuration: " + "; ".join(problems),
                data=dataclasses.asdict(self),
            )
        return self

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'SegmentConfig':
        kwargs: Dict[str, Any] = {}
        if values.get('segment_duration') is not None:
            kwargs['segment_duration'] = float(values['segment_duration'])
        if values.get('overlap') is not None:
            kwargs['overlap'] = float(values['overlap'])
        if values.get('max_segments') is not None:
            kwargs['max_segments'] = int(values['max_segments'])
        if values.get('feature_dim') is not None:
            kwargs['feature_dim'] = int(values['feature_dim'])
        return cls(**kwargs).validate()

    @classmethod
    def from_config(cls, config) -> 'SegmentConfig':
        return cls.from_dict(config.segments)


class SegmentedFeatureExtractor:
    """Extracts a constant number of per-segment feature vectors."""

    def __init__(self, engine: SpectrogramEngine, config: Optional[SegmentConfig] = None):
        """
        Initialize extractor.

        Args:
            engine: Spectrogram engine used for every segment
            config: Segmentation parameters (default: SegmentConfig())
        """
        self.engine = engine
        self.config = (config or SegmentConfig()).validate()
        # Fail at construction rather than on the first buffer
        self._geometry(self.config)

    def _geometry(self, config: SegmentConfig) -> Tuple[int, int, int]:
        """(segment_length, segment_hop, feature_dim) for a config."""
        sample_rate = self.engine.config.sample_rate
        segment_length = int(config.segment_duration * sample_rate)
        segment_hop = int(segment_length * (1.0 - config.overlap))

        if segment_length < 1 or segment_hop < 1:
            raise ConfigurationError(
                "Segment length and hop must be at least one sample",
                data={"segment_length": segment_length, "segment_hop": segment_hop},
            )

        feature_dim = config.feature_dim
        if feature_dim is None:
            feature_dim = self.engine.config.num_mels * self.engine.num_frames(segment_length)
        return segment_length, segment_hop, feature_dim

    @property
    def segment_length(self) -> int:
        return self._geometry(self.config)[0]

    @property
    def segment_hop(self) -> int:
        return self._geometry(self.config)[1]

    @property
    def feature_dim(self) -> int:
        return self._geometry(self.config)[2]

    def count_segments(self, length: int, config: Optional[SegmentConfig] = None) -> int:
        """Number of real (fully contained) segments for a buffer length."""
        config = config or self.config
        segment_length, segment_hop, _ = self._geometry(config)
        if length < segment_length:
            return 0
        return min(config.max_segments, 1 + (length - segment_length) // segment_hop)

    def segment_bounds(self, length: int, config: Optional[SegmentConfig] = None) -> List[Tuple[int, int]]:
        """(start, end) sample offsets of every real segment."""
        config = config or self.config
        segment_length, segment_hop, _ = self._geometry(config)
        return [
            (i * segment_hop, i * segment_hop + segment_length)
            for i in range(self.count_segments(length, config))
        ]

    @staticmethod
    def _fit(vector: np.ndarray, feature_dim: int) -> np.ndarray:
        out = np.zeros(feature_dim, dtype=np.float32)
        n = min(feature_dim, vector.shape[0])
        out[:n] = vector[:n]
        return out

    def extract_segments(
        self,
        buffer,
        segment_duration: Optional[float] = None,
        overlap: Optional[float] = None,
        max_segments: Optional[int] = None,
        feature_dim: Optional[int] = None,
    ) -> List[np.ndarray]:
        """
        Extract one feature vector per segment.

        Keyword arguments override the extractor's SegmentConfig for this call.

        Args:
            buffer: SampleBuffer or 1-D array of samples

        Returns:
            List of exactly max_segments float32 vectors of length feature_dim

        Raises:
            EmptyBufferError: If the buffer has no samples
            ConfigurationError: If an override is out of range
        """
        overrides = {
            key: value for key, value in (
                ('segment_duration', segment_duration),
                ('overlap', overlap),
                ('max_segments', max_segments),
                ('feature_dim', feature_dim),
            ) if value is not None
        }
        config = dataclasses.replace(self.config, **overrides).validate() if overrides else self.config

        samples = np.asarray(buffer, dtype=np.float64).reshape(-1)
        if samples.shape[0] == 0:
            raise EmptyBufferError("Sample buffer is empty", data={"length": 0})

        _, _, dim = self._geometry(config)
        bounds = self.segment_bounds(samples.shape[0], config)

        features = []
        for start, end in bounds:
            tensor = self.engine.extract(samples[start:end])
            features.append(self._fit(tensor.data, dim))

        while len(features) < config.max_segments:
            features.append(np.zeros(dim, dtype=np.float32))

        logger.debug("Extracted segment features", data={
            "samples": int(samples.shape[0]),
            "segments": len(bounds),
            "slots": config.max_segments,
            "feature_dim": dim,
        })
        return features

    def extract_tensor(self, buffer, **overrides) -> np.ndarray:
        """Segment features stacked to (max_segments, feature_dim)."""
        return np.stack(self.extract_segments(buffer, **overrides))
