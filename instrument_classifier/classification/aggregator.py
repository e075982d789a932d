"""Bounded history of recent decisions and result serialization."""

from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional

from .types import DecisionResult


class ResultAggregator:
    """
    Keeps the most recent decisions, newest first.

    Not thread-safe; owned by a single caller.
    """

    def __init__(self, max_recent: int = 10):
        if max_recent < 1:
            raise ValueError(f"max_recent must be at least 1, got {max_recent}")
        self.max_recent = max_recent
        self._recent: Deque[DecisionResult] = deque(maxlen=max_recent)

    def add(self, result: DecisionResult) -> DecisionResult:
        """Record a result, evicting the oldest beyond max_recent."""
        self._recent.appendleft(result)
        return result

    @property
    def current(self) -> Optional[DecisionResult]:
        return self._recent[0] if self._recent else None

    @property
    def recent(self) -> List[DecisionResult]:
        return list(self._recent)

    def clear(self):
        self._recent.clear()

    def __len__(self) -> int:
        return len(self._recent)

    def summary(self) -> Dict[str, Any]:
        """Counts over the recent window."""
        total = len(self._recent)
        unknown = sum(1 for r in self._recent if r.is_unknown)
        labels = Counter(r.label for r in self._recent if not r.is_unknown)
        return {
            "count": total,
            "unknown": unknown,
            "unknown_rate": unknown / total if total else 0.0,
            "labels": dict(labels),
        }

    @staticmethod
    def to_dict(result: DecisionResult) -> Dict[str, Any]:
        """Structured, JSON-serializable view of a decision."""
        second = result.second_highest
        return {
            "label": result.label,
            "top_label": result.top_label,
            "instrument": {
                "id": result.instrument.id,
                "name": result.instrument.name,
                "description": result.instrument.description,
            },
            "is_unknown": result.is_unknown,
            "confidence": result.confidence,
            "confidence_label": result.confidence_label,
            "entropy": result.entropy,
            "high_certainty": result.has_high_certainty,
            "probabilities": dict(result.probabilities),
            "second_highest": {"label": second[0], "probability": second[1]} if second else None,
            "timestamp": result.timestamp.isoformat(),
        }
