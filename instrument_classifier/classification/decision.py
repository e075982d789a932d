"""
Classification decision: model output vector -> known instrument or unknown.

Rule: unknown iff confidence < confidence_threshold
                 or normalized_entropy > entropy_threshold
      or the output has no usable evidence (all zero, NaN or inf)
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.special import entr, softmax

from ..core.errors import NoLabelsError
from ..utils.logger import get_logger
from .types import DecisionResult, Instrument

logger = get_logger(__name__)

# Outputs whose sum falls inside this range are taken as probabilities
PROBABILITY_SUM_RANGE = (0.9, 1.1)


@dataclass(frozen=True)
class DecisionThresholds:
    """Operating point of the decision rule."""
    confidence: float = 0.85
    entropy: float = 0.15

    @classmethod
    def from_config(cls, config) -> 'DecisionThresholds':
        return cls(
            confidence=float(config.get('classification.confidence_threshold', 0.85)),
            entropy=float(config.get('classification.entropy_threshold', 0.15)),
        )


def normalize_output(
    raw: Sequence[float],
    sum_range: Tuple[float, float] = PROBABILITY_SUM_RANGE,
) -> Tuple[np.ndarray, bool]:
    """
    Softmax safety net.

    Outputs that do not sum to roughly 1 are treated as logits.

    Returns:
        (probabilities, softmax_applied)
    """
    values = np.asarray(raw, dtype=np.float64).reshape(-1)
    total = float(np.sum(values))
    if sum_range[0] <= total <= sum_range[1]:
        return values, False
    return softmax(values), True


def normalized_entropy(probabilities: Sequence[float]) -> float:
    """
    Shannon entropy in bits divided by log2(N).

    Terms with p <= 0 contribute nothing. N == 1 gives 0.
    """
    p = np.asarray(probabilities, dtype=np.float64).reshape(-1)
    if p.shape[0] <= 1:
        return 0.0
    # entr(x) = -x·ln(x), entr(0) = 0
    h_bits = float(np.sum(entr(np.clip(p, 0.0, None)))) / np.log(2)
    return h_bits / np.log2(p.shape[0])


def _align(raw: Sequence[float], n_labels: int) -> np.ndarray:
    values = np.asarray(raw, dtype=np.float64).reshape(-1)
    if values.shape[0] == n_labels:
        return values
    if values.shape[0] > n_labels:
        logger.warning("Model output longer than label set, truncating", data={
            "outputs": int(values.shape[0]), "labels": n_labels,
        })
        return values[:n_labels]
    logger.warning("Model output shorter than label set, padding with zeros", data={
        "outputs": int(values.shape[0]), "labels": n_labels,
    })
    aligned = np.zeros(n_labels, dtype=np.float64)
    aligned[:values.shape[0]] = values
    return aligned


def _second_highest(probabilities: dict) -> Optional[Tuple[str, float]]:
    if len(probabilities) <= 1:
        return None
    # sorted() is stable under reverse=True, ties keep label order
    ranked = sorted(probabilities.items(), key=lambda kv: kv[1], reverse=True)
    return ranked[1]


def decide(
    raw_output: Sequence[float],
    labels: Sequence[str],
    confidence_threshold: float = 0.85,
    entropy_threshold: float = 0.15,
) -> DecisionResult:
    """
    Turn a model output vector into a decision.

    Args:
        raw_output: Probabilities or logits, index-aligned with labels
        labels: Ordered label names
        confidence_threshold: Minimum arg-max probability for a known result
        entropy_threshold: Maximum normalized entropy for a known result

    Returns:
        DecisionResult

    Raises:
        NoLabelsError: If labels is empty
    """
    labels = list(labels)
    if not labels:
        raise NoLabelsError("Label set is empty", data={"outputs": len(raw_output)})

    values = _align(raw_output, len(labels))

    finite = bool(np.all(np.isfinite(values)))
    if not finite:
        logger.warning("Model output has non-finite values, treating as no evidence", data={
            "outputs": [float(v) for v in values],
        })

    if not finite or not np.any(values):
        # No evidence at all (failed, silent or corrupt inference): the
        # softmax net would give a uniform distribution, so entropy is
        # maximal, while the reported confidence and probabilities stay at zero.
        uniform, _ = normalize_output(np.zeros(len(labels)))
        probabilities = {label: 0.0 for label in labels}
        return DecisionResult(
            top_label=labels[0],
            label=None,
            instrument=Instrument.unknown(),
            confidence=0.0,
            entropy=normalized_entropy(uniform) if len(labels) > 1 else 0.0,
            is_unknown=True,
            probabilities=probabilities,
            second_highest=_second_highest(probabilities),
        )

    probs, softmax_applied = normalize_output(values)

    max_index = int(np.argmax(probs))
    max_prob = float(probs[max_index])
    entropy = normalized_entropy(probs)

    # Written as "not known" so that a NaN comparison lands on unknown
    is_unknown = not (max_prob >= confidence_threshold and entropy <= entropy_threshold)

    probabilities = {label: float(p) for label, p in zip(labels, probs)}
    top_label = labels[max_index]

    logger.debug("Classification decision", data={
        "top_label": top_label,
        "confidence": round(max_prob, 4),
        "entropy": round(entropy, 4),
        "unknown": is_unknown,
        "softmax_applied": softmax_applied,
    })

    return DecisionResult(
        top_label=top_label,
        label=None if is_unknown else top_label,
        instrument=Instrument.unknown() if is_unknown else Instrument.from_label(top_label),
        confidence=max_prob,
        entropy=entropy,
        is_unknown=is_unknown,
        probabilities=probabilities,
        second_highest=_second_highest(probabilities),
    )


def decide_with(raw_output: Sequence[float], labels: Sequence[str],
                thresholds: DecisionThresholds) -> DecisionResult:
    """decide() with a DecisionThresholds operating point."""
    return decide(raw_output, labels, thresholds.confidence, thresholds.entropy)


def unknown_result(labels: Sequence[str]) -> DecisionResult:
    """
    Deterministic fallback used when inference fails.

    Unknown, zero confidence, entropy 1.0, all-zero probabilities.
    """
    labels = list(labels)
    if not labels:
        raise NoLabelsError("Label set is empty", data={})
    return decide(np.zeros(len(labels)), labels)
