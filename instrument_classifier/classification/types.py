"""Type definitions for classification module."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple


UNKNOWN_ID = "unknown"


@dataclass(frozen=True)
class Instrument:
    """A classifiable instrument (or the unknown sentinel)."""
    id: str
    name: str
    description: str = "A Lao musical instrument."
    is_unknown: bool = False

    def __str__(self):
        return self.name

    @classmethod
    def unknown(cls) -> 'Instrument':
        return cls(
            id=UNKNOWN_ID,
            name="Unknown",
            description="This sound doesn't match any known Lao musical instrument.",
            is_unknown=True,
        )

    @classmethod
    def from_label(cls, label: str) -> 'Instrument':
        """Catalog entry for a label, or a generic entry named after it."""
        found = find_by_id(label)
        if found is not None:
            return found
        return cls(id=label, name=label.replace("_", " ").title())


LAO_INSTRUMENTS: Tuple[Instrument, ...] = (
    Instrument("khaen", "Khaen", "A mouth organ made of bamboo pipes, each with a metal reed."),
    Instrument("so_u", "So U", "A bowed string instrument with a resonator made from a coconut shell."),
    Instrument("sing", "Sing", "A small cymbal-like percussion instrument used in ensembles."),
    Instrument("pin", "Pin", "A plucked string instrument with a resonator made from coconut shell."),
    Instrument("khong_wong", "Khong Wong", "A circular arrangement of small gongs in a wooden frame."),
    Instrument("ranad", "Ranad", "A wooden xylophone with bamboo resonators underneath."),
)


def lao_instruments() -> List[Instrument]:
    return list(LAO_INSTRUMENTS)


def default_labels() -> List[str]:
    """Catalog ids, used when no label file is supplied."""
    return [instrument.id for instrument in LAO_INSTRUMENTS]


def find_by_id(instrument_id: str) -> Optional[Instrument]:
    for instrument in LAO_INSTRUMENTS:
        if instrument.id == instrument_id:
            return instrument
    return None


@dataclass(frozen=True)
class DecisionResult:
    """
    Outcome of one classification decision.

    Attributes:
        top_label: Arg-max label, whether or not it passed the thresholds
        label: top_label when known, None when the decision is unknown
        confidence: Probability of the arg-max label
        entropy: Shannon entropy normalized by log2(label count)
        probabilities: label -> probability, in label order
        second_highest: (label, probability) of the runner-up, None for one label
        timestamp: UTC creation time, ignored by equality
    """
    top_label: str
    label: Optional[str]
    instrument: Instrument
    confidence: float
    entropy: float
    is_unknown: bool
    probabilities: Dict[str, float]
    second_highest: Optional[Tuple[str, float]] = None
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )

    @property
    def has_high_certainty(self) -> bool:
        return self.confidence >= 0.9 and self.entropy <= 0.12

    @property
    def confidence_label(self) -> str:
        if self.confidence >= 0.95:
            return "Very High"
        if self.confidence >= 0.85:
            return "High"
        if self.confidence >= 0.7:
            return "Moderate"
        if self.confidence >= 0.5:
            return "Low"
        return "Very Low"

    def __str__(self):
        name = self.instrument.name
        return f"{name} (confidence: {self.confidence:.2%}, entropy: {self.entropy:.3f})"
