from enum import Enum
from typing import Iterable, Mapping


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    FAILED = "failed"


SCORES: Mapping[Confidence, int] = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
    Confidence.FAILED: 0,
}


def parse_confidence(value: object, default: Confidence = Confidence.MEDIUM) -> Confidence:
    """Lenient read of a confidence label coming from outside ("High", " medium ")."""
    try:
        return Confidence(str(value).strip().lower())
    except ValueError:
        return default


def lowest(levels: Iterable[Confidence]) -> Confidence:
    return min(levels, key=lambda level: SCORES[level])


def from_score(score: float) -> Confidence:
    if score >= 2.5:
        return Confidence.HIGH
    if score >= 1.5:
        return Confidence.MEDIUM
    if score >= 0.5:
        return Confidence.LOW
    return Confidence.FAILED
