from dataclasses import dataclass
from enum import Enum

from recipe_cost.services.confidence import Confidence


class TranslationSource(str, Enum):
    PERSISTED = "persisted"
    BUILTIN = "builtin"
    EXTERNAL = "external"
    NONE = "none"


@dataclass(frozen=True)
class TranslationResult:
    english_name: str
    localized_term: str
    category: str
    found: bool
    confidence: Confidence
    source: TranslationSource

    def to_dict(self) -> dict:
        return {
            "english_name": self.english_name,
            "localized_term": self.localized_term,
            "category": self.category,
            "found": self.found,
            "confidence": self.confidence.value,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class ExternalTranslation:
    """Answer of an external translation capability."""

    translated: str
    confidence: Confidence = Confidence.MEDIUM
    category: str = "unknown"
