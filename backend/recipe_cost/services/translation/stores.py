"""Persisted translation dictionaries: an in-memory fake and the SQL-backed store."""

import threading
from typing import Callable, Optional, Protocol

from sqlmodel import Session

from recipe_cost.services.confidence import Confidence
from recipe_cost.services.translation.models import TranslationResult, TranslationSource
from recipe_cost.storage import db
from recipe_cost.storage.repositories import get_translation, record_translation_gap, upsert_translation


class TranslationStore(Protocol):
    def get(self, ingredient_name: str, locale: str) -> Optional[TranslationResult]:
        ...

    def put(self, ingredient_name: str, locale: str, result: TranslationResult) -> None:
        ...

    def record_gap(self, ingredient_name: str, locale: str) -> None:
        ...


def _key(ingredient_name: str, locale: str) -> tuple[str, str]:
    return " ".join(ingredient_name.lower().split()), locale.lower()


def _persisted(english_name: str, term: str, category: str, confidence: Confidence) -> TranslationResult:
    return TranslationResult(
        english_name=english_name,
        localized_term=term,
        category=category,
        found=True,
        confidence=confidence,
        source=TranslationSource.PERSISTED,
    )


class InMemoryTranslationStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, str], TranslationResult] = {}
        self.gaps: dict[tuple[str, str], int] = {}

    def get(self, ingredient_name: str, locale: str) -> Optional[TranslationResult]:
        key = _key(ingredient_name, locale)
        with self._lock:
            stored = self._entries.get(key)
        if stored is None:
            return None
        return _persisted(key[0], stored.localized_term, stored.category, Confidence.HIGH)

    def put(self, ingredient_name: str, locale: str, result: TranslationResult) -> None:
        with self._lock:
            self._entries[_key(ingredient_name, locale)] = result

    def record_gap(self, ingredient_name: str, locale: str) -> None:
        key = _key(ingredient_name, locale)
        with self._lock:
            self.gaps[key] = self.gaps.get(key, 0) + 1


class SQLTranslationStore:
    """Backed by the translationentry and translationgap tables; one session per call."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or db.get_session

    def get(self, ingredient_name: str, locale: str) -> Optional[TranslationResult]:
        name, loc = _key(ingredient_name, locale)
        with self._session_factory() as session:
            entry = get_translation(session, name, loc)
            if entry is None:
                return None
            # Stored entries are facts already accepted once; a persisted hit is always high.
            return _persisted(name, entry.localized_term, entry.category, Confidence.HIGH)

    def put(self, ingredient_name: str, locale: str, result: TranslationResult) -> None:
        name, loc = _key(ingredient_name, locale)
        with self._session_factory() as session:
            upsert_translation(
                session,
                english_name=name,
                locale=loc,
                localized_term=result.localized_term,
                category=result.category,
                confidence=result.confidence.value,
                source=result.source.value,
            )

    def record_gap(self, ingredient_name: str, locale: str) -> None:
        name, loc = _key(ingredient_name, locale)
        with self._session_factory() as session:
            record_translation_gap(session, name, loc)
