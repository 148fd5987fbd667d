"""
Ingredient name -> localized store search term.

Tiers are tried in order until one answers: persisted dictionary, built-in
dictionary, external translator, and finally an untranslated passthrough.
Resolution never raises; a failing tier is logged and skipped.
"""

import threading
from typing import Optional, Protocol, Sequence

from recipe_cost.logging import get_logger
from recipe_cost.services.confidence import Confidence
from recipe_cost.services.translation.dictionary import BuiltinDictionary, builtin_dictionary_for
from recipe_cost.services.translation.models import ExternalTranslation, TranslationResult, TranslationSource
from recipe_cost.services.translation.stores import TranslationStore

logger = get_logger(__name__)

# Locale of ingredient names as they come out of the parser.
SOURCE_LOCALE = "en"


class Translator(Protocol):
    def translate(self, text: str, locale: str) -> Optional[ExternalTranslation]:
        ...


class TranslationTier(Protocol):
    name: str

    def try_resolve(self, name: str, locale: str) -> Optional[TranslationResult]:
        ...


def clean_name(name: str) -> str:
    return " ".join((name or "").lower().split())


class PersistedTier:
    name = "persisted"

    def __init__(self, store: TranslationStore):
        self.store = store

    def try_resolve(self, name: str, locale: str) -> Optional[TranslationResult]:
        return self.store.get(name, locale)


class BuiltinTier:
    name = "builtin"

    def __init__(self) -> None:
        self._dictionaries: dict[str, Optional[BuiltinDictionary]] = {}
        self._lock = threading.Lock()

    def _dictionary(self, locale: str) -> Optional[BuiltinDictionary]:
        with self._lock:
            if locale not in self._dictionaries:
                self._dictionaries[locale] = builtin_dictionary_for(locale)
            return self._dictionaries[locale]

    def try_resolve(self, name: str, locale: str) -> Optional[TranslationResult]:
        dictionary = self._dictionary(locale)
        if dictionary is None:
            return None
        match = dictionary.lookup(name)
        if match is None:
            return None
        english, term, category = match
        return TranslationResult(
            english_name=english,
            localized_term=term,
            category=category,
            found=True,
            confidence=Confidence.HIGH,
            source=TranslationSource.BUILTIN,
        )


class ExternalTier:
    name = "external"

    def __init__(self, translator: Translator):
        self.translator = translator

    def try_resolve(self, name: str, locale: str) -> Optional[TranslationResult]:
        answer = self.translator.translate(name, locale)
        if answer is None or not answer.translated.strip() or answer.confidence == Confidence.FAILED:
            return None
        return TranslationResult(
            english_name=name,
            localized_term=answer.translated.strip(),
            category=answer.category or "unknown",
            found=True,
            confidence=answer.confidence,
            source=TranslationSource.EXTERNAL,
        )


def build_tiers(
    store: Optional[TranslationStore] = None, translator: Optional[Translator] = None
) -> list[TranslationTier]:
    tiers: list[TranslationTier] = []
    if store is not None:
        tiers.append(PersistedTier(store))
    tiers.append(BuiltinTier())
    if translator is not None:
        tiers.append(ExternalTier(translator))
    return tiers


class TranslationResolver:
    """
    Resolves ingredient names through the configured tiers.

    Positive hits are memoized for the life of the resolver; misses are not, so a
    transient external failure is retried on the next lookup. Writing hits back to
    the persisted store is left to the caller.
    """

    def __init__(self, tiers: Sequence[TranslationTier]):
        self.tiers = list(tiers)
        self._memo: dict[tuple[str, str], TranslationResult] = {}
        self._lock = threading.Lock()

    def resolve(self, ingredient_name: str, locale: str) -> TranslationResult:
        name = clean_name(ingredient_name)
        locale = (locale or SOURCE_LOCALE).lower()
        if not name:
            return _passthrough(name)
        if locale == SOURCE_LOCALE:
            # Names are already English; the search term is the name itself.
            return TranslationResult(
                english_name=name,
                localized_term=name,
                category="unknown",
                found=True,
                confidence=Confidence.HIGH,
                source=TranslationSource.NONE,
            )

        key = (name, locale)
        with self._lock:
            memoized = self._memo.get(key)
        if memoized is not None:
            return memoized

        for tier in self.tiers:
            try:
                result = tier.try_resolve(name, locale)
            except Exception as exc:  # noqa: BLE001 - a tier failure falls through to the next tier
                logger.warning("translation.tier.error tier=%s name=%s locale=%s error=%s", tier.name, name, locale, exc)
                continue
            if result is not None and result.found:
                logger.debug(
                    "translation.hit tier=%s name=%s locale=%s term=%s",
                    tier.name,
                    name,
                    locale,
                    result.localized_term,
                )
                with self._lock:
                    self._memo[key] = result
                return result

        logger.info("translation.miss name=%s locale=%s", name, locale)
        return _passthrough(name)

    def clear(self) -> None:
        with self._lock:
            self._memo.clear()


def _passthrough(name: str) -> TranslationResult:
    return TranslationResult(
        english_name=name,
        localized_term=name,
        category="unknown",
        found=False,
        confidence=Confidence.LOW,
        source=TranslationSource.NONE,
    )
