import pytest
from sqlmodel import select

from recipe_cost.services.confidence import Confidence
from recipe_cost.services.translation.dictionary import ESTONIAN_TERMS, BuiltinDictionary
from recipe_cost.services.translation.models import ExternalTranslation, TranslationResult, TranslationSource
from recipe_cost.services.translation.resolver import TranslationResolver, build_tiers
from recipe_cost.services.translation.stores import InMemoryTranslationStore, SQLTranslationStore
from recipe_cost.storage.models import TranslationEntry, TranslationGap


class FakeTranslator:
    def __init__(self, answers=None, error=None):
        self.answers = answers or {}
        self.error = error
        self.calls = []

    def translate(self, text, locale):
        self.calls.append((text, locale))
        if self.error:
            raise self.error
        return self.answers.get(text)


def _stored(term, category="dairy"):
    return TranslationResult(term, term, category, True, Confidence.HIGH, TranslationSource.BUILTIN)


def test_persisted_dictionary_wins():
    store = InMemoryTranslationStore()
    store.put("butter", "et", TranslationResult("butter", "taluvõi", "dairy", True, Confidence.HIGH, TranslationSource.BUILTIN))
    resolver = TranslationResolver(build_tiers(store=store))
    result = resolver.resolve("Butter", "et")
    assert result.localized_term == "taluvõi"
    assert result.source == TranslationSource.PERSISTED
    assert result.confidence == Confidence.HIGH


def test_builtin_dictionary_prefers_longest_key():
    resolver = TranslationResolver(build_tiers())
    result = resolver.resolve("Olive Oil", "et")
    assert result.localized_term == "oliiviõli"
    assert result.english_name == "olive oil"
    assert result.source == TranslationSource.BUILTIN
    assert result.found

    assert resolver.resolve("cherry tomatoes", "et").localized_term == "kirsitomatid"
    assert resolver.resolve("smoked bacon", "et").localized_term == "peekon"


def test_builtin_dictionary_matches_localized_terms():
    dictionary = BuiltinDictionary(ESTONIAN_TERMS)
    assert dictionary.lookup("kartul") == ("potato", "kartul", "vegetables")
    assert dictionary.lookup("kanafilee") == ("chicken breast", "kanafilee", "meat")


def test_builtin_dictionary_needs_whole_words():
    dictionary = BuiltinDictionary({"oil": ("õli", "oils")})
    assert dictionary.lookup("boiled ham") is None
    assert dictionary.lookup("sesame oil")[1] == "õli"


def test_external_translator_used_after_dictionaries():
    translator = FakeTranslator({"kohlrabi": ExternalTranslation("nuikapsas", Confidence.MEDIUM, "vegetables")})
    resolver = TranslationResolver(build_tiers(store=InMemoryTranslationStore(), translator=translator))
    result = resolver.resolve("kohlrabi", "et")
    assert result.localized_term == "nuikapsas"
    assert result.source == TranslationSource.EXTERNAL
    assert result.confidence == Confidence.MEDIUM
    assert translator.calls == [("kohlrabi", "et")]


@pytest.mark.parametrize(
    "translator",
    [
        FakeTranslator(error=TimeoutError("slow")),
        FakeTranslator(error=RuntimeError("boom")),
        FakeTranslator({"kohlrabi": ExternalTranslation("", Confidence.MEDIUM)}),
        FakeTranslator({"kohlrabi": ExternalTranslation("x", Confidence.FAILED)}),
        FakeTranslator(),
    ],
)
def test_external_failures_fall_through_to_passthrough(translator):
    resolver = TranslationResolver(build_tiers(translator=translator))
    result = resolver.resolve("Kohlrabi", "et")
    assert result.localized_term == "kohlrabi"
    assert result.english_name == "kohlrabi"
    assert not result.found
    assert result.confidence == Confidence.LOW
    assert result.source == TranslationSource.NONE


def test_failing_store_falls_through():
    class BrokenStore(InMemoryTranslationStore):
        def get(self, ingredient_name, locale):
            raise RuntimeError("db down")

    resolver = TranslationResolver(build_tiers(store=BrokenStore()))
    assert resolver.resolve("milk", "et").localized_term == "piim"


def test_resolve_is_idempotent():
    resolver = TranslationResolver(build_tiers(store=InMemoryTranslationStore()))
    assert resolver.resolve("Plain Flour", "et") == resolver.resolve("Plain Flour", "et")
    assert resolver.resolve("dragonfruit", "et") == resolver.resolve("dragonfruit", "et")


def test_only_positive_hits_are_memoized():
    translator = FakeTranslator(error=TimeoutError("slow"))
    resolver = TranslationResolver(build_tiers(translator=translator))
    resolver.resolve("kohlrabi", "et")
    translator.error = None
    translator.answers = {"kohlrabi": ExternalTranslation("nuikapsas")}
    assert resolver.resolve("kohlrabi", "et").found
    resolver.resolve("kohlrabi", "et")
    assert len(translator.calls) == 2


def test_english_locale_needs_no_translation():
    translator = FakeTranslator()
    resolver = TranslationResolver(build_tiers(translator=translator))
    result = resolver.resolve("Red Wine", "en")
    assert result.localized_term == "red wine"
    assert result.found
    assert translator.calls == []


def test_unknown_locale_has_no_builtin_dictionary():
    resolver = TranslationResolver(build_tiers())
    assert not resolver.resolve("milk", "sv").found


def test_sql_translation_store(session_factory, session):
    store = SQLTranslationStore(session_factory)
    assert store.get("milk", "et") is None
    store.put("Milk", "et", _stored("piim"))
    store.put("milk", "et", _stored("täispiim"))
    hit = store.get("MILK", "et")
    assert hit.localized_term == "täispiim"
    assert hit.source == TranslationSource.PERSISTED
    assert len(session.exec(select(TranslationEntry)).all()) == 1

    store.record_gap("Kohlrabi", "et")
    store.record_gap("kohlrabi", "et")
    gap = session.exec(select(TranslationGap)).one()
    assert gap.ingredient_name == "kohlrabi"
    assert gap.miss_count == 2
