import sys
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from recipe_cost import main
from recipe_cost.services.costing.calculator import CostCalculator
from recipe_cost.services.parsing.ingredient_parser import IngredientParser
from recipe_cost.services.pricing.aggregator import PriceAggregator
from recipe_cost.services.pricing.cache import InMemoryPriceStore, PriceCache
from recipe_cost.services.pricing.sources import SourcePrice
from recipe_cost.services.translation.resolver import TranslationResolver, build_tiers
from recipe_cost.services.translation.stores import InMemoryTranslationStore
from recipe_cost.storage import db as db_module


class FakeSource:
    """Price source answering from a dict of search term -> SourcePrice (or an exception to raise)."""

    def __init__(self, source_id, prices=None, default=None):
        self.source_id = source_id
        self.prices = prices or {}
        self.default = default
        self.calls = []

    def fetch_price(self, search_term, country):
        self.calls.append((search_term, country))
        answer = self.prices.get(search_term, self.default)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="session_factory")
def session_factory_fixture(engine):
    return lambda: Session(engine)


@pytest.fixture(name="price_cache")
def price_cache_fixture():
    return PriceCache(InMemoryPriceStore(), max_age=timedelta(hours=24))


@pytest.fixture(name="translation_store")
def translation_store_fixture():
    return InMemoryTranslationStore()


@pytest.fixture(name="make_calculator")
def make_calculator_fixture(price_cache, translation_store):
    def _make(sources=None, translator=None, recorder=None, **kwargs):
        sources = sources or [FakeSource("selver"), FakeSource("rimi")]
        resolver = TranslationResolver(build_tiers(store=translation_store, translator=translator))
        aggregator = PriceAggregator(sources, price_cache, fetch_timeout_s=2.0, default_unit_price=2.50)
        return CostCalculator(
            parser=IngredientParser(),
            resolver=resolver,
            aggregator=aggregator,
            translation_store=translation_store,
            recorder=recorder,
            default_country="EE",
            default_servings=4,
            country_locales={"EE": "et"},
            max_workers=4,
        )

    return _make


@pytest.fixture(name="client")
def client_fixture(monkeypatch, engine, make_calculator):
    def _get_session_override():
        return Session(engine)

    monkeypatch.setattr(db_module, "engine", engine)
    monkeypatch.setattr(db_module, "get_session", _get_session_override)
    monkeypatch.setattr(main, "configure_dspy", lambda: None)
    monkeypatch.setattr(main, "create_db_and_tables", lambda: None)

    calculator = make_calculator(
        sources=[
            FakeSource("selver", {"piim": SourcePrice(1.00, "liter"), "sool": SourcePrice(0.80, "kg")}),
            FakeSource("rimi", {"piim": SourcePrice(1.20, "liter")}),
        ]
    )
    monkeypatch.setattr("recipe_cost.api.prices.get_cost_calculator", lambda: calculator)
    monkeypatch.setattr("recipe_cost.api.recipes.get_cost_calculator", lambda: calculator)

    client = TestClient(main.app)
    return client
