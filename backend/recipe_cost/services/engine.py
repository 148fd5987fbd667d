"""Process-wide wiring of the cost engine and the operations the API and workers call."""

from functools import lru_cache
from typing import Iterable, Optional

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.services.costing.calculator import CostCalculator, RecipeCostResult
from recipe_cost.services.costing.history import SQLCalculationHistory
from recipe_cost.services.llm.translator import LLMTranslator
from recipe_cost.services.parsing.ingredient_parser import ParsedIngredient, ingredient_parser
from recipe_cost.services.pricing.aggregator import PriceAggregator
from recipe_cost.services.pricing.cache import PriceCache, SQLPriceStore
from recipe_cost.services.pricing.sources import build_price_sources
from recipe_cost.services.translation.resolver import TranslationResolver, build_tiers
from recipe_cost.services.translation.stores import SQLTranslationStore

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_price_cache() -> PriceCache:
    return PriceCache(SQLPriceStore())


@lru_cache(maxsize=1)
def get_cost_calculator() -> CostCalculator:
    translation_store = SQLTranslationStore()
    resolver = TranslationResolver(build_tiers(store=translation_store, translator=LLMTranslator()))
    aggregator = PriceAggregator(build_price_sources(settings.price_sources), get_price_cache())
    recorder = SQLCalculationHistory() if settings.record_calculations else None
    logger.info(
        "engine.configured sources=%s country=%s record_calculations=%s",
        ",".join(aggregator.source_ids),
        settings.default_country,
        settings.record_calculations,
    )
    return CostCalculator(
        parser=ingredient_parser,
        resolver=resolver,
        aggregator=aggregator,
        translation_store=translation_store,
        recorder=recorder,
    )


def calculate_recipe_cost(
    ingredients: Iterable[str],
    country: Optional[str] = None,
    servings: Optional[int] = None,
) -> RecipeCostResult:
    return get_cost_calculator().calculate(ingredients, country=country, servings=servings)


def parse_ingredient(text: str) -> ParsedIngredient:
    return ingredient_parser.parse(text)
