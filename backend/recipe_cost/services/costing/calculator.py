"""
Recipe cost from free-text ingredient lines.

Each line is parsed, translated to a store search term, priced and converted into
the price's unit. Amounts stay unrounded until to_dict(); the breakdown keeps the
input order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.services.confidence import SCORES, Confidence, from_score, lowest
from recipe_cost.services.parsing.ingredient_parser import IngredientParser, ParsedIngredient
from recipe_cost.services.parsing.units import CanonicalUnit, UnitFamily
from recipe_cost.services.pricing.aggregator import PriceAggregator, PriceQuote
from recipe_cost.services.pricing.reference_prices import minor_units
from recipe_cost.services.translation.models import TranslationResult, TranslationSource
from recipe_cost.services.translation.resolver import SOURCE_LOCALE, TranslationResolver
from recipe_cost.services.translation.stores import TranslationStore
from recipe_cost.utils.timing import time_span, utcnow

logger = get_logger(__name__)


class InvalidRecipeInput(ValueError):
    """The caller broke the contract: no ingredients or non-positive servings."""


def round_money(amount: float, currency: str) -> float:
    exponent = Decimal(1).scaleb(-minor_units(currency))
    return float(Decimal(str(amount)).quantize(exponent, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class IngredientCost:
    original_text: str
    parsed: ParsedIngredient
    translation: TranslationResult
    quote: PriceQuote
    quantity_in_price_unit: float
    cost: float
    density_approximated: bool
    confidence: Confidence

    def to_dict(self, currency: str) -> dict:
        return {
            "original_text": self.original_text,
            "ingredient_name": self.parsed.ingredient_name,
            "search_term": self.translation.localized_term,
            "parsed": self.parsed.to_dict(),
            "translation": self.translation.to_dict(),
            "price": self.quote.to_dict(),
            "quantity_in_price_unit": self.quantity_in_price_unit,
            "cost": round_money(self.cost, currency),
            "density_approximated": self.density_approximated,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class ConfidenceSummary:
    overall: Confidence
    counts: Mapping[str, int]
    fallback_prices: int
    default_prices: int
    parse_fallbacks: int
    untranslated: int
    density_approximations: int

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.value,
            "counts": dict(self.counts),
            "fallback_prices": self.fallback_prices,
            "default_prices": self.default_prices,
            "parse_fallbacks": self.parse_fallbacks,
            "untranslated": self.untranslated,
            "density_approximations": self.density_approximations,
        }


@dataclass(frozen=True)
class RecipeCostResult:
    total_cost: float
    cost_per_serving: float
    currency: str
    country: str
    servings: int
    ingredient_breakdown: tuple[IngredientCost, ...]
    confidence_summary: ConfidenceSummary
    calculated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "total_cost": round_money(self.total_cost, self.currency),
            "cost_per_serving": round_money(self.cost_per_serving, self.currency),
            "currency": self.currency,
            "country": self.country,
            "servings": self.servings,
            "ingredient_breakdown": [item.to_dict(self.currency) for item in self.ingredient_breakdown],
            "confidence_summary": self.confidence_summary.to_dict(),
            "calculated_at": self.calculated_at.isoformat(),
        }


class CalculationRecorder(Protocol):
    def record(self, result: RecipeCostResult, recipe_ref: Optional[str] = None, recipe_name: Optional[str] = None) -> None:
        ...


def summarize(items: Sequence[IngredientCost]) -> ConfidenceSummary:
    counts = {level.value: 0 for level in Confidence}
    for item in items:
        counts[item.confidence.value] += 1
    total = sum(item.cost for item in items)
    if total > 0:
        score = sum(SCORES[item.confidence] * item.cost for item in items) / total
    else:
        score = sum(SCORES[item.confidence] for item in items) / len(items)
    return ConfidenceSummary(
        overall=from_score(score),
        counts=counts,
        fallback_prices=sum(1 for i in items if i.quote.is_fallback and not i.quote.used_default_price),
        default_prices=sum(1 for i in items if i.quote.used_default_price),
        parse_fallbacks=sum(1 for i in items if i.parsed.used_fallback),
        untranslated=sum(1 for i in items if not i.translation.found),
        density_approximations=sum(1 for i in items if i.density_approximated),
    )


class CostCalculator:
    def __init__(
        self,
        parser: IngredientParser,
        resolver: TranslationResolver,
        aggregator: PriceAggregator,
        translation_store: Optional[TranslationStore] = None,
        recorder: Optional[CalculationRecorder] = None,
        default_country: Optional[str] = None,
        default_servings: Optional[int] = None,
        country_locales: Optional[Mapping[str, str]] = None,
        max_workers: Optional[int] = None,
    ):
        self.parser = parser
        self.resolver = resolver
        self.aggregator = aggregator
        self.translation_store = translation_store
        self.recorder = recorder
        self.default_country = (default_country or settings.default_country).upper()
        self.default_servings = default_servings or settings.default_servings
        locales = settings.country_locales if country_locales is None else country_locales
        self.country_locales = {code.upper(): locale for code, locale in locales.items()}
        self.max_workers = max_workers or settings.ingredient_batch_max_workers

    def locale_for(self, country: str) -> str:
        return self.country_locales.get(country.upper(), SOURCE_LOCALE)

    def calculate(
        self,
        ingredient_lines: Iterable[str],
        country: Optional[str] = None,
        servings: Optional[int] = None,
        recipe_ref: Optional[str] = None,
        recipe_name: Optional[str] = None,
    ) -> RecipeCostResult:
        lines = self._validate_lines(ingredient_lines)
        servings = self._validate_servings(servings)
        country = (country or self.default_country).strip().upper()
        locale = self.locale_for(country)

        with time_span("recipe.calculate", lines=len(lines), country=country):
            workers = min(self.max_workers, len(lines))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingredient") as pool:
                items = tuple(pool.map(lambda line: self.cost_ingredient(line, country, locale), lines))

        total = sum(item.cost for item in items)
        result = RecipeCostResult(
            total_cost=total,
            cost_per_serving=total / servings,
            currency=self.aggregator.reference_prices.currency_for(country),
            country=country,
            servings=servings,
            ingredient_breakdown=items,
            confidence_summary=summarize(items),
        )
        logger.info(
            "recipe.cost total=%.4f per_serving=%.4f currency=%s servings=%s confidence=%s",
            result.total_cost,
            result.cost_per_serving,
            result.currency,
            servings,
            result.confidence_summary.overall.value,
        )
        self._record(result, recipe_ref, recipe_name)
        return result

    def cost_ingredient(self, line: str, country: str, locale: str) -> IngredientCost:
        parsed = self.parser.parse(line)
        translation, quote = self.quote_ingredient(parsed.ingredient_name, country, locale)
        quantity, density_approximated = self.convert_quantity(parsed, quote.unit, translation.english_name)
        levels = [quote.confidence, translation.confidence]
        if parsed.used_fallback:
            levels.append(Confidence.LOW)
        return IngredientCost(
            original_text=line,
            parsed=parsed,
            translation=translation,
            quote=quote,
            quantity_in_price_unit=quantity,
            cost=quantity * quote.price_per_unit,
            density_approximated=density_approximated,
            confidence=lowest(levels),
        )

    def quote_ingredient(
        self, ingredient_name: str, country: Optional[str] = None, locale: Optional[str] = None
    ) -> tuple[TranslationResult, PriceQuote]:
        country = (country or self.default_country).upper()
        locale = locale or self.locale_for(country)
        translation = self.resolver.resolve(ingredient_name, locale)
        self._remember_translation(ingredient_name, locale, translation)
        quote = self.aggregator.get_unit_price(translation.localized_term, country, translation.english_name)
        return translation, quote

    def convert_quantity(
        self, parsed: ParsedIngredient, price_unit: CanonicalUnit, english_name: Optional[str] = None
    ) -> tuple[float, bool]:
        """
        Parsed quantity expressed in the price's unit, plus whether the 1:1
        mass/volume density approximation was applied.
        """
        have = parsed.normalized_unit
        if have == price_unit:
            return parsed.normalized_quantity, False

        if price_unit == CanonicalUnit.PIECE:
            if parsed.unit_family == UnitFamily.COUNT:
                unit = self.parser.units.lookup(parsed.raw_unit)
                return parsed.quantity * (unit.factor_to_canonical if unit else 1.0), False
            per_item_kg, _ = self.parser.mass_estimates.estimate(english_name or parsed.ingredient_name)
            # Liter quantities reach kg through the 1:1 density approximation.
            return parsed.normalized_quantity / per_item_kg, have == CanonicalUnit.LITER

        if have == CanonicalUnit.PIECE:
            per_item_kg, _ = self.parser.mass_estimates.estimate(english_name or parsed.ingredient_name)
            return parsed.normalized_quantity * per_item_kg, price_unit == CanonicalUnit.LITER

        # kg <-> liter at 1 kg per liter; a known simplification, flagged on the entry.
        return parsed.normalized_quantity, True

    def _validate_lines(self, ingredient_lines: Iterable[str]) -> list[str]:
        if ingredient_lines is None or isinstance(ingredient_lines, str):
            raise InvalidRecipeInput("ingredients must be a list of text lines")
        lines = []
        for line in ingredient_lines:
            if not isinstance(line, str):
                raise InvalidRecipeInput(f"ingredient lines must be text, got {type(line).__name__}")
            if line.strip():
                lines.append(line.strip())
        if not lines:
            raise InvalidRecipeInput("recipe has no ingredients")
        return lines

    def _validate_servings(self, servings: Optional[int]) -> int:
        if servings is None:
            return self.default_servings
        if isinstance(servings, bool) or not isinstance(servings, int) or servings <= 0:
            raise InvalidRecipeInput(f"servings must be a positive integer, got {servings!r}")
        return servings

    def _remember_translation(self, ingredient_name: str, locale: str, translation: TranslationResult) -> None:
        if self.translation_store is None or locale == SOURCE_LOCALE or not ingredient_name.strip():
            return
        try:
            if translation.found and translation.source in (TranslationSource.BUILTIN, TranslationSource.EXTERNAL):
                self.translation_store.put(ingredient_name, locale, translation)
            elif not translation.found:
                self.translation_store.record_gap(ingredient_name, locale)
        except Exception as exc:  # noqa: BLE001 - dictionary upkeep never fails a calculation
            logger.warning("translation.store.write_failed name=%s locale=%s error=%s", ingredient_name, locale, exc)

    def _record(self, result: RecipeCostResult, recipe_ref: Optional[str], recipe_name: Optional[str]) -> None:
        if self.recorder is None:
            return
        try:
            self.recorder.record(result, recipe_ref=recipe_ref, recipe_name=recipe_name)
        except Exception as exc:  # noqa: BLE001 - history is best effort
            logger.warning("recipe.history.write_failed error=%s", exc)
