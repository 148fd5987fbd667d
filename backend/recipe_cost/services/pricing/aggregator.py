import math
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Sequence

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.services.confidence import Confidence
from recipe_cost.services.parsing.units import UNIT_TABLE, CanonicalUnit, UnitTable
from recipe_cost.services.pricing.cache import PriceCache, PriceObservation
from recipe_cost.services.pricing.reference_prices import REFERENCE_PRICE_TABLE, ReferencePriceTable
from recipe_cost.services.pricing.sources import PriceSource
from recipe_cost.utils.timing import time_span

logger = get_logger(__name__)

FALLBACK_SOURCE = "fallback"


def _usable_price(price: object) -> bool:
    return isinstance(price, (int, float)) and math.isfinite(price) and price > 0


@dataclass(frozen=True)
class PriceQuote:
    price_per_unit: float
    unit: CanonicalUnit
    currency: str
    sources_used: tuple[str, ...]
    source_count: int
    confidence: Confidence
    cached_sources: tuple[str, ...] = field(default=())
    used_default_price: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.source_count == 0

    def to_dict(self) -> dict:
        return {
            "price_per_unit": self.price_per_unit,
            "unit": self.unit.value,
            "currency": self.currency,
            "sources_used": list(self.sources_used),
            "source_count": self.source_count,
            "confidence": self.confidence.value,
            "cached_sources": list(self.cached_sources),
            "used_default_price": self.used_default_price,
        }


class _SourceResult(NamedTuple):
    observation: PriceObservation
    cached: bool


class _CanonicalPrice(NamedTuple):
    source_id: str
    price: float
    unit: CanonicalUnit
    cached: bool


class PriceAggregator:
    """
    Unit price for one ingredient across all configured sources.

    Each source is asked through the cache first; live fetches run concurrently with
    a shared deadline and at most max_workers live fetches in flight across all
    callers. Whatever answers is normalized to canonical units and averaged;
    nothing answering falls back to the reference table, then to a flat default.
    """

    def __init__(
        self,
        sources: Sequence[PriceSource],
        cache: PriceCache,
        reference_prices: ReferencePriceTable = REFERENCE_PRICE_TABLE,
        units: UnitTable = UNIT_TABLE,
        max_workers: Optional[int] = None,
        fetch_timeout_s: Optional[float] = None,
        agreement_tolerance: Optional[float] = None,
        default_unit_price: Optional[float] = None,
    ):
        if not sources:
            raise ValueError("PriceAggregator needs at least one price source")
        self.sources = list(sources)
        self.cache = cache
        self.reference_prices = reference_prices
        self.units = units
        self.max_workers = max_workers or settings.price_fetch_max_workers
        self.fetch_timeout_s = settings.source_fetch_timeout_s if fetch_timeout_s is None else fetch_timeout_s
        self.agreement_tolerance = (
            settings.price_agreement_tolerance if agreement_tolerance is None else agreement_tolerance
        )
        self.default_unit_price = settings.default_unit_price if default_unit_price is None else default_unit_price
        # Shared by every concurrent get_unit_price call on this aggregator.
        self._live_fetches = threading.BoundedSemaphore(self.max_workers)

    @property
    def source_ids(self) -> list[str]:
        return [source.source_id for source in self.sources]

    def get_unit_price(self, ingredient_key: str, country: str, english_name: Optional[str] = None) -> PriceQuote:
        country = (country or settings.default_country).upper()
        currency = self.reference_prices.currency_for(country)
        with time_span("price.aggregate", key=ingredient_key, country=country):
            results = self._collect(ingredient_key, country)
            prices = self._canonical_prices(results, currency)
            if prices:
                return self._combine(prices, currency)
        logger.info("price.fallback key=%s name=%s country=%s", ingredient_key, english_name, country)
        return self._fallback(english_name or ingredient_key, country, currency)

    def _collect(self, ingredient_key: str, country: str) -> list[tuple[str, _SourceResult]]:
        pool = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(self.sources)),
            thread_name_prefix="price-source",
        )
        try:
            futures = OrderedDict(
                (pool.submit(self._query_source, source, ingredient_key, country), source.source_id)
                for source in self.sources
            )
            _, pending = wait(futures, timeout=self.fetch_timeout_s)
            for future in pending:
                logger.warning(
                    "price.source.timeout source=%s key=%s timeout_s=%s",
                    futures[future],
                    ingredient_key,
                    self.fetch_timeout_s,
                )
            collected = []
            # Keep configured source order for deterministic tie-breaks.
            for future, source_id in futures.items():
                if future in pending:
                    continue
                try:
                    result = future.result()
                except Exception as exc:  # noqa: BLE001 - a broken answer counts as no data
                    logger.warning("price.source.error source=%s key=%s error=%s", source_id, ingredient_key, exc)
                    continue
                if result is not None:
                    collected.append((source_id, result))
            return collected
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def _query_source(self, source: PriceSource, ingredient_key: str, country: str) -> Optional[_SourceResult]:
        cached = self.cache.get_fresh(source.source_id, ingredient_key, country)
        if cached is not None:
            logger.debug("price.cache.hit source=%s key=%s", source.source_id, ingredient_key)
            return _SourceResult(cached, True)
        try:
            with self._live_fetches:
                found = source.fetch_price(ingredient_key, country)
        except Exception as exc:  # noqa: BLE001 - one failing source must not abort the others
            logger.warning("price.source.error source=%s key=%s error=%s", source.source_id, ingredient_key, exc)
            return None
        if found is None or not found.in_stock or not _usable_price(found.price):
            logger.info("price.source.miss source=%s key=%s", source.source_id, ingredient_key)
            return None
        observation = PriceObservation(
            source_id=source.source_id,
            ingredient_key=ingredient_key,
            country=country,
            unit_price=found.price,
            price_unit=found.unit,
            currency=found.currency,
            observed_at=self.cache.clock(),
            in_stock=found.in_stock,
            source_url=found.url,
        )
        self.cache.put(observation)
        return _SourceResult(observation, False)

    def to_canonical_price(self, price: float, price_unit: str) -> Optional[tuple[float, CanonicalUnit]]:
        """2.89 per "500g" -> (5.78, kg). None when the unit is not understood."""
        parsed = self.units.parse_pack_unit(price_unit)
        if parsed is None:
            return None
        amount, unit = parsed
        return price / (amount * unit.factor_to_canonical), unit.canonical_unit

    def _canonical_prices(self, results: list[tuple[str, _SourceResult]], currency: str) -> list[_CanonicalPrice]:
        prices = []
        for source_id, result in results:
            observation = result.observation
            if observation.currency.upper() != currency:
                logger.warning(
                    "price.source.currency_mismatch source=%s got=%s expected=%s",
                    source_id,
                    observation.currency,
                    currency,
                )
                continue
            canonical = self.to_canonical_price(observation.unit_price, observation.price_unit)
            if canonical is None:
                logger.warning("price.source.unknown_unit source=%s unit=%s", source_id, observation.price_unit)
                continue
            prices.append(_CanonicalPrice(source_id, canonical[0], canonical[1], result.cached))
        return prices

    def _combine(self, prices: list[_CanonicalPrice], currency: str) -> PriceQuote:
        groups: "OrderedDict[CanonicalUnit, list[_CanonicalPrice]]" = OrderedDict()
        for price in prices:
            groups.setdefault(price.unit, []).append(price)
        # Largest group wins; on a tie the group seen first (source order) wins.
        unit, group = max(groups.items(), key=lambda item: len(item[1]))
        values = [p.price for p in group]
        mean = sum(values) / len(values)
        agree = len(values) >= 2 and (max(values) - min(values)) / mean <= self.agreement_tolerance
        if len(groups) > 1:
            logger.info("price.combine.mixed_units chosen=%s groups=%s", unit.value, [u.value for u in groups])
        return PriceQuote(
            price_per_unit=mean,
            unit=unit,
            currency=currency,
            sources_used=tuple(p.source_id for p in group),
            source_count=len(group),
            confidence=Confidence.HIGH if agree else Confidence.MEDIUM,
            cached_sources=tuple(p.source_id for p in group if p.cached),
        )

    def _fallback(self, name: str, country: str, currency: str) -> PriceQuote:
        reference = self.reference_prices.lookup(name, country)
        if reference is not None:
            canonical = self.to_canonical_price(reference.price, reference.unit)
            if canonical is not None:
                return PriceQuote(
                    price_per_unit=canonical[0],
                    unit=canonical[1],
                    currency=reference.currency,
                    sources_used=(FALLBACK_SOURCE,),
                    source_count=0,
                    confidence=Confidence.LOW,
                )
        logger.info("price.default name=%s country=%s price=%s", name, country, self.default_unit_price)
        return PriceQuote(
            price_per_unit=self.default_unit_price,
            unit=CanonicalUnit.KG,
            currency=currency,
            sources_used=(FALLBACK_SOURCE,),
            source_count=0,
            confidence=Confidence.LOW,
            used_default_price=True,
        )
