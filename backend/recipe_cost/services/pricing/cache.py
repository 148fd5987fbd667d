"""
Time-bounded cache of price observations keyed by (source, ingredient, country).

The store is injected; PriceCache only decides freshness. Stale rows stay in the
store until prune() removes them.
"""

import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from sqlmodel import Session

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.storage import db
from recipe_cost.storage.models import PriceSnapshot
from recipe_cost.storage.repositories import (
    add_price_snapshot,
    delete_price_snapshots_before,
    get_latest_price_snapshot,
)
from recipe_cost.utils.timing import age_of, utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class PriceObservation:
    source_id: str
    ingredient_key: str
    country: str
    unit_price: float
    price_unit: str
    currency: str
    observed_at: datetime
    in_stock: bool = True
    source_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.unit_price) and self.unit_price > 0):
            raise ValueError(f"unit_price must be a positive finite number, got {self.unit_price!r}")

    def is_fresh(self, max_age: timedelta, now: Optional[datetime] = None) -> bool:
        return age_of(self.observed_at, now) < max_age


def cache_key(source_id: str, ingredient_key: str, country: str) -> tuple[str, str, str]:
    return source_id, " ".join(ingredient_key.lower().split()), country.upper()


class PriceStore(Protocol):
    def get_latest(self, source_id: str, ingredient_key: str, country: str) -> Optional[PriceObservation]:
        ...

    def put(self, observation: PriceObservation) -> None:
        ...

    def delete_before(self, cutoff: datetime) -> int:
        ...


class InMemoryPriceStore:
    """Last write wins per key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[tuple[str, str, str], PriceObservation] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def get_latest(self, source_id: str, ingredient_key: str, country: str) -> Optional[PriceObservation]:
        with self._lock:
            return self._rows.get(cache_key(source_id, ingredient_key, country))

    def put(self, observation: PriceObservation) -> None:
        key = cache_key(observation.source_id, observation.ingredient_key, observation.country)
        with self._lock:
            self._rows[key] = observation

    def delete_before(self, cutoff: datetime) -> int:
        with self._lock:
            old = [key for key, obs in self._rows.items() if obs.observed_at < cutoff]
            for key in old:
                del self._rows[key]
        return len(old)


class SQLPriceStore:
    """pricesnapshot table; every write is its own transaction, the newest row wins."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or db.get_session

    def get_latest(self, source_id: str, ingredient_key: str, country: str) -> Optional[PriceObservation]:
        source_id, key, country = cache_key(source_id, ingredient_key, country)
        with self._session_factory() as session:
            row = get_latest_price_snapshot(session, source_id, key, country)
            if row is None:
                return None
            return PriceObservation(
                source_id=row.source_id,
                ingredient_key=row.ingredient_key,
                country=row.country,
                unit_price=row.unit_price,
                price_unit=row.price_unit,
                currency=row.currency,
                observed_at=row.observed_at,
                in_stock=row.in_stock,
                source_url=row.source_url,
            )

    def put(self, observation: PriceObservation) -> None:
        source_id, key, country = cache_key(observation.source_id, observation.ingredient_key, observation.country)
        with self._session_factory() as session:
            add_price_snapshot(
                session,
                PriceSnapshot(
                    source_id=source_id,
                    ingredient_key=key,
                    country=country,
                    unit_price=observation.unit_price,
                    price_unit=observation.price_unit,
                    currency=observation.currency,
                    in_stock=observation.in_stock,
                    source_url=observation.source_url,
                    observed_at=observation.observed_at,
                ),
            )

    def delete_before(self, cutoff: datetime) -> int:
        with self._session_factory() as session:
            return delete_price_snapshots_before(session, cutoff)


class PriceCache:
    def __init__(
        self,
        store: PriceStore,
        max_age: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.max_age = max_age if max_age is not None else timedelta(hours=settings.price_cache_ttl_hours)
        self.clock = clock

    def get_fresh(self, source_id: str, ingredient_key: str, country: str) -> Optional[PriceObservation]:
        """Newest observation younger than max_age, or None. Store errors count as a miss."""
        try:
            observation = self.store.get_latest(source_id, ingredient_key, country)
        except Exception as exc:  # noqa: BLE001 - a broken cache must not stop pricing
            logger.warning(
                "price.cache.read_failed source=%s key=%s country=%s error=%s",
                source_id,
                ingredient_key,
                country,
                exc,
            )
            return None
        if observation is None:
            return None
        if not observation.is_fresh(self.max_age, self.clock()):
            logger.debug(
                "price.cache.stale source=%s key=%s observed_at=%s",
                source_id,
                ingredient_key,
                observation.observed_at.isoformat(),
            )
            return None
        return observation

    def put(self, observation: PriceObservation) -> None:
        try:
            self.store.put(observation)
        except Exception as exc:  # noqa: BLE001 - the fetched price is still used
            logger.warning(
                "price.cache.write_failed source=%s key=%s error=%s",
                observation.source_id,
                observation.ingredient_key,
                exc,
            )

    def prune(self, older_than: timedelta) -> int:
        cutoff = self.clock() - older_than
        removed = self.store.delete_before(cutoff)
        logger.info("price.cache.pruned cutoff=%s removed=%s", cutoff.isoformat(), removed)
        return removed
