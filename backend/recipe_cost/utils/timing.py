"""Clock helpers and timing spans for price fetches and recipe calculations."""

import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

from recipe_cost.logging import get_logger

logger = get_logger(__name__)

# Prefix for all timing logs so they stand out and are easy to grep
_TIMING_PREFIX = "[TIMING]"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def age_of(timestamp: datetime, now: Optional[datetime] = None) -> timedelta:
    return (now or utcnow()) - timestamp


def format_duration(ms: int) -> str:
    """Return human-readable duration: e.g. 12500 -> '12.5s', 750 -> '750ms'."""
    if ms >= 1000:
        return f"{ms / 1000:.1f}s"
    return f"{ms}ms"


class Span:
    """Elapsed time for one named block; readable while the block is still running."""

    def __init__(self, name: str):
        self.name = name
        self._start = time.perf_counter()
        self._elapsed_ms: Optional[int] = None

    def finish(self) -> int:
        if self._elapsed_ms is None:
            self._elapsed_ms = int((time.perf_counter() - self._start) * 1000)
        return self._elapsed_ms

    @property
    def elapsed_ms(self) -> int:
        if self._elapsed_ms is not None:
            return self._elapsed_ms
        return int((time.perf_counter() - self._start) * 1000)


@contextmanager
def time_span(name: str, **extra: object) -> Iterator[Span]:
    """Context manager for timing a block with optional extra log fields."""
    span = Span(name)
    try:
        yield span
    finally:
        elapsed = span.finish()
        parts = [f"elapsed_ms={elapsed}", f"({format_duration(elapsed)})"] + [
            f"{k}={v}" for k, v in extra.items()
        ]
        logger.info("%s %s %s", _TIMING_PREFIX, name, " ".join(parts))
