from datetime import timedelta

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.services.engine import get_cost_calculator, get_price_cache
from recipe_cost.utils.timing import time_span
from recipe_cost.workers.celery_app import celery_app

app_logger = get_logger(__name__)


@celery_app.task
def prune_price_observations(days_to_keep: int | None = None):
    """Delete price snapshots older than the retention window (default settings.price_history_days)."""
    days = settings.price_history_days if days_to_keep is None else days_to_keep
    if days < 0:
        raise ValueError(f"days_to_keep must be >= 0, got {days}")
    with time_span("prices.prune", days=days):
        removed = get_price_cache().prune(timedelta(days=days))
    app_logger.info("prices.prune.done days=%s removed=%s", days, removed)
    return {"removed": removed, "days_to_keep": days}


@celery_app.task(bind=True)
def warm_ingredient_prices(self, ingredient_names: list[str], country: str | None = None):
    """
    Resolve and price each ingredient so later calculations hit the cache.
    Ingredients that only reach the reference table are reported, not retried.
    """
    task_id = self.request.id
    calculator = get_cost_calculator()
    code = (country or calculator.default_country).upper()
    warmed: list[str] = []
    fallback: list[str] = []
    with time_span("prices.warm", task_id=task_id, count=len(ingredient_names), country=code):
        for name in ingredient_names:
            if not name or not name.strip():
                continue
            _, quote = calculator.quote_ingredient(name, code)
            (fallback if quote.is_fallback else warmed).append(name)
    app_logger.info(
        "prices.warm.done task_id=%s country=%s warmed=%s fallback=%s",
        task_id,
        code,
        len(warmed),
        len(fallback),
    )
    return {"status": "success", "country": code, "warmed": warmed, "fallback": fallback}
