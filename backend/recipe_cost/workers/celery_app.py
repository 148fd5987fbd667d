from celery import Celery

from recipe_cost.config import settings
from recipe_cost.logging import configure_logging, get_logger


celery_app = Celery("recipe_cost", broker=settings.redis_url, backend=settings.redis_url)
celery_app.conf.task_routes = {"recipe_cost.workers.tasks.*": {"queue": "celery"}}
celery_app.conf.worker_concurrency = settings.celery_worker_concurrency

# Celery Beat: drop price snapshots past the retention window once a day
celery_app.conf.beat_schedule = {
    "prune-price-observations": {
        "task": "recipe_cost.workers.tasks.prune_price_observations",
        "schedule": 86400.0,  # 24 hours in seconds
        "options": {"queue": "celery"},
    },
}

# Import tasks so they are registered with the worker
from recipe_cost.workers import tasks  # noqa: F401,E402

configure_logging()
logger = get_logger(__name__)
logger.info(
    "celery.configured broker=%s worker_concurrency=%s retention_days=%s",
    settings.redis_url,
    settings.celery_worker_concurrency,
    settings.price_history_days,
)
