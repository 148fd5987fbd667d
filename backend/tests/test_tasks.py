from datetime import timedelta

import pytest

from conftest import FakeSource
from recipe_cost.services.pricing.cache import PriceObservation
from recipe_cost.services.pricing.sources import SourcePrice
from recipe_cost.utils.timing import utcnow
from recipe_cost.workers import tasks
from recipe_cost.workers.celery_app import celery_app


def test_beat_schedule_prunes_daily():
    entry = celery_app.conf.beat_schedule["prune-price-observations"]
    assert entry["task"] == "recipe_cost.workers.tasks.prune_price_observations"
    assert entry["schedule"] == 86400


def test_prune_price_observations(monkeypatch, price_cache):
    now = utcnow()
    for source_id, age in (("selver", timedelta(days=45)), ("rimi", timedelta(days=2))):
        price_cache.put(PriceObservation(source_id, "piim", "EE", 1.0, "liter", "EUR", now - age))
    monkeypatch.setattr(tasks, "get_price_cache", lambda: price_cache)

    result = tasks.prune_price_observations(30)

    assert result == {"removed": 1, "days_to_keep": 30}
    assert price_cache.get_fresh("rimi", "piim", "EE") is not None


def test_prune_defaults_to_configured_retention(monkeypatch, price_cache):
    monkeypatch.setattr(tasks, "get_price_cache", lambda: price_cache)
    monkeypatch.setattr(tasks.settings, "price_history_days", 7)
    assert tasks.prune_price_observations()["days_to_keep"] == 7


def test_prune_rejects_negative_retention(monkeypatch, price_cache):
    monkeypatch.setattr(tasks, "get_price_cache", lambda: price_cache)
    with pytest.raises(ValueError):
        tasks.prune_price_observations(-1)


def test_warm_ingredient_prices(monkeypatch, make_calculator, price_cache):
    selver = FakeSource("selver", {"piim": SourcePrice(1.0, "liter")})
    calculator = make_calculator(sources=[selver])
    monkeypatch.setattr(tasks, "get_cost_calculator", lambda: calculator)

    result = tasks.warm_ingredient_prices(["milk", "  ", "rambutan"], country="ee")

    assert result["status"] == "success"
    assert result["country"] == "EE"
    assert result["warmed"] == ["milk"]
    assert result["fallback"] == ["rambutan"]
    assert price_cache.get_fresh("selver", "piim", "EE").unit_price == 1.0
