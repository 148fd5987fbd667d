import pytest

from conftest import FakeSource
from recipe_cost.services import engine
from recipe_cost.services.parsing.units import CanonicalUnit
from recipe_cost.services.pricing.sources import SourcePrice


def test_parse_ingredient():
    parsed = engine.parse_ingredient("200ml Red Wine")
    assert parsed.normalized_unit == CanonicalUnit.LITER
    assert parsed.normalized_quantity == pytest.approx(0.2)


def test_calculate_recipe_cost(monkeypatch, make_calculator):
    calculator = make_calculator(sources=[FakeSource("selver", {"sool": SourcePrice(0.80, "kg")})])
    monkeypatch.setattr(engine, "get_cost_calculator", lambda: calculator)

    result = engine.calculate_recipe_cost(["500g Salt", "1kg Beef"], country="EE", servings=2)

    assert result.total_cost == pytest.approx(0.40 + 12.99)
    assert result.cost_per_serving == pytest.approx(result.total_cost / 2)
    assert [item.original_text for item in result.ingredient_breakdown] == ["500g Salt", "1kg Beef"]
