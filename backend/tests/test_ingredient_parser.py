import pytest

from recipe_cost.services.parsing.ingredient_parser import (
    STOP_WORDS,
    IngredientParser,
    clean_ingredient_name,
    normalize_fractions,
    parse_quantity,
)
from recipe_cost.services.parsing.mass_estimates import MASS_ESTIMATE_TABLE
from recipe_cost.services.parsing.units import UNIT_TABLE, CanonicalUnit, UnitFamily

parser = IngredientParser()


def test_parse_kg_beef():
    parsed = parser.parse("1kg Beef")
    assert parsed.quantity == 1
    assert parsed.raw_unit == "kg"
    assert "Beef" in parsed.ingredient_name
    assert parsed.normalized_quantity == pytest.approx(1)
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.parse_succeeded
    assert not parsed.used_fallback


def test_parse_ml_red_wine():
    parsed = parser.parse("200ml Red Wine")
    assert parsed.unit_family == UnitFamily.VOLUME
    assert parsed.normalized_quantity == pytest.approx(0.2)
    assert parsed.normalized_unit == CanonicalUnit.LITER
    assert parsed.ingredient_name == "Red Wine"


def test_parse_pinch_salt():
    parsed = parser.parse("pinch Salt")
    assert parsed.quantity == 1
    assert parsed.unit_family == UnitFamily.SMALL_QUANTITY
    assert parsed.normalized_quantity == pytest.approx(0.001)
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.ingredient_name == "Salt"


def test_parse_count_uses_mass_estimate():
    parsed = parser.parse("2 chopped Carrots")
    assert parsed.unit_family == UnitFamily.COUNT
    assert parsed.quantity == 2
    assert parsed.ingredient_name == "Carrots"
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.normalized_quantity == pytest.approx(2 * MASS_ESTIMATE_TABLE.lookup("carrot"))


def test_parse_count_without_estimate_uses_default_mass():
    parsed = parser.parse("3 Rambutans")
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.normalized_quantity == pytest.approx(3 * 0.1)


@pytest.mark.parametrize("n", [1, 2.5, 250, 0.75])
@pytest.mark.parametrize("unit", ["kg", "g"])
def test_mass_lines_normalize_to_kg(n, unit):
    parsed = parser.parse(f"{n}{unit} Flour")
    factor = UNIT_TABLE.lookup(unit).factor_to_canonical
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.normalized_quantity == pytest.approx(n * factor)


def test_multi_word_unit_is_matched_before_bare_count():
    parsed = parser.parse("4 fl oz Double Cream")
    assert parsed.unit_family == UnitFamily.VOLUME
    assert parsed.raw_unit == "fl oz"
    assert parsed.ingredient_name == "Double Cream"
    assert parsed.normalized_quantity == pytest.approx(4 * 0.0296)


def test_spoon_units():
    parsed = parser.parse("2 tbs Plain Flour")
    assert parsed.unit_family == UnitFamily.VOLUME
    assert parsed.ingredient_name == "Plain Flour"
    assert parsed.normalized_quantity == pytest.approx(2 * 0.0148)


@pytest.mark.parametrize(
    "text,quantity",
    [
        ("1/2 cup Milk", 0.5),
        ("1 1/2 cup Milk", 1.5),
        ("1,5 cup Milk", 1.5),
        ("½ cup Milk", 0.5),
        ("1½ cup Milk", 1.5),
    ],
)
def test_fractional_quantities(text, quantity):
    parsed = parser.parse(text)
    assert parsed.quantity == pytest.approx(quantity)
    assert parsed.ingredient_name == "Milk"


def test_small_quantity_with_number():
    parsed = parser.parse("2 sprigs Thyme")
    assert parsed.unit_family == UnitFamily.SMALL_QUANTITY
    assert parsed.normalized_quantity == pytest.approx(0.004)


def test_all_stop_words_removed():
    parsed = parser.parse("1 large finely chopped fresh organic Onion")
    assert parsed.ingredient_name == "Onion"


def test_every_stop_word_is_stripped():
    for word in STOP_WORDS:
        assert clean_ingredient_name(f"{word} Leek") == "Leek"


def test_comma_note_and_brackets_removed():
    assert clean_ingredient_name("Beef, cut into cubes") == "Beef"
    assert clean_ingredient_name("Chicken Stock (hot)") == "Chicken Stock"
    assert clean_ingredient_name("boneless, skinless Chicken Thighs") == "Chicken Thighs"
    assert clean_ingredient_name("of Saffron") == "Saffron"


def test_name_made_only_of_stop_words_keeps_raw_text():
    assert clean_ingredient_name("chopped") == "chopped"


def test_name_only_line():
    parsed = parser.parse("Salt and Pepper")
    assert parsed.quantity == 1
    assert parsed.raw_unit == "piece"
    assert parsed.parse_succeeded
    assert parsed.ingredient_name == "Salt and Pepper"


@pytest.mark.parametrize("text", ["", "   ", None, 42])
def test_unusable_input_falls_back(text):
    parsed = parser.parse(text)
    assert parsed.quantity == 1
    assert parsed.raw_unit == "piece"
    assert parsed.unit_family == UnitFamily.UNKNOWN
    assert not parsed.parse_succeeded
    assert parsed.used_fallback
    assert parsed.normalized_unit == CanonicalUnit.KG
    assert parsed.normalized_quantity == pytest.approx(0.1)


def test_parse_quantity_defaults():
    assert parse_quantity(None) == 1
    assert parse_quantity("0") == 1
    assert parse_quantity("1/0") == 1
    assert parse_quantity("3") == 3
    assert parse_quantity("2,25") == 2.25


def test_normalize_fractions():
    assert normalize_fractions("1½ cups") == "1.5 cups"
    assert normalize_fractions("¼ tsp") == "0.25 tsp"


def test_normalized_quantity_never_negative_and_canonical():
    lines = ["1kg Beef", "pinch Salt", "2 Eggs", "Water", "3 cups Stock", "12oz Pasta", "1 dozen Eggs"]
    for parsed in parser.parse_many(lines):
        assert parsed.normalized_quantity >= 0
        assert parsed.normalized_unit in (CanonicalUnit.KG, CanonicalUnit.LITER, CanonicalUnit.PIECE)


def test_parse_returns_independent_values():
    first = parser.parse("1kg Beef")
    second = parser.parse("1kg Beef")
    assert first == second
    assert first is not second
    assert first.to_dict()["normalized_unit"] == "kg"


def test_count_units_are_recognized():
    parsed = parser.parse("1 dozen Eggs")
    assert parsed.raw_unit == "dozen"
    assert parsed.unit_family == UnitFamily.COUNT
    assert parsed.ingredient_name == "Eggs"
    assert parsed.normalized_quantity == pytest.approx(12 * MASS_ESTIMATE_TABLE.lookup("egg"))

    parsed = parser.parse("2 cans Chopped Tomatoes")
    assert parsed.raw_unit == "cans"
    assert parsed.quantity == 2
    assert parsed.ingredient_name == "Tomatoes"


def test_count_unit_needs_a_word_boundary():
    parsed = parser.parse("2 canned Tomatoes")
    assert parsed.raw_unit == "piece"
    assert parsed.ingredient_name == "Tomatoes"
