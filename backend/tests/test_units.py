import pytest

from recipe_cost.services.parsing.mass_estimates import DEFAULT_ITEM_MASS_KG, MASS_ESTIMATE_TABLE, MassEstimateTable
from recipe_cost.services.parsing.units import (
    UNIT_TABLE,
    CanonicalUnit,
    UnitDefinition,
    UnitFamily,
    UnitTable,
)


def test_lookup_is_case_and_whitespace_insensitive():
    assert UNIT_TABLE.lookup("TBSP") is UNIT_TABLE.lookup("tablespoon")
    assert UNIT_TABLE.lookup("FL  OZ").family == UnitFamily.VOLUME
    assert UNIT_TABLE.lookup("nonsense") is None
    assert UNIT_TABLE.family_of("nonsense") == UnitFamily.UNKNOWN


def test_every_family_converts_to_one_canonical_unit():
    canonical = {}
    for unit in UNIT_TABLE.units:
        canonical.setdefault(unit.family, set()).add(unit.canonical_unit)
    assert all(len(units) == 1 for units in canonical.values())
    assert canonical[UnitFamily.MASS] == {CanonicalUnit.KG}
    assert canonical[UnitFamily.VOLUME] == {CanonicalUnit.LITER}
    assert canonical[UnitFamily.SMALL_QUANTITY] == {CanonicalUnit.KG}
    assert canonical[UnitFamily.COUNT] == {CanonicalUnit.PIECE}


def test_overlapping_aliases_are_rejected():
    with pytest.raises(ValueError):
        UnitTable(
            [
                UnitDefinition(frozenset({"t", "tbsp"}), UnitFamily.VOLUME, 0.0148),
                UnitDefinition(frozenset({"T"}), UnitFamily.MASS, 0.001),
            ]
        )


@pytest.mark.parametrize(
    "symbol,quantity,expected",
    [
        ("g", 250, 0.25),
        ("kg", 2, 2.0),
        ("lb", 1, 0.454),
        ("ml", 200, 0.2),
        ("cup", 2, 0.474),
        ("tsp", 1, 0.00493),
        ("pinch", 1, 0.001),
        ("dash", 2, 0.012),
    ],
)
def test_to_canonical(symbol, quantity, expected):
    value, _ = UNIT_TABLE.to_canonical(quantity, symbol)
    assert value == pytest.approx(expected)


def test_kg_gram_round_trip():
    for kg in (0.001, 0.25, 1.0, 3.7, 12.345):
        grams = UNIT_TABLE.from_canonical(kg, "g")
        back, unit = UNIT_TABLE.to_canonical(grams, "g")
        assert unit == CanonicalUnit.KG
        assert abs(back - kg) < 1e-9


def test_conversion_factor_only_within_canonical_unit():
    assert UNIT_TABLE.conversion_factor("kg", "g") == pytest.approx(1000)
    assert UNIT_TABLE.conversion_factor("tbsp", "tsp") == pytest.approx(0.0148 / 0.00493)
    assert UNIT_TABLE.conversion_factor("kg", "l") is None


@pytest.mark.parametrize(
    "text,amount,canonical",
    [
        ("500g", 500, CanonicalUnit.KG),
        ("10pcs", 10, CanonicalUnit.PIECE),
        ("kg", 1, CanonicalUnit.KG),
        ("liter", 1, CanonicalUnit.LITER),
        ("per kg", 1, CanonicalUnit.KG),
        ("€/l", 1, CanonicalUnit.LITER),
        ("1,5 l", 1.5, CanonicalUnit.LITER),
        ("loaf", 1, CanonicalUnit.PIECE),
    ],
)
def test_parse_pack_unit(text, amount, canonical):
    parsed = UNIT_TABLE.parse_pack_unit(text)
    assert parsed is not None
    assert parsed[0] == pytest.approx(amount)
    assert parsed[1].canonical_unit == canonical


def test_parse_pack_unit_unknown():
    assert UNIT_TABLE.parse_pack_unit("crate") is None
    assert UNIT_TABLE.parse_pack_unit("") is None


def test_mass_estimates_match_exact_then_substring():
    assert MASS_ESTIMATE_TABLE.lookup("carrot") == 0.07
    assert MASS_ESTIMATE_TABLE.lookup("Carrots") == 0.07
    # longest key wins over its suffix
    assert MASS_ESTIMATE_TABLE.lookup("red onion") == 0.15
    assert MASS_ESTIMATE_TABLE.lookup("cherry tomatoes") == 0.015
    assert MASS_ESTIMATE_TABLE.lookup("garlic clove") == 0.005
    # name contained in a key
    assert MASS_ESTIMATE_TABLE.lookup("aubergin") == 0.3


def test_mass_estimate_default():
    table = MassEstimateTable({"egg": 0.06})
    assert table.estimate("dragon fruit") == (DEFAULT_ITEM_MASS_KG, False)
    assert table.estimate("egg") == (0.06, True)
    assert table.lookup("") is None
