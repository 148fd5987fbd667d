"""
Unit registry for ingredient quantities.

Every unit belongs to one family and converts to that family's single canonical unit:
mass -> kg, volume -> liter, small-quantity idioms ("pinch", "dash") -> kg, count -> piece.
Aliases are unique across the whole table; lookups are case-insensitive and collapse
inner whitespace, so "FL  OZ" and "fl oz" are the same symbol.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class UnitFamily(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"
    SMALL_QUANTITY = "small-quantity"
    UNKNOWN = "unknown"


class CanonicalUnit(str, Enum):
    KG = "kg"
    LITER = "liter"
    PIECE = "piece"


CANONICAL_UNITS = {
    UnitFamily.MASS: CanonicalUnit.KG,
    UnitFamily.VOLUME: CanonicalUnit.LITER,
    UnitFamily.SMALL_QUANTITY: CanonicalUnit.KG,
    UnitFamily.COUNT: CanonicalUnit.PIECE,
    UnitFamily.UNKNOWN: CanonicalUnit.PIECE,
}


def normalize_symbol(symbol: str) -> str:
    return re.sub(r"\s+", " ", (symbol or "").strip().lower()).rstrip(".")


@dataclass(frozen=True)
class UnitDefinition:
    symbol_aliases: frozenset
    family: UnitFamily
    factor_to_canonical: float

    @property
    def canonical_unit(self) -> CanonicalUnit:
        return CANONICAL_UNITS[self.family]


def _unit(family: UnitFamily, factor: float, *aliases: str) -> UnitDefinition:
    return UnitDefinition(frozenset(aliases), family, factor)


DEFAULT_UNITS: Tuple[UnitDefinition, ...] = (
    # Mass (kg)
    _unit(UnitFamily.MASS, 1.0, "kg", "kgs", "kilo", "kilos", "kilogram", "kilograms"),
    _unit(UnitFamily.MASS, 0.001, "g", "gr", "gram", "grams", "gramme", "grammes"),
    _unit(UnitFamily.MASS, 0.000001, "mg", "milligram", "milligrams"),
    _unit(UnitFamily.MASS, 0.0283, "oz", "ounce", "ounces"),
    _unit(UnitFamily.MASS, 0.454, "lb", "lbs", "pound", "pounds"),
    # Volume (liter)
    _unit(UnitFamily.VOLUME, 1.0, "l", "liter", "liters", "litre", "litres"),
    _unit(UnitFamily.VOLUME, 0.1, "dl", "deciliter", "deciliters", "decilitre", "decilitres"),
    _unit(UnitFamily.VOLUME, 0.01, "cl", "centiliter", "centiliters", "centilitre", "centilitres"),
    _unit(UnitFamily.VOLUME, 0.001, "ml", "milliliter", "milliliters", "millilitre", "millilitres"),
    _unit(UnitFamily.VOLUME, 0.237, "cup", "cups"),
    _unit(UnitFamily.VOLUME, 0.0148, "tbsp", "tbsps", "tbs", "tablespoon", "tablespoons"),
    _unit(UnitFamily.VOLUME, 0.00493, "tsp", "tsps", "teaspoon", "teaspoons"),
    _unit(UnitFamily.VOLUME, 0.0296, "fl oz", "fluid ounce", "fluid ounces"),
    _unit(UnitFamily.VOLUME, 0.473, "pint", "pints"),
    _unit(UnitFamily.VOLUME, 0.946, "quart", "quarts"),
    # Small-quantity idioms, as gram equivalents (kg)
    _unit(UnitFamily.SMALL_QUANTITY, 0.001, "pinch", "pinches"),
    _unit(UnitFamily.SMALL_QUANTITY, 0.006, "dash", "dashes"),
    _unit(UnitFamily.SMALL_QUANTITY, 0.002, "sprinkle", "sprinkles"),
    _unit(UnitFamily.SMALL_QUANTITY, 0.0005, "hint"),
    _unit(UnitFamily.SMALL_QUANTITY, 0.0005, "touch"),
    _unit(UnitFamily.SMALL_QUANTITY, 0.002, "sprig", "sprigs"),
    # Count (piece); packaging words appear in store price units such as "loaf" or "10pcs"
    _unit(UnitFamily.COUNT, 1.0, "piece", "pieces", "pc", "pcs", "item", "items", "each", "ea"),
    _unit(UnitFamily.COUNT, 12.0, "dozen"),
    _unit(
        UnitFamily.COUNT, 1.0,
        "loaf", "loaves", "head", "heads", "bunch", "bunches", "pack", "packs",
        "packet", "packets", "can", "cans", "jar", "jars", "bottle", "bottles",
    ),
)

_PACK_UNIT_RE = re.compile(r"^(?:(\d+(?:[.,]\d+)?)\s*)?([^\d].*)$")


class UnitTable:
    def __init__(self, units: Iterable[UnitDefinition]):
        self._units = tuple(units)
        self._by_alias: dict[str, UnitDefinition] = {}
        for unit in self._units:
            for alias in unit.symbol_aliases:
                key = normalize_symbol(alias)
                existing = self._by_alias.get(key)
                if existing is not None and existing is not unit:
                    raise ValueError(
                        f"unit alias {key!r} is registered twice "
                        f"({existing.family.value} and {unit.family.value})"
                    )
                self._by_alias[key] = unit

    @property
    def units(self) -> Tuple[UnitDefinition, ...]:
        return self._units

    def lookup(self, symbol: str) -> Optional[UnitDefinition]:
        return self._by_alias.get(normalize_symbol(symbol))

    def family_of(self, symbol: str) -> UnitFamily:
        unit = self.lookup(symbol)
        return unit.family if unit else UnitFamily.UNKNOWN

    def aliases(self, *families: UnitFamily) -> list[str]:
        """Aliases of the given families, longest first so multi-word units match before their suffixes."""
        found = [
            alias
            for alias, unit in self._by_alias.items()
            if not families or unit.family in families
        ]
        return sorted(found, key=lambda a: (-len(a), a))

    def alias_pattern(self, *families: UnitFamily) -> str:
        parts = [r"\s+".join(re.escape(word) for word in alias.split(" ")) for alias in self.aliases(*families)]
        return "|".join(parts)

    def to_canonical(self, quantity: float, symbol: str) -> Tuple[float, CanonicalUnit]:
        unit = self.lookup(symbol)
        if unit is None:
            return quantity, CanonicalUnit.PIECE
        return quantity * unit.factor_to_canonical, unit.canonical_unit

    def from_canonical(self, quantity: float, symbol: str) -> float:
        unit = self.lookup(symbol)
        if unit is None:
            raise KeyError(f"unknown unit {symbol!r}")
        return quantity / unit.factor_to_canonical

    def conversion_factor(self, from_symbol: str, to_symbol: str) -> Optional[float]:
        """Multiplier taking a quantity in from_symbol to to_symbol; None across canonical units."""
        source = self.lookup(from_symbol)
        target = self.lookup(to_symbol)
        if source is None or target is None:
            return None
        if source.canonical_unit != target.canonical_unit:
            return None
        return source.factor_to_canonical / target.factor_to_canonical

    def parse_pack_unit(self, text: str) -> Optional[Tuple[float, UnitDefinition]]:
        """
        Split a store price unit such as "500g", "10pcs", "per kg" or "€/l" into
        (amount, unit). Returns None when the unit word is unknown.
        """
        cleaned = normalize_symbol(text)
        cleaned = re.sub(r"^(?:per\s+|[^\w\s]*\s*/\s*)", "", cleaned).strip()
        match = _PACK_UNIT_RE.match(cleaned)
        if not match:
            return None
        amount = float(match.group(1).replace(",", ".")) if match.group(1) else 1.0
        unit = self.lookup(match.group(2))
        if unit is None or amount <= 0:
            return None
        return amount, unit


UNIT_TABLE = UnitTable(DEFAULT_UNITS)
