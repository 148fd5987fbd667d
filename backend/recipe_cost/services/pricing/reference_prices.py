"""
Static reference prices used when no live source answers.

Prices are in the country's currency per the quoted pack unit, which is parsed
the same way store units are ("500g", "10pcs", "loaf").
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

ESTONIA_PRICES: dict[str, Tuple[float, str]] = {
    "milk": (0.89, "liter"),
    "bread": (1.45, "loaf"),
    "butter": (2.89, "500g"),
    "eggs": (2.45, "10pcs"),
    "cheese": (8.90, "kg"),
    "chicken": (5.99, "kg"),
    "beef": (12.99, "kg"),
    "pork": (7.49, "kg"),
    "potatoes": (1.29, "kg"),
    "tomatoes": (3.49, "kg"),
    "onions": (1.19, "kg"),
    "carrots": (1.39, "kg"),
    "apples": (2.29, "kg"),
    "bananas": (1.79, "kg"),
    "rice": (2.49, "kg"),
    "pasta": (1.89, "500g"),
    "flour": (1.29, "kg"),
    "sugar": (1.49, "kg"),
    "salt": (0.79, "kg"),
    "oil": (2.99, "liter"),
}

# Grocery averages for the euro-area countries without a local store catalog.
EUROZONE_PRICES: dict[str, Tuple[float, str]] = {
    "milk": (1.10, "liter"),
    "bread": (2.50, "loaf"),
    "rice": (2.80, "kg"),
    "eggs": (3.20, "dozen"),
    "cheese": (12.00, "kg"),
    "chicken": (8.50, "kg"),
    "beef": (15.00, "kg"),
    "apples": (3.20, "kg"),
    "bananas": (2.10, "kg"),
    "oranges": (2.80, "kg"),
    "tomatoes": (4.50, "kg"),
    "potatoes": (1.80, "kg"),
    "onions": (1.50, "kg"),
    "lettuce": (1.80, "head"),
    "oil": (3.50, "liter"),
    "herbs": (2.50, "kg"),
    "garlic": (8.00, "kg"),
    "ginger": (12.00, "kg"),
    "pasta": (2.20, "kg"),
    "flour": (1.80, "kg"),
    "sugar": (1.60, "kg"),
    "salt": (0.80, "kg"),
    "pepper": (15.00, "kg"),
}

REFERENCE_PRICES: dict[str, Mapping[str, Tuple[float, str]]] = {
    "EE": ESTONIA_PRICES,
    "DE": EUROZONE_PRICES,
    "FR": EUROZONE_PRICES,
    "IT": EUROZONE_PRICES,
    "ES": EUROZONE_PRICES,
}

COUNTRY_CURRENCIES = {"EE": "EUR", "DE": "EUR", "FR": "EUR", "IT": "EUR", "ES": "EUR"}

# Decimal places of the smallest coin.
CURRENCY_MINOR_UNITS = {"EUR": 2, "USD": 2, "GBP": 2, "SEK": 2, "JPY": 0}

DEFAULT_REFERENCE_COUNTRY = "EE"
DEFAULT_CURRENCY = "EUR"


@dataclass(frozen=True)
class ReferencePrice:
    name: str
    price: float
    unit: str
    currency: str


def _singular(word: str) -> str:
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("oes") and len(word) > 4:
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 3:
        return word[:-1]
    return word


def _normalize(name: str) -> str:
    return " ".join(_singular(word) for word in re.findall(r"[a-z]+", (name or "").lower()))


class ReferencePriceTable:
    def __init__(
        self,
        tables: Mapping[str, Mapping[str, Tuple[float, str]]] = REFERENCE_PRICES,
        currencies: Mapping[str, str] = COUNTRY_CURRENCIES,
        default_country: str = DEFAULT_REFERENCE_COUNTRY,
    ):
        self._currencies = dict(currencies)
        self.default_country = default_country
        # country -> [(normalized key, original key, price, unit)], longest key first
        self._tables = {
            country: sorted(
                ((_normalize(key), key, price, unit) for key, (price, unit) in table.items()),
                key=lambda row: (-len(row[0]), row[0]),
            )
            for country, table in tables.items()
        }

    def currency_for(self, country: str) -> str:
        return self._currencies.get((country or "").upper(), DEFAULT_CURRENCY)

    def lookup(self, english_name: str, country: str) -> Optional[ReferencePrice]:
        """Exact (singular/plural-insensitive) match first, then the longest key contained in the name."""
        code = (country or "").upper()
        rows = self._tables.get(code) or self._tables.get(self.default_country) or []
        wanted = _normalize(english_name)
        if not wanted:
            return None
        currency = self.currency_for(code)
        for normalized, key, price, unit in rows:
            if normalized == wanted:
                return ReferencePrice(key, price, unit, currency)
        padded = f" {wanted} "
        for normalized, key, price, unit in rows:
            if f" {normalized} " in padded:
                return ReferencePrice(key, price, unit, currency)
        return None


def minor_units(currency: str) -> int:
    return CURRENCY_MINOR_UNITS.get((currency or "").upper(), 2)


REFERENCE_PRICE_TABLE = ReferencePriceTable()
