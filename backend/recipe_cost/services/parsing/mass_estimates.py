"""
Per-item mass estimates for ingredient lines without a unit ("2 carrots", "1 onion").

Store prices are quoted per kg or liter, so a count is converted to mass before pricing.
Lookup is exact first, then substring in either direction with the longest key winning.
"""

from typing import Mapping, Optional, Tuple

# Typical mass of one item, kg
MASS_ESTIMATES_KG: dict[str, float] = {
    # Vegetables
    "carrot": 0.07,
    "onion": 0.15,
    "red onion": 0.15,
    "spring onion": 0.015,
    "shallot": 0.03,
    "leek": 0.2,
    "potato": 0.2,
    "sweet potato": 0.25,
    "tomato": 0.12,
    "cherry tomato": 0.015,
    "cucumber": 0.3,
    "courgette": 0.2,
    "zucchini": 0.2,
    "aubergine": 0.3,
    "eggplant": 0.3,
    "pepper": 0.16,
    "bell pepper": 0.16,
    "chilli": 0.015,
    "chili": 0.015,
    "garlic": 0.05,
    "garlic clove": 0.005,
    "clove": 0.005,
    "celery": 0.04,
    "celeriac": 0.6,
    "turnip": 0.15,
    "parsnip": 0.12,
    "beetroot": 0.15,
    "cabbage": 1.0,
    "lettuce": 0.4,
    "cauliflower": 0.6,
    "broccoli": 0.35,
    "mushroom": 0.02,
    "avocado": 0.17,
    "corn": 0.2,
    "bay leaf": 0.0002,
    "bay leaves": 0.0002,
    # Fruit
    "apple": 0.18,
    "banana": 0.12,
    "orange": 0.2,
    "lemon": 0.1,
    "lime": 0.07,
    "pear": 0.18,
    # Dairy and eggs
    "egg": 0.06,
    "egg yolk": 0.018,
    "egg white": 0.035,
    # Meat and fish
    "chicken breast": 0.2,
    "chicken thigh": 0.12,
    "chicken": 1.5,
    "sausage": 0.07,
    "lamb chop": 0.1,
    "pork chop": 0.2,
    "salmon fillet": 0.15,
    "fish fillet": 0.15,
    # Bakery
    "tortilla": 0.04,
    "bun": 0.06,
    "bread roll": 0.06,
    "baguette": 0.25,
}

# Applied when no estimate matches; count is never treated as a canonical unit.
DEFAULT_ITEM_MASS_KG = 0.1

# Shorter names only match as substrings of keys, never keys inside them.
_MIN_REVERSE_MATCH = 3


class MassEstimateTable:
    def __init__(self, estimates: Mapping[str, float] = MASS_ESTIMATES_KG, default_kg: float = DEFAULT_ITEM_MASS_KG):
        self._estimates = {key.lower(): kg for key, kg in estimates.items()}
        self._keys_longest_first = sorted(self._estimates, key=lambda k: (-len(k), k))
        self.default_kg = default_kg

    def lookup(self, name: str) -> Optional[float]:
        cleaned = " ".join((name or "").lower().split())
        if not cleaned:
            return None
        if cleaned in self._estimates:
            return self._estimates[cleaned]
        for key in self._keys_longest_first:
            if key in cleaned:
                return self._estimates[key]
        if len(cleaned) >= _MIN_REVERSE_MATCH:
            for key in self._keys_longest_first:
                if cleaned in key:
                    return self._estimates[key]
        return None

    def estimate(self, name: str) -> Tuple[float, bool]:
        """Return (kg per item, found)."""
        kg = self.lookup(name)
        if kg is None:
            return self.default_kg, False
        return kg, True


MASS_ESTIMATE_TABLE = MassEstimateTable()
