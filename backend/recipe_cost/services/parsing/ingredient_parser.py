import re
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

from recipe_cost.logging import get_logger
from recipe_cost.services.parsing.mass_estimates import MASS_ESTIMATE_TABLE, MassEstimateTable
from recipe_cost.services.parsing.units import UNIT_TABLE, CanonicalUnit, UnitFamily, UnitTable

logger = get_logger(__name__)

DEFAULT_UNIT = "piece"

UNICODE_FRACTIONS = {
    "½": 0.5,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 0.25,
    "¾": 0.75,
    "⅕": 0.2,
    "⅙": 1 / 6,
    "⅛": 0.125,
}

# Descriptive and preparation words removed from the ingredient name.
STOP_WORDS = (
    "fresh", "freshly", "dried", "frozen", "canned", "tinned",
    "chopped", "diced", "minced", "crushed", "peeled", "sliced", "grated", "shredded",
    "cubed", "halved", "quartered", "beaten", "melted", "softened", "trimmed", "skinned",
    "finely", "roughly", "coarsely", "thinly", "thickly",
    "large", "medium", "small", "free-range", "organic", "raw", "cooked",
    "whole", "ground", "skinless", "boneless",
)
_STOP_WORDS_RE = re.compile(
    r"(?<![\w-])(?:" + "|".join(re.escape(w) for w in sorted(STOP_WORDS, key=len, reverse=True)) + r")(?![\w-])",
    re.IGNORECASE,
)

# Integer, decimal, simple or mixed fraction; mixed first so "1 1/2" is not read as "1".
NUMBER = r"\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:[.,]\d+)?"


@dataclass(frozen=True)
class ParsedIngredient:
    original_text: str
    quantity: float
    raw_unit: str
    unit_family: UnitFamily
    ingredient_name: str
    normalized_quantity: float
    normalized_unit: CanonicalUnit
    parse_succeeded: bool
    used_fallback: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data["unit_family"] = self.unit_family.value
        data["normalized_unit"] = self.normalized_unit.value
        return data


class _Extraction(NamedTuple):
    quantity_text: Optional[str]
    unit: str
    rest: str


class PatternRule(NamedTuple):
    """One grammar the parser tries; rules are evaluated strictly in list order."""

    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], _Extraction]


def parse_quantity(text: Optional[str]) -> float:
    """Parse '2', '2.5', '2,5', '1/2' or '1 1/2'; anything unusable or non-positive becomes 1."""
    if not text:
        return 1.0
    s = text.strip().replace(",", ".")
    total = 0.0
    try:
        for part in s.split():
            if "/" in part:
                num, den = part.split("/")
                total += float(num) / float(den)
            else:
                total += float(part)
    except (ValueError, ZeroDivisionError):
        return 1.0
    if total <= 0:
        return 1.0
    return total


def normalize_fractions(text: str) -> str:
    """Replace unicode fraction characters with decimals ('1½' -> '1.5', '½' -> '0.5')."""
    for char, value in UNICODE_FRACTIONS.items():
        if char not in text:
            continue
        text = re.sub(
            r"(\d+)\s*" + re.escape(char),
            lambda m: f"{float(m.group(1)) + value:g}",
            text,
        )
        text = text.replace(char, f"{value:g}")
    return text


def _strip_descriptors(text: str) -> str:
    text = _STOP_WORDS_RE.sub(" ", text)
    text = re.sub(r"^\s*(?:of|x)\s+", "", text, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", text).strip(" ,;.-")


def clean_ingredient_name(rest: str) -> str:
    """
    Strip bracketed notes, a trailing comma note and every descriptive word.
    "Beef, cut into cubes" -> "Beef"; "boneless, skinless Chicken" -> "Chicken".
    Falls back to the raw rest when nothing remains.
    """
    text = re.sub(r"\s*\([^)]*\)?", "", rest)
    head, _, note = text.partition(",")
    cleaned = _strip_descriptors(head) or _strip_descriptors(note)
    return cleaned or " ".join(rest.split())


def _build_rules(units: UnitTable) -> Tuple[PatternRule, ...]:
    measured = units.alias_pattern(UnitFamily.MASS, UnitFamily.VOLUME)
    small = units.alias_pattern(UnitFamily.SMALL_QUANTITY)
    counted = units.alias_pattern(UnitFamily.COUNT)
    return (
        PatternRule(
            "explicit_unit",
            re.compile(rf"^(?P<qty>{NUMBER})\s*(?P<unit>{measured})\s+(?P<rest>.+)$", re.IGNORECASE),
            lambda m: _Extraction(m.group("qty"), m.group("unit"), m.group("rest")),
        ),
        PatternRule(
            "small_quantity",
            re.compile(rf"^(?:(?P<qty>{NUMBER})\s*)?(?P<unit>{small})\s+(?P<rest>.+)$", re.IGNORECASE),
            lambda m: _Extraction(m.group("qty"), m.group("unit"), m.group("rest")),
        ),
        PatternRule(
            "count_unit",
            re.compile(rf"^(?P<qty>{NUMBER})\s*(?P<unit>{counted})\s+(?P<rest>.+)$", re.IGNORECASE),
            lambda m: _Extraction(m.group("qty"), m.group("unit"), m.group("rest")),
        ),
        PatternRule(
            "bare_count",
            re.compile(rf"^(?P<qty>{NUMBER})\s+(?P<rest>.+)$", re.IGNORECASE),
            lambda m: _Extraction(m.group("qty"), DEFAULT_UNIT, m.group("rest")),
        ),
        PatternRule(
            "name_only",
            re.compile(r"^(?P<rest>.+)$"),
            lambda m: _Extraction(None, DEFAULT_UNIT, m.group("rest")),
        ),
    )


class IngredientParser:
    """Turns a free-text ingredient line into a ParsedIngredient. Never raises."""

    def __init__(self, units: UnitTable = UNIT_TABLE, mass_estimates: MassEstimateTable = MASS_ESTIMATE_TABLE):
        self.units = units
        self.mass_estimates = mass_estimates
        self.rules = _build_rules(units)

    def parse(self, text: str) -> ParsedIngredient:
        original = text.strip() if isinstance(text, str) else ""
        prepared = " ".join(normalize_fractions(original).split())
        if prepared:
            for rule in self.rules:
                match = rule.pattern.match(prepared)
                if match:
                    return self._from_extraction(original, rule.extract(match))
        logger.debug("parser.fallback text=%r", text)
        return self._fallback(original)

    def parse_many(self, lines: Iterable[str]) -> List[ParsedIngredient]:
        return [self.parse(line) for line in lines]

    def _from_extraction(self, original: str, extraction: _Extraction) -> ParsedIngredient:
        quantity = parse_quantity(extraction.quantity_text)
        raw_unit = " ".join(extraction.unit.lower().split())
        family = self.units.family_of(raw_unit)
        name = clean_ingredient_name(extraction.rest)
        normalized_quantity, normalized_unit = self._normalize(quantity, raw_unit, family, name)
        return ParsedIngredient(
            original_text=original,
            quantity=quantity,
            raw_unit=raw_unit,
            unit_family=family,
            ingredient_name=name,
            normalized_quantity=normalized_quantity,
            normalized_unit=normalized_unit,
            parse_succeeded=True,
            used_fallback=False,
        )

    def _normalize(
        self, quantity: float, raw_unit: str, family: UnitFamily, name: str
    ) -> Tuple[float, CanonicalUnit]:
        if family in (UnitFamily.MASS, UnitFamily.VOLUME, UnitFamily.SMALL_QUANTITY):
            return self.units.to_canonical(quantity, raw_unit)
        # Counted items are priced by weight: convert via the per-item mass estimate.
        per_item_kg, _ = self.mass_estimates.estimate(name)
        unit = self.units.lookup(raw_unit)
        pieces = quantity * (unit.factor_to_canonical if unit else 1.0)
        return pieces * per_item_kg, CanonicalUnit.KG

    def _fallback(self, original: str) -> ParsedIngredient:
        return ParsedIngredient(
            original_text=original,
            quantity=1.0,
            raw_unit=DEFAULT_UNIT,
            unit_family=UnitFamily.UNKNOWN,
            ingredient_name=original,
            normalized_quantity=self.mass_estimates.default_kg,
            normalized_unit=CanonicalUnit.KG,
            parse_succeeded=False,
            used_fallback=True,
        )


ingredient_parser = IngredientParser()
