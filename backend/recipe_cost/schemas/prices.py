from typing import Any

from pydantic import BaseModel


class RecipeCostRequest(BaseModel):
    ingredients: list[str]
    country: str | None = None  # ISO code, e.g. "EE"; defaults to settings.default_country
    servings: int | None = None  # omitted -> default servings; <= 0 is rejected


class RecipeCostResponse(BaseModel):
    total_cost: float
    cost_per_serving: float
    currency: str
    country: str
    servings: int
    ingredient_breakdown: list[dict[str, Any]]
    confidence_summary: dict[str, Any]
    calculated_at: str
    recipe_id: str | None = None
    recipe_name: str | None = None


class IngredientPriceResponse(BaseModel):
    ingredient: str
    country: str
    translation: dict[str, Any]
    price: dict[str, Any]


class ParsedIngredientResponse(BaseModel):
    original_text: str
    quantity: float
    raw_unit: str
    unit_family: str
    ingredient_name: str
    normalized_quantity: float
    normalized_unit: str
    parse_succeeded: bool
    used_fallback: bool


class PriceSourceInfo(BaseModel):
    source_id: str
    name: str
    country: str
    description: str
    enabled: bool
    active: bool
