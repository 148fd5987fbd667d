from dataclasses import dataclass, field
from typing import Optional

import httpx

from recipe_cost.config import settings
from recipe_cost.logging import get_logger

logger = get_logger(__name__)

MAX_INGREDIENT_SLOTS = 20
DEFAULT_CATALOG_SERVINGS = 4


class RecipeNotFound(LookupError):
    pass


@dataclass(frozen=True)
class CatalogRecipe:
    recipe_id: str
    name: str
    ingredients: tuple[str, ...]
    servings: int = DEFAULT_CATALOG_SERVINGS
    category: Optional[str] = None
    area: Optional[str] = None
    thumbnail: Optional[str] = None
    tags: tuple[str, ...] = field(default=())


def recipe_from_meal(meal: dict) -> CatalogRecipe:
    """TheMealDB keeps up to 20 strIngredientN/strMeasureN pairs; lines are "<measure> <ingredient>"."""
    lines = []
    for n in range(1, MAX_INGREDIENT_SLOTS + 1):
        ingredient = (meal.get(f"strIngredient{n}") or "").strip()
        if not ingredient:
            continue
        measure = (meal.get(f"strMeasure{n}") or "").strip()
        lines.append(f"{measure} {ingredient}" if measure else ingredient)
    tags = tuple(t.strip() for t in (meal.get("strTags") or "").split(",") if t.strip())
    return CatalogRecipe(
        recipe_id=str(meal.get("idMeal")),
        name=meal.get("strMeal") or "",
        ingredients=tuple(lines),
        category=meal.get("strCategory"),
        area=meal.get("strArea"),
        thumbnail=meal.get("strMealThumb"),
        tags=tags,
    )


class MealDBClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._base_url = (base_url or settings.mealdb_base_url).rstrip("/")
        self._timeout = timeout or settings.mealdb_timeout_s

    def _get(self, path: str, params: dict) -> dict:
        resp = httpx.get(f"{self._base_url}/{path}", params=params, timeout=self._timeout)
        resp.raise_for_status()
        return resp.json()

    def get_recipe_by_id(self, recipe_id: str) -> CatalogRecipe:
        logger.info("mealdb.lookup id=%s", recipe_id)
        meals = self._get("lookup.php", {"i": recipe_id}).get("meals") or []
        if not meals:
            raise RecipeNotFound(f"recipe {recipe_id} not found")
        return recipe_from_meal(meals[0])

    def search_recipes(self, query: str) -> list[CatalogRecipe]:
        logger.info("mealdb.search query=%s", query)
        meals = self._get("search.php", {"s": query}).get("meals") or []
        return [recipe_from_meal(meal) for meal in meals]


mealdb_client = MealDBClient()
