import httpx
from fastapi import APIRouter, HTTPException, Query

from recipe_cost.logging import get_logger
from recipe_cost.schemas.prices import RecipeCostResponse
from recipe_cost.services.catalog.mealdb_client import RecipeNotFound, mealdb_client
from recipe_cost.services.costing.calculator import InvalidRecipeInput
from recipe_cost.services.engine import get_cost_calculator

router = APIRouter()
logger = get_logger(__name__)


@router.get("/recipes/{recipe_id}/cost", response_model=RecipeCostResponse)
def catalog_recipe_cost(
    recipe_id: str,
    country: str | None = Query(default=None),
    servings: int | None = Query(default=None),
) -> RecipeCostResponse:
    try:
        recipe = mealdb_client.get_recipe_by_id(recipe_id)
    except RecipeNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.warning("recipes.catalog_failed id=%s error=%s", recipe_id, exc)
        raise HTTPException(status_code=502, detail="recipe catalog unavailable") from exc

    try:
        result = get_cost_calculator().calculate(
            recipe.ingredients,
            country=country,
            servings=recipe.servings if servings is None else servings,
            recipe_ref=recipe.recipe_id,
            recipe_name=recipe.name,
        )
    except InvalidRecipeInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RecipeCostResponse(**result.to_dict(), recipe_id=recipe.recipe_id, recipe_name=recipe.name)
