from fastapi import APIRouter, HTTPException, Query

from recipe_cost.logging import get_logger
from recipe_cost.schemas.prices import (
    IngredientPriceResponse,
    PriceSourceInfo,
    RecipeCostRequest,
    RecipeCostResponse,
)
from recipe_cost.services.costing.calculator import InvalidRecipeInput
from recipe_cost.services.engine import get_cost_calculator
from recipe_cost.services.pricing.sources import STORE_DEFINITIONS
from recipe_cost.utils.timing import time_span

router = APIRouter()
logger = get_logger(__name__)


@router.get("/prices/ingredient", response_model=IngredientPriceResponse)
def ingredient_price(
    name: str = Query(..., min_length=1),
    country: str | None = Query(default=None),
) -> IngredientPriceResponse:
    calculator = get_cost_calculator()
    code = (country or calculator.default_country).upper()
    translation, quote = calculator.quote_ingredient(name, code)
    return IngredientPriceResponse(
        ingredient=name,
        country=code,
        translation=translation.to_dict(),
        price=quote.to_dict(),
    )


@router.post("/prices/recipe", response_model=RecipeCostResponse)
def recipe_cost(payload: RecipeCostRequest) -> RecipeCostResponse:
    with time_span("api.prices.recipe", lines=len(payload.ingredients)):
        try:
            result = get_cost_calculator().calculate(
                payload.ingredients,
                country=payload.country,
                servings=payload.servings,
            )
        except InvalidRecipeInput as exc:
            logger.info("prices.recipe.rejected reason=%s", exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RecipeCostResponse(**result.to_dict())


@router.get("/prices/sources", response_model=list[PriceSourceInfo])
def price_sources() -> list[PriceSourceInfo]:
    active = set(get_cost_calculator().aggregator.source_ids)
    return [
        PriceSourceInfo(
            source_id=definition.source_id,
            name=definition.name,
            country=definition.country,
            description=definition.description,
            enabled=definition.enabled,
            active=definition.source_id in active,
        )
        for definition in STORE_DEFINITIONS.values()
    ]
