from fastapi import APIRouter, Query

from recipe_cost.logging import get_logger
from recipe_cost.schemas.prices import ParsedIngredientResponse
from recipe_cost.services.engine import parse_ingredient

router = APIRouter()
logger = get_logger(__name__)


@router.get("/ingredients/parse", response_model=ParsedIngredientResponse)
def parse(text: str = Query(..., description="one ingredient line, e.g. '2 tbs Plain Flour'")) -> ParsedIngredientResponse:
    parsed = parse_ingredient(text)
    logger.info(
        "ingredients.parse text=%r name=%s qty=%s unit=%s fallback=%s",
        text,
        parsed.ingredient_name,
        parsed.normalized_quantity,
        parsed.normalized_unit.value,
        parsed.used_fallback,
    )
    return ParsedIngredientResponse(**parsed.to_dict())
