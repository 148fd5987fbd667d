from typing import Callable, Optional

from sqlmodel import Session

from recipe_cost.services.costing.calculator import RecipeCostResult
from recipe_cost.storage import db
from recipe_cost.storage.models import RecipeCalculation, RecipeCalculationIngredient
from recipe_cost.storage.repositories import create_recipe_calculation


class SQLCalculationHistory:
    """Stores each calculation with its per-ingredient lines."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or db.get_session

    def record(self, result: RecipeCostResult, recipe_ref: Optional[str] = None, recipe_name: Optional[str] = None) -> int:
        calculation = RecipeCalculation(
            recipe_ref=recipe_ref,
            recipe_name=recipe_name,
            country=result.country,
            currency=result.currency,
            servings=result.servings,
            total_cost=result.total_cost,
            cost_per_serving=result.cost_per_serving,
            overall_confidence=result.confidence_summary.overall.value,
            ingredient_count=len(result.ingredient_breakdown),
            created_at=result.calculated_at,
        )
        lines = [
            RecipeCalculationIngredient(
                calculation_id=0,
                position=position,
                original_text=item.original_text,
                ingredient_name=item.parsed.ingredient_name,
                search_term=item.translation.localized_term,
                quantity=item.quantity_in_price_unit,
                price_unit=item.quote.unit.value,
                price_per_unit=item.quote.price_per_unit,
                cost=item.cost,
                confidence=item.confidence.value,
                sources=list(item.quote.sources_used),
            )
            for position, item in enumerate(result.ingredient_breakdown)
        ]
        with self._session_factory() as session:
            saved = create_recipe_calculation(session, calculation, lines)
            return saved.id
