from fastapi import APIRouter

from recipe_cost.api.health import router as health_router
from recipe_cost.api.ingredients import router as ingredients_router
from recipe_cost.api.prices import router as prices_router
from recipe_cost.api.recipes import router as recipes_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(ingredients_router)
router.include_router(prices_router)
router.include_router(recipes_router)
