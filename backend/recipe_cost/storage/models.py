from datetime import datetime
from typing import Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel

from recipe_cost.utils.timing import utcnow


class PriceSnapshot(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    source_id: str = Field(index=True)
    ingredient_key: str = Field(index=True)
    country: str = "EE"
    unit_price: float
    price_unit: str  # as quoted by the store: "kg", "500g", "10pcs", "loaf"
    currency: str = "EUR"
    in_stock: bool = True
    source_url: Optional[str] = None
    observed_at: datetime = Field(default_factory=utcnow, index=True)


class TranslationEntry(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("english_name", "locale"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    english_name: str = Field(index=True)  # stored lower-case
    locale: str = "et"
    localized_term: str
    category: str = "unknown"
    confidence: str = "high"
    source: str = "builtin"  # where the fact came from: builtin | external | manual
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TranslationGap(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("ingredient_name", "locale"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    ingredient_name: str
    locale: str = "et"
    miss_count: int = 1
    first_seen_at: datetime = Field(default_factory=utcnow)
    last_seen_at: datetime = Field(default_factory=utcnow)


class RecipeCalculation(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    recipe_ref: Optional[str] = None  # catalog id when costed from the catalog
    recipe_name: Optional[str] = None
    country: str
    currency: str
    servings: int
    total_cost: float
    cost_per_serving: float
    overall_confidence: str
    ingredient_count: int
    created_at: datetime = Field(default_factory=utcnow, index=True)


class RecipeCalculationIngredient(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    calculation_id: int = Field(foreign_key="recipecalculation.id")
    position: int
    original_text: str
    ingredient_name: str
    search_term: str
    quantity: float
    price_unit: str
    price_per_unit: float
    cost: float
    confidence: str
    sources: Optional[list] = Field(default=None, sa_column=Column(JSON, default=None))


class LLMCallLog(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    prompt_name: str
    prompt_version: str
    model: str
    input_payload: str
    output_payload: str
    latency_ms: int
    created_at: datetime = Field(default_factory=utcnow)
