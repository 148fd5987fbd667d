from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from recipe_cost.logging import get_logger
from recipe_cost.storage.models import (
    LLMCallLog,
    PriceSnapshot,
    RecipeCalculation,
    RecipeCalculationIngredient,
    TranslationEntry,
    TranslationGap,
)
from recipe_cost.utils.timing import utcnow

logger = get_logger(__name__)


def add_price_snapshot(session: Session, snapshot: PriceSnapshot) -> PriceSnapshot:
    session.add(snapshot)
    session.commit()
    session.refresh(snapshot)
    logger.debug(
        "price_snapshot.created id=%s source=%s key=%s country=%s price=%s unit=%s",
        snapshot.id,
        snapshot.source_id,
        snapshot.ingredient_key,
        snapshot.country,
        snapshot.unit_price,
        snapshot.price_unit,
    )
    return snapshot


def get_latest_price_snapshot(
    session: Session, source_id: str, ingredient_key: str, country: str
) -> Optional[PriceSnapshot]:
    return session.exec(
        select(PriceSnapshot)
        .where(
            PriceSnapshot.source_id == source_id,
            PriceSnapshot.ingredient_key == ingredient_key,
            PriceSnapshot.country == country,
        )
        .order_by(PriceSnapshot.observed_at.desc(), PriceSnapshot.id.desc())
    ).first()


def delete_price_snapshots_before(session: Session, cutoff: datetime) -> int:
    result = session.execute(delete(PriceSnapshot).where(PriceSnapshot.observed_at < cutoff))
    session.commit()
    removed = result.rowcount or 0
    logger.info("price_snapshot.pruned cutoff=%s removed=%s", cutoff.isoformat(), removed)
    return removed


def get_translation(session: Session, english_name: str, locale: str) -> Optional[TranslationEntry]:
    return session.exec(
        select(TranslationEntry).where(
            TranslationEntry.english_name == english_name.lower(),
            TranslationEntry.locale == locale,
        )
    ).first()


def upsert_translation(
    session: Session,
    english_name: str,
    locale: str,
    localized_term: str,
    category: str,
    confidence: str,
    source: str,
) -> TranslationEntry:
    entry = get_translation(session, english_name, locale)
    if entry is None:
        entry = TranslationEntry(english_name=english_name.lower(), locale=locale, localized_term=localized_term)
    entry.localized_term = localized_term
    entry.category = category
    entry.confidence = confidence
    entry.source = source
    entry.updated_at = utcnow()
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info(
        "translation.stored name=%s locale=%s term=%s source=%s",
        entry.english_name,
        locale,
        localized_term,
        source,
    )
    return entry


def record_translation_gap(session: Session, ingredient_name: str, locale: str) -> TranslationGap:
    name = ingredient_name.lower()
    gap = session.exec(
        select(TranslationGap).where(TranslationGap.ingredient_name == name, TranslationGap.locale == locale)
    ).first()
    if gap is None:
        gap = TranslationGap(ingredient_name=name, locale=locale)
    else:
        gap.miss_count += 1
        gap.last_seen_at = utcnow()
    session.add(gap)
    session.commit()
    session.refresh(gap)
    return gap


def list_translation_gaps(session: Session, locale: Optional[str] = None, limit: int = 50) -> list[TranslationGap]:
    query = select(TranslationGap)
    if locale:
        query = query.where(TranslationGap.locale == locale)
    query = query.order_by(TranslationGap.miss_count.desc(), TranslationGap.last_seen_at.desc()).limit(limit)
    return list(session.exec(query))


def create_recipe_calculation(
    session: Session,
    calculation: RecipeCalculation,
    ingredients: Iterable[RecipeCalculationIngredient],
) -> RecipeCalculation:
    session.add(calculation)
    session.commit()
    session.refresh(calculation)
    items = list(ingredients)
    for item in items:
        item.calculation_id = calculation.id
    session.add_all(items)
    session.commit()
    logger.info(
        "recipe_calculation.created id=%s total=%s servings=%s ingredients=%s",
        calculation.id,
        calculation.total_cost,
        calculation.servings,
        len(items),
    )
    return calculation


def get_calculation_ingredients(session: Session, calculation_id: int) -> list[RecipeCalculationIngredient]:
    return list(
        session.exec(
            select(RecipeCalculationIngredient)
            .where(RecipeCalculationIngredient.calculation_id == calculation_id)
            .order_by(RecipeCalculationIngredient.position)
        )
    )


def log_llm_call(
    session: Session,
    prompt_name: str,
    prompt_version: str,
    model: str,
    input_payload: str,
    output_payload: str,
    latency_ms: int,
) -> None:
    session.add(
        LLMCallLog(
            prompt_name=prompt_name,
            prompt_version=prompt_version,
            model=model,
            input_payload=input_payload,
            output_payload=output_payload,
            latency_ms=latency_ms,
        )
    )
    session.commit()
