import threading
import time
from typing import Optional

import dspy

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.services.confidence import Confidence, parse_confidence
from recipe_cost.services.llm.dspy_client import llm_enabled, run_with_logging
from recipe_cost.services.llm.prompts import (
    INGREDIENT_TRANSLATE_PROMPT_VERSION,
    INGREDIENT_TRANSLATE_TEMPLATE,
    LANGUAGE_NAMES,
)
from recipe_cost.services.translation.models import ExternalTranslation

logger = get_logger(__name__)


class IngredientTranslateSignature(dspy.Signature):
    """Translate an ingredient name into a grocery search term."""

    ingredient_name: str = dspy.InputField()
    target_language: str = dspy.InputField()
    prompt_template: str = dspy.InputField()
    translated: str = dspy.OutputField(desc="grocery search term in the target language")
    category: str = dspy.OutputField(desc="ingredient category")
    confidence: str = dspy.OutputField(desc="high | medium | low | failed")


class IngredientTranslator(dspy.Module):
    def __init__(self) -> None:
        super().__init__()
        self.predict = dspy.Predict(IngredientTranslateSignature)

    def forward(self, ingredient_name: str, target_language: str) -> dspy.Prediction:
        return self.predict(
            ingredient_name=ingredient_name,
            target_language=target_language,
            prompt_template=INGREDIENT_TRANSLATE_TEMPLATE,
        )


def _clean_output(value: object) -> str:
    text = str(value or "").strip().strip("\"'").strip()
    for prefix in ("translated:", "translation:"):
        if text.lower().startswith(prefix):
            text = text[len(prefix):].strip()
    return text.splitlines()[0].strip() if text else ""


class LLMTranslator:
    """
    External translation capability backed by the configured LLM.

    Returns None when no API key is configured or the model gives up. Calls are
    spaced at least min_interval_s apart across all threads.
    """

    def __init__(self, min_interval_s: Optional[float] = None):
        self.min_interval_s = settings.translation_min_interval_s if min_interval_s is None else min_interval_s
        self._module = IngredientTranslator()
        self._lock = threading.Lock()
        self._last_call = 0.0

    def _wait_turn(self) -> None:
        with self._lock:
            wait_s = self._last_call + self.min_interval_s - time.monotonic()
            if wait_s > 0:
                time.sleep(wait_s)
            self._last_call = time.monotonic()

    def translate(self, text: str, locale: str) -> Optional[ExternalTranslation]:
        if not llm_enabled():
            logger.debug("llm.translate.skipped reason=no_api_key text=%s", text)
            return None
        language = LANGUAGE_NAMES.get(locale.lower(), locale)
        self._wait_turn()
        prediction = run_with_logging(
            prompt_name="ingredient_translate",
            prompt_version=INGREDIENT_TRANSLATE_PROMPT_VERSION,
            fn=self._module.forward,
            ingredient_name=text,
            target_language=language,
        )
        translated = _clean_output(getattr(prediction, "translated", ""))
        confidence = parse_confidence(getattr(prediction, "confidence", ""), default=Confidence.MEDIUM)
        if not translated or confidence == Confidence.FAILED:
            logger.info("llm.translate.miss text=%s locale=%s", text, locale)
            return None
        category = _clean_output(getattr(prediction, "category", "")).lower() or "unknown"
        logger.info(
            "llm.translate.hit text=%s locale=%s term=%s confidence=%s",
            text,
            locale,
            translated,
            confidence.value,
        )
        return ExternalTranslation(translated=translated, confidence=confidence, category=category)
