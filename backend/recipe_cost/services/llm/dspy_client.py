import time
from typing import Any

import dspy

from recipe_cost.config import settings
from recipe_cost.logging import get_logger
from recipe_cost.storage import db
from recipe_cost.storage.repositories import log_llm_call
from recipe_cost.utils.timing import format_duration

logger = get_logger(__name__)


def llm_enabled() -> bool:
    return bool(settings.llm_api_key)


def _make_lm(model: str, max_tokens: int = 256) -> dspy.LM:
    return dspy.LM(
        f"{settings.llm_provider}/{model}",
        api_key=settings.llm_api_key,
        temperature=settings.llm_temperature,
        max_tokens=max_tokens,
        timeout=settings.llm_timeout_s,
    )


def configure_dspy() -> None:
    if not llm_enabled():
        logger.info("llm.configure.skipped reason=no_api_key")
        return
    dspy.settings.configure(lm=_make_lm(settings.llm_model))
    logger.info("llm.configure provider=%s model=%s", settings.llm_provider, settings.llm_model)


def run_with_logging(prompt_name: str, prompt_version: str, fn: Any, **kwargs: Any) -> Any:
    """Run one LLM call, persist it to LLMCallLog and log its latency."""
    start = time.time()
    logger.info("[TIMING] llm.call.start name=%s version=%s model=%s", prompt_name, prompt_version, settings.llm_model)
    result = fn(**kwargs)
    latency_ms = int((time.time() - start) * 1000)
    with db.get_session() as session:
        log_llm_call(
            session=session,
            prompt_name=prompt_name,
            prompt_version=prompt_version,
            model=settings.llm_model,
            input_payload=str(kwargs),
            output_payload=str(result),
            latency_ms=latency_ms,
        )
    logger.info(
        "[TIMING] llm.call.end name=%s latency_ms=%s (%s)",
        prompt_name,
        latency_ms,
        format_duration(latency_ms),
    )
    return result
