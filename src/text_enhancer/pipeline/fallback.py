"""Fallback Orchestrator - tries model candidates in order until one succeeds."""

from __future__ import annotations

import logging
from typing import Callable

from text_enhancer.clients.llm_client import GatewayResult, LLMClient
from text_enhancer.errors import ConfigurationError, FallbackExhausted, GatewayError
from text_enhancer.models.candidate import ModelCandidate
from text_enhancer.models.settings import ApiConfig

logger = logging.getLogger(__name__)


async def run_with_fallback(
    gateway: LLMClient,
    candidates: list[ModelCandidate],
    prompt: str,
    api_config: ApiConfig,
    *,
    on_attempt: Callable[[str], None] | None = None,
) -> GatewayResult:
    """Return the first successful candidate's result.

    Candidates are tried strictly one at a time. Only ``GatewayError`` moves
    on to the next candidate; any other exception propagates untouched. When
    every candidate fails, ``FallbackExhausted`` carries the last failure.
    """
    if not candidates:
        raise ConfigurationError("No model candidates configured")
    if not api_config.api_key or not api_config.api_key.strip():
        raise ConfigurationError("API key is not configured")

    failures: list[GatewayError] = []
    for candidate in candidates:
        if on_attempt:
            on_attempt(candidate.model_id)
        logger.info("Trying model: %s", candidate.model_id)
        try:
            result = await gateway.invoke(candidate, prompt, api_config)
        except GatewayError as exc:
            logger.warning("Model %s failed: %s", candidate.model_id, exc)
            failures.append(exc)
            continue
        if failures:
            logger.info(
                "Model %s succeeded after %d failed attempt(s)", candidate.model_id, len(failures)
            )
        return result

    raise FallbackExhausted(failures[-1], failures)
