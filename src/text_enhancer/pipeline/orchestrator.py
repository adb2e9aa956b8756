"""Main enhancement orchestrator - prompt, fallback, validation and one strict retry."""

from __future__ import annotations

import logging
import time
from typing import Callable

from text_enhancer.clients.llm_client import LLMClient
from text_enhancer.config import AppConfig, LLMConfig
from text_enhancer.errors import ConfigurationError
from text_enhancer.models.request import MAX_TEXT_LENGTH, EnhancementRequest, check_request
from text_enhancer.models.result import EnhancementResult
from text_enhancer.models.settings import ApiConfig
from text_enhancer.pipeline.fallback import run_with_fallback
from text_enhancer.pipeline.model_catalog import candidates_for
from text_enhancer.pipeline.prompt_builder import build_prompt, build_strict_prompt, score_prompt
from text_enhancer.pipeline.quality_validator import validate
from text_enhancer.pipeline.result_composer import compose_result
from text_enhancer.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class EnhancementOrchestrator:
    """Runs the two-stage enhancement pipeline for a single request."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        settings_store: SettingsStore | None = None,
        llm_defaults: LLMConfig | None = None,
        min_score: int = 70,
        retry_gate: int = 70,
        retry_min_score: int = 60,
        max_text_length: int = MAX_TEXT_LENGTH,
        strict: bool = True,
    ):
        self.llm = llm
        self.settings_store = settings_store
        self.llm_defaults = llm_defaults
        self.min_score = min_score
        self.retry_gate = retry_gate
        self.retry_min_score = retry_min_score
        self.max_text_length = max_text_length
        self.strict = strict

    @classmethod
    def from_config(
        cls, llm: LLMClient, config: AppConfig, settings_store: SettingsStore | None = None,
    ) -> EnhancementOrchestrator:
        p = config.pipeline
        return cls(
            llm,
            settings_store=settings_store,
            llm_defaults=config.llm,
            min_score=p.min_score,
            retry_gate=p.retry_gate,
            retry_min_score=p.retry_min_score,
            max_text_length=p.max_text_length,
            strict=p.strict_validation,
        )

    def _resolve_api_config(self, api_config: ApiConfig | None) -> ApiConfig:
        if api_config is not None:
            return api_config
        if self.settings_store is not None:
            loaded = self.settings_store.load(self.llm_defaults)
            if loaded is not None:
                return loaded
        raise ConfigurationError("API key is not configured. Add it in Settings first.")

    async def enhance(
        self,
        request: EnhancementRequest,
        api_config: ApiConfig | None = None,
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> EnhancementResult:
        """Enhance ``request.text``.

        Args:
            request: The validated enhancement request.
            api_config: Settings snapshot; read from the settings store when omitted.
            on_phase: Optional callback(phase_name, detail) for progress.

        Raises:
            RequestValidationError: text is empty or too long.
            ConfigurationError: no API key is available.
            FallbackExhausted: every model failed in either stage.
        """
        start = time.monotonic()

        def _notify(phase: str, detail: str = ""):
            if on_phase:
                on_phase(phase, detail)

        check_request(request, self.max_text_length)
        api_config = self._resolve_api_config(api_config)
        candidates = candidates_for(request, api_config.default_model)

        # --- Stage 1: regular prompt ---
        prompt = build_prompt(request)
        prompt_quality = score_prompt(prompt)
        _notify("generate", f"Prompt score {prompt_quality.overall}, trying {len(candidates)} model(s)")

        first = await run_with_fallback(
            self.llm, candidates, prompt, api_config,
            on_attempt=lambda model_id: _notify("attempt", model_id),
        )
        first_validation = validate(request.text, first.text, self.min_score, self.strict)
        _notify("validate", f"Score {first_validation.score} from {first.model_id}")

        chosen, validation, retried = first, first_validation, False

        # --- Stage 2: one strict retry for clearly bad output ---
        if not first_validation.is_valid and first_validation.score < self.retry_gate:
            logger.info(
                "Stage 1 score %d below %d, retrying with strict prompt",
                first_validation.score, self.retry_gate,
            )
            _notify("retry", f"Score {first_validation.score} < {self.retry_gate}, retrying")
            strict_prompt = build_strict_prompt(prompt, first_validation.messages)
            second = await run_with_fallback(
                self.llm, candidates, strict_prompt, api_config,
                on_attempt=lambda model_id: _notify("attempt", model_id),
            )
            second_validation = validate(
                request.text, second.text, self.retry_min_score, self.strict,
            )
            if second_validation.is_valid or second_validation.score > first_validation.score:
                chosen, validation, retried = second, second_validation, True
            else:
                logger.info(
                    "Retry scored %d, keeping stage 1 result (%d)",
                    second_validation.score, first_validation.score,
                )

        result = compose_result(
            request.text,
            chosen.text,
            validation,
            started_at=start,
            model_used=chosen.model_id,
            prompt_score=prompt_quality.overall,
            retried=retried,
        )
        _notify("done", f"Done! Score {result.quality_score}, {result.processing_time_ms} ms")
        return result
