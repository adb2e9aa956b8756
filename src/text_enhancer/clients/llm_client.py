"""Chat-completion API gateway: one request, one typed outcome, no retries."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from text_enhancer.errors import EmptyResponse, HttpError, MalformedResponse
from text_enhancer.models.candidate import ModelCandidate
from text_enhancer.models.settings import ApiConfig

logger = logging.getLogger(__name__)

MIN_RESPONSE_CHARS = 10
DEFAULT_TIMEOUT = 30.0


def _token_count(value) -> int:
    # Missing or non-numeric counts are logged as 0.
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


@dataclass
class GatewayResult:
    """Successful model response including timing and usage metadata."""

    text: str
    model_id: str
    elapsed_ms: int
    input_tokens: int = 0
    output_tokens: int = 0


class LLMClient:
    """Async client for an OpenAI-compatible ``/chat/completions`` endpoint.

    Each ``invoke`` is a single attempt. Falling back to another model is the
    caller's job, so every failure is raised as a ``GatewayError`` subclass.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        app_title: str = "Text Enhancer",
        referer: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.app_title = app_title
        self.referer = referer
        self._transport = transport
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict = {"timeout": self.timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    def _headers(self, api_config: ApiConfig) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {api_config.api_key}",
            "Content-Type": "application/json",
            "X-Title": self.app_title,
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    @staticmethod
    def _endpoint(api_config: ApiConfig, path: str) -> str:
        return f"{api_config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def invoke(self, candidate: ModelCandidate, prompt: str, api_config: ApiConfig) -> GatewayResult:
        """Send ``prompt`` to ``candidate.model_id`` and return its message text."""
        model_id = candidate.model_id
        params = candidate.sampling
        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "top_p": params.top_p,
            "frequency_penalty": params.frequency_penalty,
            "presence_penalty": params.presence_penalty,
            "stream": False,
        }

        logger.debug("LLM call: model=%s", model_id)
        start = time.monotonic()
        try:
            async with self._client() as client:
                response = await asyncio.wait_for(
                    client.post(
                        self._endpoint(api_config, "chat/completions"),
                        json=payload,
                        headers=self._headers(api_config),
                    ),
                    self.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise HttpError(model_id, None, f"timed out after {self.timeout}s") from None
        except httpx.RequestError as exc:
            raise HttpError(model_id, None, f"{type(exc).__name__}: {exc}") from exc
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not response.is_success:
            logger.warning("Model %s returned HTTP %d", model_id, response.status_code)
            raise HttpError(model_id, response.status_code, response.text)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise MalformedResponse(
                model_id, f"missing choices[0].message.content ({type(exc).__name__})"
            ) from exc
        if not isinstance(content, str):
            raise MalformedResponse(model_id, f"message content is {type(content).__name__}, not text")

        text = content.strip()
        if len(text) < MIN_RESPONSE_CHARS:
            raise EmptyResponse(model_id, f"response too short or empty ({len(text)} chars)")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        input_tokens = _token_count(usage.get("prompt_tokens"))
        output_tokens = _token_count(usage.get("completion_tokens"))
        self._token_log.append((model_id, input_tokens, output_tokens))
        logger.debug(
            "LLM response: model=%s %d ms, %d input, %d output tokens",
            model_id, elapsed_ms, input_tokens, output_tokens,
        )
        return GatewayResult(
            text=text,
            model_id=model_id,
            elapsed_ms=elapsed_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def test_connection(self, api_config: ApiConfig) -> bool:
        """Return True when the API key is accepted by the ``/models`` endpoint."""
        try:
            async with self._client() as client:
                response = await client.get(
                    self._endpoint(api_config, "models"),
                    headers=self._headers(api_config),
                )
        except httpx.RequestError:
            logger.warning("Connection test failed", exc_info=True)
            return False
        return response.is_success

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
