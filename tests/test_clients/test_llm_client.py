"""Tests for LLMClient (chat-completions gateway)."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from text_enhancer.clients.llm_client import GatewayResult, LLMClient
from text_enhancer.errors import EmptyResponse, HttpError, MalformedResponse
from text_enhancer.models.candidate import ModelCandidate, SamplingParameters

CANDIDATE = ModelCandidate(
    model_id="openai/gpt-4o-mini",
    sampling=SamplingParameters(temperature=0.25, max_tokens=300, top_p=0.8),
)


def _completion(content, usage: dict | None = None) -> dict:
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        body["usage"] = usage
    return body


def _client(handler, **kwargs) -> LLMClient:
    return LLMClient(transport=httpx.MockTransport(handler), **kwargs)


class TestLLMClientInvoke:
    async def test_success_returns_gateway_result(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=_completion(
                    "  A polished sentence for you.  ",
                    {"prompt_tokens": 120, "completion_tokens": 30},
                ),
            )

        result = await _client(handler).invoke(CANDIDATE, "prompt", api_config)

        assert isinstance(result, GatewayResult)
        assert result.text == "A polished sentence for you."
        assert result.model_id == "openai/gpt-4o-mini"
        assert result.input_tokens == 120
        assert result.output_tokens == 30
        assert result.elapsed_ms >= 0

    async def test_request_shape(self, api_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("A polished sentence for you."))

        client = _client(handler, app_title="Test App", referer="http://localhost:8501")
        await client.invoke(CANDIDATE, "the prompt", api_config)

        assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert seen["headers"]["authorization"] == f"Bearer {api_config.api_key}"
        assert seen["headers"]["x-title"] == "Test App"
        assert seen["headers"]["http-referer"] == "http://localhost:8501"
        body = seen["body"]
        assert body["model"] == "openai/gpt-4o-mini"
        assert body["messages"] == [{"role": "user", "content": "the prompt"}]
        assert body["temperature"] == 0.25
        assert body["max_tokens"] == 300
        assert body["stream"] is False

    async def test_no_referer_header_by_default(self, api_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers
            return httpx.Response(200, json=_completion("A polished sentence for you."))

        await _client(handler).invoke(CANDIDATE, "prompt", api_config)

        assert "http-referer" not in seen["headers"]

    @pytest.mark.parametrize("status", [400, 401, 402, 429, 500, 503])
    async def test_http_error_status(self, api_config, status):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text="upstream says no")

        with pytest.raises(HttpError) as exc_info:
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

        assert exc_info.value.status_code == status
        assert exc_info.value.model_id == "openai/gpt-4o-mini"
        assert exc_info.value.body == "upstream says no"

    async def test_non_json_body_is_malformed(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(MalformedResponse):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

    async def test_missing_choices_is_malformed(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(MalformedResponse):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

    async def test_null_content_is_malformed(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion(None))

        with pytest.raises(MalformedResponse):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

    @pytest.mark.parametrize("content", ["", "   ", "ok."])
    async def test_short_content_is_empty_response(self, api_config, content):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion(content))

        with pytest.raises(EmptyResponse):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

    async def test_timeout_is_http_error_without_status(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(HttpError) as exc_info:
            await _client(handler, timeout=5).invoke(CANDIDATE, "prompt", api_config)

        assert exc_info.value.status_code is None
        assert "timed out" in str(exc_info.value)

    async def test_slow_response_hits_overall_timeout(self, api_config):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(2)
            return httpx.Response(200, json=_completion("A polished sentence for you."))

        with pytest.raises(HttpError) as exc_info:
            await _client(handler, timeout=0.05).invoke(CANDIDATE, "prompt", api_config)

        assert exc_info.value.status_code is None
        assert "timed out" in str(exc_info.value)

    async def test_undecodable_body_is_malformed(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=b'{"choices": "\xff\xfe"}',
                headers={"content-type": "application/json"},
            )

        with pytest.raises(MalformedResponse):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

    @pytest.mark.parametrize(
        "usage",
        ["n/a", ["prompt_tokens", 12], {"prompt_tokens": "many", "completion_tokens": None}],
    )
    async def test_malformed_usage_keeps_the_text(self, api_config, usage):
        def handler(request: httpx.Request) -> httpx.Response:
            body = _completion("A polished sentence for you.")
            body["usage"] = usage
            return httpx.Response(200, json=body)

        llm = _client(handler)
        result = await llm.invoke(CANDIDATE, "prompt", api_config)

        assert result.text == "A polished sentence for you."
        assert result.input_tokens == 0
        assert result.output_tokens == 0
        assert llm._token_log == [("openai/gpt-4o-mini", 0, 0)]

    async def test_connection_error_is_http_error(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(HttpError) as exc_info:
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

        assert exc_info.value.status_code is None

    async def test_each_invoke_is_a_single_attempt(self, api_config):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        with pytest.raises(HttpError):
            await _client(handler).invoke(CANDIDATE, "prompt", api_config)

        assert len(calls) == 1


class TestLLMClientTestConnection:
    async def test_accepted_key(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/models"
            return httpx.Response(200, json={"data": []})

        assert await _client(handler).test_connection(api_config) is True

    async def test_rejected_key(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401)

        assert await _client(handler).test_connection(api_config) is False

    async def test_network_failure(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await _client(handler).test_connection(api_config) is False


class TestLLMClientTokenSummary:
    async def test_token_log_accumulates_across_calls(self, api_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=_completion(
                    "A polished sentence for you.",
                    {"prompt_tokens": 10, "completion_tokens": 5},
                ),
            )

        llm = _client(handler)
        await llm.invoke(CANDIDATE, "prompt one", api_config)
        await llm.invoke(CANDIDATE, "prompt two", api_config)

        assert llm._token_log == [
            ("openai/gpt-4o-mini", 10, 5),
            ("openai/gpt-4o-mini", 10, 5),
        ]

    def test_get_token_summary_returns_totals_and_clears(self):
        llm = LLMClient()
        llm._token_log = [("openai/gpt-4o", 100, 50), ("openai/gpt-4o-mini", 200, 80)]

        summary = llm.get_token_summary()

        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2
        assert llm.get_token_summary()["calls"] == []
