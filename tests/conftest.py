"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from text_enhancer.clients.llm_client import GatewayResult, LLMClient
from text_enhancer.models.candidate import ModelCandidate, SamplingParameters
from text_enhancer.models.request import EnhancementRequest
from text_enhancer.models.settings import ApiConfig
from text_enhancer.storage.settings_store import SettingsStore

GOOD_REWRITE = (
    "Our team finished the quarterly report today, and the results look very good for the company."
)


@pytest.fixture
def sample_text() -> str:
    return "our team finished the quarterly report today and the results look really good for the company"


@pytest.fixture
def sample_request(sample_text) -> EnhancementRequest:
    return EnhancementRequest(text=sample_text, enhancement_type="general")


@pytest.fixture
def api_config() -> ApiConfig:
    return ApiConfig(api_key="sk-or-test-key-1234", default_model="openai/gpt-4o-mini")


@pytest.fixture
def candidates() -> list[ModelCandidate]:
    return [
        ModelCandidate(model_id=m, sampling=SamplingParameters())
        for m in ("model/a", "model/b", "model/c")
    ]


@pytest.fixture
def settings_store(tmp_path, monkeypatch) -> SettingsStore:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_BASE_URL", raising=False)
    return SettingsStore(db_path=tmp_path / "settings.db")


def gateway_result(text: str = GOOD_REWRITE, model_id: str = "model/a") -> GatewayResult:
    return GatewayResult(text=text, model_id=model_id, elapsed_ms=120, input_tokens=80, output_tokens=40)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client that always returns a clean rewrite."""
    client = AsyncMock(spec=LLMClient)
    client.invoke = AsyncMock(return_value=gateway_result())
    client.test_connection = AsyncMock(return_value=True)
    return client


@pytest.fixture
def make_gateway_result():
    return gateway_result
