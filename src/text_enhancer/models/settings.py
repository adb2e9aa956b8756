"""Pydantic model for the persisted API settings."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ApiConfig(BaseModel):
    api_key: str = Field(min_length=1, max_length=200)
    default_model: str = Field(default="openai/gpt-4o-mini", min_length=1)
    base_url: str = "https://openrouter.ai/api/v1"

    model_config = {"frozen": True}

    @field_validator("base_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value.rstrip("/")

    @property
    def masked_key(self) -> str:
        if len(self.api_key) <= 8:
            return "*" * len(self.api_key)
        return f"{self.api_key[:6]}...{self.api_key[-4:]}"
