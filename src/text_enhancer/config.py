"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "openai/gpt-4o-mini"
    timeout: int = 30
    app_title: str = "Text Enhancer"
    referer: str = "http://localhost:8501"

    def __post_init__(self):
        _check_range("timeout", self.timeout, 1, 120)
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")


@dataclass(frozen=True)
class PipelineConfig:
    min_score: int = 70
    retry_gate: int = 70
    retry_min_score: int = 60
    max_text_length: int = 8000
    strict_validation: bool = True

    def __post_init__(self):
        _check_range("min_score", self.min_score, 0, 100)
        _check_range("retry_gate", self.retry_gate, 0, 100)
        _check_range("retry_min_score", self.retry_min_score, 0, 100)
        _check_range("max_text_length", self.max_text_length, 1, 8000)


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.text-enhancer/settings.db"
    session_ttl_days: int = 30

    def __post_init__(self):
        _check_range("session_ttl_days", self.session_ttl_days, 1, 365)

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class SignupConfig:
    tally_form_id: str = "nWWvgN"


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    signup: SignupConfig = field(default_factory=SignupConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        storage=StorageConfig(**raw.get("storage", {})),
        signup=SignupConfig(**raw.get("signup", {})),
    )
