"""Pydantic models for the final enhancement result."""

from __future__ import annotations

from pydantic import BaseModel


class EnhancementResult(BaseModel):
    enhanced_text: str
    original_length: int
    enhanced_length: int
    processing_time_ms: int
    quality_score: int  # 0-100
    confidence: int  # 0-100
    prompt_score: int = 0  # 0-100, structure score of the prompt sent
    model_used: str
    improvements: list[str] = []
    violations: list[str] = []  # unresolved issues of the accepted text
    retried: bool = False

    model_config = {"protected_namespaces": ()}
