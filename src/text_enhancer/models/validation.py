"""Pydantic models for Quality Validator output."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Violation(BaseModel):
    rule: str  # question, explanation, meta_commentary, length, ...
    message: str
    penalty: int
    confidence_penalty: int = 0


class ValidationResult(BaseModel):
    score: int = Field(ge=0, le=100)
    confidence: int = Field(ge=0, le=100)
    violations: list[Violation] = []
    min_score: int = 70

    @property
    def is_valid(self) -> bool:
        # Both conditions are required; a high score with any violation is invalid.
        return self.score >= self.min_score and len(self.violations) == 0

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    @property
    def rules(self) -> list[str]:
        return [v.rule for v in self.violations]
