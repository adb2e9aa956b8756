"""Pydantic models for an enhancement request."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, Field, ValidationError, field_validator

from text_enhancer.errors import RequestValidationError

MAX_TEXT_LENGTH = 8000

EnhancementType = Literal["general", "professional", "creative", "academic", "concise", "technical"]
Tone = Literal["formal", "casual", "friendly", "authoritative", "persuasive"]

ENHANCEMENT_TYPES: tuple[str, ...] = get_args(EnhancementType)
TONES: tuple[str, ...] = get_args(Tone)


class EnhancementRequest(BaseModel):
    text: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    enhancement_type: EnhancementType = "general"
    tone: Tone | None = None
    target_audience: str | None = None
    custom_instructions: str | None = None

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value

    @field_validator("target_audience", "custom_instructions")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


def build_request(text: str, **options) -> EnhancementRequest:
    """Construct a request, converting pydantic errors into RequestValidationError."""
    try:
        return EnhancementRequest(text=text, **options)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
        raise RequestValidationError(f"Invalid enhancement request: {problems}") from exc


def check_request(request: EnhancementRequest, max_length: int = MAX_TEXT_LENGTH) -> None:
    """Re-check length bounds; requests built with model_construct skip validation."""
    length = len(request.text or "")
    if length == 0 or not request.text.strip():
        raise RequestValidationError("Text is required")
    if length > max_length:
        raise RequestValidationError(
            f"Text must be at most {max_length} characters (got {length})"
        )
