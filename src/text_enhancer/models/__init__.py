"""Data models for the text enhancement pipeline."""

from text_enhancer.models.candidate import ModelCandidate, SamplingParameters
from text_enhancer.models.request import (
    ENHANCEMENT_TYPES,
    TONES,
    EnhancementRequest,
    build_request,
)
from text_enhancer.models.result import EnhancementResult
from text_enhancer.models.settings import ApiConfig
from text_enhancer.models.validation import ValidationResult, Violation

__all__ = [
    "ENHANCEMENT_TYPES",
    "TONES",
    "ApiConfig",
    "EnhancementRequest",
    "EnhancementResult",
    "ModelCandidate",
    "SamplingParameters",
    "ValidationResult",
    "Violation",
    "build_request",
]
