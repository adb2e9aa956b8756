"""Result Composer - packages the accepted text with display metadata."""

from __future__ import annotations

import time

from text_enhancer.models.result import EnhancementResult
from text_enhancer.models.validation import ValidationResult

SCORE_BANDS: list[tuple[int, list[str]]] = [
    (90, ["Significantly improved clarity and flow", "Enhanced professional tone and readability"]),
    (80, ["Improved overall clarity and structure", "Enhanced readability and engagement"]),
    (70, ["Basic improvements to clarity and grammar"]),
]


def summarize_improvements(original: str, enhanced: str, quality_score: int) -> list[str]:
    """Human-readable list of what changed. Display only."""
    improvements: list[str] = []

    original_words = len(original.split())
    enhanced_words = len(enhanced.split())
    change = (enhanced_words - original_words) / max(original_words, 1) * 100
    if abs(change) > 5:
        if change > 0:
            improvements.append(f"Expanded content by {round(change)}% for better clarity")
        else:
            improvements.append(f"Condensed content by {round(abs(change))}% for conciseness")

    for threshold, phrases in SCORE_BANDS:
        if quality_score >= threshold:
            improvements.extend(phrases)
            break

    if "." in enhanced and "." not in original:
        improvements.append("Added proper sentence structure")
    if len(enhanced) > len(original) * 1.1:
        improvements.append("Added detail and context for better understanding")
    return improvements


def compose_result(
    original: str,
    enhanced: str,
    validation: ValidationResult,
    *,
    started_at: float,
    model_used: str,
    prompt_score: int = 0,
    retried: bool = False,
) -> EnhancementResult:
    """Build the EnhancementResult; ``started_at`` is a ``time.monotonic()`` value."""
    return EnhancementResult(
        enhanced_text=enhanced,
        original_length=len(original),
        enhanced_length=len(enhanced),
        processing_time_ms=int((time.monotonic() - started_at) * 1000),
        quality_score=validation.score,
        confidence=validation.confidence,
        prompt_score=prompt_score,
        model_used=model_used,
        improvements=summarize_improvements(original, enhanced, validation.score),
        violations=validation.messages,
        retried=retried,
    )
