"""Model catalog - the single source of truth for fallback order and sampling.

Every code path asks ``candidates_for`` for its ordered ``ModelCandidate`` list,
so the first attempt and the retry always walk the same hierarchy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from text_enhancer.models.candidate import ModelCandidate, SamplingParameters
from text_enhancer.models.request import EnhancementRequest


@dataclass(frozen=True)
class ModelProfile:
    optimal_temperature: float
    max_tokens: int
    speed: str  # "very fast" | "fast" | "medium"
    cost: str  # "low" | "medium" | "high"
    reliability: int  # 0-100
    strengths: tuple[str, ...] = ()


MODEL_PROFILES: dict[str, ModelProfile] = {
    "openai/gpt-4o": ModelProfile(
        0.4, 4096, "medium", "high", 95,
        ("complex reasoning", "professional writing", "technical content"),
    ),
    "openai/gpt-4o-mini": ModelProfile(
        0.3, 4096, "fast", "medium", 90,
        ("balanced performance", "general enhancement", "cost-effective"),
    ),
    "anthropic/claude-3.5-sonnet": ModelProfile(
        0.3, 4096, "medium", "high", 93,
        ("creative writing", "nuanced language", "complex analysis"),
    ),
    "anthropic/claude-3-haiku": ModelProfile(
        0.2, 4096, "very fast", "low", 85,
        ("speed", "concise writing", "cost-effective"),
    ),
}

# Best quality/cost tradeoff first, most tolerant last.
MODEL_HIERARCHY: dict[str, list[str]] = {
    "general": ["openai/gpt-4o-mini", "anthropic/claude-3-haiku", "openai/gpt-4o"],
    "professional": ["openai/gpt-4o", "anthropic/claude-3.5-sonnet", "openai/gpt-4o-mini"],
    "creative": ["anthropic/claude-3.5-sonnet", "openai/gpt-4o", "openai/gpt-4o-mini"],
    "academic": ["anthropic/claude-3.5-sonnet", "openai/gpt-4o", "openai/gpt-4o-mini"],
    "concise": ["anthropic/claude-3-haiku", "openai/gpt-4o-mini", "openai/gpt-4o"],
    "technical": ["openai/gpt-4o", "anthropic/claude-3.5-sonnet", "openai/gpt-4o-mini"],
}

COMPLEX_FIRST = ["anthropic/claude-3.5-sonnet", "openai/gpt-4o"]
FAST_FIRST = ["anthropic/claude-3-haiku", "openai/gpt-4o-mini"]

MIN_MAX_TOKENS = 200


@dataclass(frozen=True)
class TextAnalysis:
    word_count: int
    sentence_count: int
    complexity: str  # "simple" | "moderate" | "complex"

    @property
    def avg_sentence_length(self) -> float:
        return self.word_count / max(self.sentence_count, 1)


def analyze_text(text: str) -> TextAnalysis:
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    word_count = len(words)
    sentence_count = max(len(sentences), 1)
    avg = word_count / sentence_count
    long_words = sum(1 for w in words if len(w) >= 9)

    if word_count > 300 or avg > 25 or (word_count and long_words / word_count > 0.2):
        complexity = "complex"
    elif word_count < 100 and avg <= 15:
        complexity = "simple"
    else:
        complexity = "moderate"
    return TextAnalysis(word_count=word_count, sentence_count=sentence_count, complexity=complexity)


def _dedupe(models: list[str]) -> list[str]:
    return list(dict.fromkeys(models))


def model_order(
    enhancement_type: str,
    analysis: TextAnalysis,
    preferred_model: str | None = None,
) -> list[str]:
    """Ordered model ids for a request type, adjusted for the text's shape."""
    models = list(MODEL_HIERARCHY.get(enhancement_type, MODEL_HIERARCHY["general"]))
    if analysis.complexity == "complex":
        models = COMPLEX_FIRST + models
    elif analysis.complexity == "simple" and analysis.word_count < 100:
        models = FAST_FIRST + models
    if preferred_model:
        models = [preferred_model] + models
    return _dedupe(models)


def sampling_for(model_id: str, analysis: TextAnalysis, enhancement_type: str = "general") -> SamplingParameters:
    """Tune sampling parameters for one model and one piece of text."""
    profile = MODEL_PROFILES.get(model_id)
    temperature = profile.optimal_temperature if profile else 0.3
    max_tokens = min(2000, max(MIN_MAX_TOKENS, int(analysis.word_count * 2.5)))
    top_p = 0.8
    frequency_penalty = 0.1
    presence_penalty = 0.1

    if "claude" in model_id:
        temperature = max(0.2, temperature - 0.1)
        frequency_penalty = 0.05
    elif "gpt-4o" in model_id:
        frequency_penalty = 0.2
        presence_penalty = 0.15
    elif "gemini" in model_id:
        temperature = 0.4
        top_p = 0.9

    if analysis.complexity == "complex":
        temperature = max(0.2, temperature - 0.1)
        max_tokens = min(3000, int(max_tokens * 1.2))

    if enhancement_type == "creative":
        temperature = min(0.6, temperature + 0.1)
        top_p = 0.9
    elif enhancement_type == "concise":
        temperature = max(0.2, temperature - 0.1)
        max_tokens = min(1000, int(analysis.word_count * 1.5))
    elif enhancement_type in ("professional", "academic"):
        temperature = max(0.2, temperature - 0.05)
        frequency_penalty = 0.15

    if analysis.word_count < 50:
        max_tokens = min(300, max_tokens)
        temperature = max(0.2, temperature - 0.1)
    elif analysis.word_count > 500:
        max_tokens = min(4000, analysis.word_count * 2)

    if profile:
        max_tokens = min(max_tokens, profile.max_tokens)
    return SamplingParameters(
        temperature=round(temperature, 2),
        max_tokens=max(MIN_MAX_TOKENS, max_tokens),
        top_p=top_p,
        frequency_penalty=frequency_penalty,
        presence_penalty=presence_penalty,
    )


def candidates_for(request: EnhancementRequest, preferred_model: str | None = None) -> list[ModelCandidate]:
    """Build the ordered fallback list for a request."""
    analysis = analyze_text(request.text)
    return [
        ModelCandidate(model_id=model_id, sampling=sampling_for(model_id, analysis, request.enhancement_type))
        for model_id in model_order(request.enhancement_type, analysis, preferred_model)
    ]
