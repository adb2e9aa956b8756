"""Quality Validator - heuristic scoring of a model's rewrite against the original.

Each rule in ``RULES`` inspects ``(original, candidate)`` and returns zero or
more findings ``(rule_id, message, penalty)``. Score and confidence both start
at 100; every finding subtracts its penalty from the score, and every rule that
fires subtracts its confidence penalty once. Both are floored at 0.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable

from text_enhancer.models.validation import ValidationResult, Violation

Finding = tuple[str, str, int]  # (rule_id, message, penalty)
Check = Callable[[str, str], list[Finding]]

QUESTION_PATTERNS = [
    r"\?",
    r"could you",
    r"would you like",
    r"do you want",
    r"should i\b",
    r"what would you prefer",
    r"would you prefer",
    r"can you clarify",
    r"do you need",
    r"are you looking for",
    r"what kind of",
    r"which would you",
    r"how would you like",
]

EXPLANATION_PATTERNS = [
    r"here is",
    r"i have enhanced",
    r"the improved version",
    r"here's the enhanced",
    r"i've rewritten",
    r"i've improved",
    r"the enhanced text",
    r"below is the",
    r"the following is",
    r"i've made the following",
    r"here are the improvements",
    r"the revised version",
]

META_PATTERNS = [
    r"i understand",
    r"based on your request",
    r"as requested",
    r"to improve",
    r"in order to enhance",
    r"for better",
    r"this will help",
    r"the goal is to",
    r"i've focused on",
    r"the changes include",
    r"improvements made",
    r"to make it more",
]

AI_PHRASE_PATTERNS = [
    r"as an ai",
    r"i'm an ai",
    r"i cannot",
    r"i don't have",
    r"i'm not able",
    r"i apologize",
    r"i'm sorry",
    r"unfortunately",
    r"however, i\b",
]

MARKUP_PATTERNS = [
    r"\*\*[^*\n]+\*\*",  # bold
    r"__[^_\n]+__",  # bold
    r"(?<![*\w])\*[^*\s][^*\n]*\*(?![*\w])",  # italic
    r"(?m)^\s{0,3}#{1,6}\s",  # header
    r"```",  # code fence
    r"`[^`\n]+`",  # inline code
    r"\[[^\]\n]*\]",  # brackets / links
]

MIN_LENGTH_RATIO = 0.3
MAX_LENGTH_RATIO = 4.0
MIN_ABSOLUTE_LENGTH = 10
MIN_OVERLAP_RATIO = 0.3


def _compile(patterns: list[str]) -> list[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def _pattern_check(rule_id: str, patterns: list[str], message: str, penalty: int) -> Check:
    compiled = _compile(patterns)

    def check(original: str, candidate: str) -> list[Finding]:
        if any(p.search(candidate) for p in compiled):
            return [(rule_id, message, penalty)]
        return []

    return check


def check_length(original: str, candidate: str) -> list[Finding]:
    ratio = len(candidate) / max(len(original), 1)
    if ratio < MIN_LENGTH_RATIO:
        return [("length", "Enhanced text is too short (less than 30% of original)", 30)]
    if ratio > MAX_LENGTH_RATIO:
        return [("length", "Enhanced text is too long (more than 400% of original)", 25)]
    if len(candidate) < MIN_ABSOLUTE_LENGTH:
        return [("length", "Enhanced text is extremely short", 40)]
    return []


def word_overlap_ratio(original: str, candidate: str) -> float:
    """Share of the original's words (longer than 3 chars) that survive in the candidate."""
    original_words = original.lower().split()
    candidate_words = set(candidate.lower().split())
    common = [w for w in original_words if len(w) > 3 and w in candidate_words]
    return len(common) / max(len(original_words), 1)


def check_content_preservation(original: str, candidate: str) -> list[Finding]:
    if original.strip() == candidate.strip():
        return [(
            "content_preservation",
            "No enhancement detected - text is identical to original",
            50,
        )]
    if word_overlap_ratio(original, candidate) < MIN_OVERLAP_RATIO:
        return [(
            "content_preservation",
            "Enhanced text appears to be completely different content",
            45,
        )]
    return []


def check_basic_quality(original: str, candidate: str) -> list[Finding]:
    findings: list[Finding] = []
    stripped = candidate.strip()
    if not stripped:
        findings.append(("basic_quality", "Response is empty or contains only whitespace", 100))

    if len(stripped) > 20 and not re.search(r"[.!?][\"')\]]*$", stripped):
        findings.append((
            "basic_quality",
            "Response appears to be incomplete (no ending punctuation)",
            15,
        ))

    counts = Counter(
        clean for clean in (re.sub(r"[^\w]", "", w.lower()) for w in candidate.split())
        if len(clean) > 4
    )
    if any(n > 3 for n in counts.values()):
        findings.append(("basic_quality", "Response contains excessive word repetition", 10))
    return findings


def _capital_density(text: str) -> float:
    letters = [c for c in text if c.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for c in letters if c.isupper()) / len(letters)


def check_tone(original: str, candidate: str) -> list[Finding]:
    if "?" in original and "?" not in candidate:
        return [("tone", "Original questions were removed in enhancement", 20)]

    original_density = _capital_density(original)
    if original_density == 0:
        return []
    ratio = _capital_density(candidate) / original_density
    if ratio > 3 or ratio < 0.3:
        return [("tone", "Significant tone shift detected in capitalization", 15)]
    return []


@dataclass(frozen=True)
class Rule:
    name: str
    confidence_penalty: int
    checks: tuple[Check, ...]
    strict_only: bool = False

    def evaluate(self, original: str, candidate: str) -> list[Finding]:
        findings: list[Finding] = []
        for check in self.checks:
            findings.extend(check(original, candidate))
        return findings


RULES: tuple[Rule, ...] = (
    Rule("question", 40, (_pattern_check(
        "question", QUESTION_PATTERNS, "Response contains questions instead of enhancement", 60,
    ),)),
    Rule("explanation", 30, (_pattern_check(
        "explanation", EXPLANATION_PATTERNS,
        "Response contains explanations instead of direct enhancement", 40,
    ),)),
    Rule("meta_commentary", 25, (_pattern_check(
        "meta_commentary", META_PATTERNS,
        "Response contains meta-commentary about the enhancement process", 35,
    ),)),
    Rule("length", 15, (check_length,)),
    Rule("content_preservation", 20, (check_content_preservation,)),
    Rule("basic_quality", 10, (check_basic_quality,)),
    Rule("tone", 10, (check_tone,)),
    Rule("strict", 15, (
        _pattern_check(
            "ai_self_reference", AI_PHRASE_PATTERNS,
            "Response contains AI-like phrases or limitations", 25,
        ),
        _pattern_check(
            "markup", MARKUP_PATTERNS,
            "Response contains formatting markup instead of plain text", 10,
        ),
    ), strict_only=True),
)


def validate(
    original: str,
    candidate: str,
    min_score: int = 70,
    strict: bool = True,
) -> ValidationResult:
    """Score ``candidate`` as a rewrite of ``original``. Pure and deterministic."""
    score = 100
    confidence = 100
    violations: list[Violation] = []

    for rule in RULES:
        if rule.strict_only and not strict:
            continue
        findings = rule.evaluate(original, candidate)
        if not findings:
            continue
        confidence -= rule.confidence_penalty
        for rule_id, message, penalty in findings:
            score -= penalty
            violations.append(
                Violation(
                    rule=rule_id,
                    message=message,
                    penalty=penalty,
                    confidence_penalty=rule.confidence_penalty,
                )
            )

    return ValidationResult(
        score=max(0, score),
        confidence=max(0, confidence),
        violations=violations,
        min_score=min_score,
    )


def recommendations(result: ValidationResult) -> list[str]:
    """Suggest prompt or model changes for a failed validation."""
    advice: list[str] = []
    rules = set(result.rules)
    if "question" in rules:
        advice.append('Use stricter prompt with explicit "NO QUESTIONS" instruction')
        advice.append("Lower temperature to 0.3 or below for more focused responses")
    if "explanation" in rules:
        advice.append('Add "RESPOND WITH ENHANCED TEXT ONLY" to prompt')
        advice.append("Use system message to enforce output format")
    if result.score < 50:
        advice.append("Consider using a different model for this content type")
        advice.append("Retry with more specific instructions")
    if result.confidence < 60:
        advice.append("Manual review recommended before using this enhancement")
    return advice
