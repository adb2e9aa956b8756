"""Tests for the heuristic quality validator."""

import pytest

from text_enhancer.pipeline.quality_validator import (
    check_basic_quality,
    check_content_preservation,
    check_length,
    check_tone,
    recommendations,
    validate,
    word_overlap_ratio,
)

ORIGINAL = "the meeting moved to friday afternoon because of the holiday schedule"
CLEAN = "The meeting has moved to Friday afternoon because of the holiday schedule."


class TestValidate:
    def test_clean_rewrite_is_valid(self):
        result = validate(ORIGINAL, CLEAN)
        assert result.score == 100
        assert result.confidence == 100
        assert result.violations == []
        assert result.is_valid

    def test_question_response(self):
        result = validate(
            "make the tone of this update a bit better for the team",
            "Could you clarify what tone you want?",
        )
        assert result.score <= 40
        assert "question" in result.rules
        assert "Response contains questions instead of enhancement" in result.messages
        assert not result.is_valid

    def test_identical_long_text(self):
        original = (
            "Our quarterly planning session covers hiring targets, budget allocation "
            "for infrastructure, the migration schedule for legacy billing services, "
            "customer onboarding improvements, security audit follow-ups, a review of "
            "incident response times, documentation gaps in the payments team, vendor "
            "contract renewals, and a proposal for shared on-call rotations across "
            "platform groups. Please read the attached notes before Thursday morning."
        )
        result = validate(original, original)
        assert result.score <= 50
        assert "content_preservation" in result.rules
        assert not result.is_valid

    def test_explanation_prefix(self):
        result = validate(ORIGINAL, "Here is the improved version: " + CLEAN)
        assert "explanation" in result.rules
        assert result.score == 60

    def test_meta_commentary(self):
        result = validate(ORIGINAL, CLEAN[:-1] + ", as requested.")
        assert result.rules == ["meta_commentary"]
        assert result.score == 65
        assert result.confidence == 75

    def test_violation_carries_both_penalties(self):
        result = validate(ORIGINAL, CLEAN[:-1] + ", as requested.")
        violation = result.violations[0]
        assert violation.penalty == 35
        assert violation.confidence_penalty == 25

    def test_score_and_confidence_floor_at_zero(self):
        result = validate(
            ORIGINAL,
            "Here is what I understand: could you tell me more? As an AI I cannot **guess**",
        )
        assert result.score == 0
        assert result.confidence >= 0
        assert not result.is_valid

    def test_deterministic(self):
        first = validate(ORIGINAL, "Here is the text, could you check it?")
        second = validate(ORIGINAL, "Here is the text, could you check it?")
        assert first == second

    def test_violation_blocks_validity_even_above_threshold(self):
        result = validate(ORIGINAL, CLEAN[:-1] + ", as requested.", min_score=0)
        assert result.score >= result.min_score
        assert not result.is_valid

    def test_custom_min_score(self):
        result = validate(ORIGINAL, CLEAN, min_score=60)
        assert result.min_score == 60
        assert result.is_valid


class TestStrictMode:
    @pytest.mark.parametrize(
        "candidate",
        [
            "The meeting has moved to **Friday** afternoon because of the holiday schedule.",
            "## The meeting has moved to Friday afternoon because of the holiday schedule.",
            "The meeting has moved to `Friday` afternoon because of the holiday schedule.",
        ],
    )
    def test_markup_flagged_in_strict_mode(self, candidate):
        assert "markup" in validate(ORIGINAL, candidate).rules

    def test_markup_ignored_when_not_strict(self):
        candidate = "The meeting has moved to **Friday** afternoon because of the holiday schedule."
        result = validate(ORIGINAL, candidate, strict=False)
        assert "markup" not in result.rules
        assert result.score == 100

    def test_ai_phrase(self):
        candidate = "Unfortunately the meeting has moved to Friday afternoon because of the holiday schedule."
        result = validate(ORIGINAL, candidate)
        assert "ai_self_reference" in result.rules

    def test_both_strict_checks_count_confidence_once(self):
        candidate = (
            "Unfortunately the meeting has moved to **Friday** afternoon because of the holiday schedule."
        )
        result = validate(ORIGINAL, candidate)
        assert set(result.rules) == {"ai_self_reference", "markup"}
        assert result.score == 65
        assert result.confidence == 85


class TestLength:
    def test_too_short(self):
        assert check_length("x" * 100, "Short one.")[0][2] == 30

    def test_too_long(self):
        assert check_length("A short note.", "word " * 20)[0][2] == 25

    def test_extremely_short(self):
        assert check_length("hi there", "Hi there.")[0][2] == 40

    def test_within_bounds(self):
        assert check_length(ORIGINAL, CLEAN) == []


class TestContentPreservation:
    def test_identical_after_strip(self):
        findings = check_content_preservation("same text here", "  same text here \n")
        assert findings[0][2] == 50

    def test_different_content(self):
        findings = check_content_preservation(ORIGINAL, "Bananas are an excellent source of potassium.")
        assert findings[0][2] == 45

    def test_overlap_ratio(self):
        assert word_overlap_ratio("alpha beta gamma", "alpha beta gamma") == 1.0
        assert word_overlap_ratio("", "anything") == 0.0


class TestBasicQuality:
    def test_empty_response(self):
        assert check_basic_quality(ORIGINAL, "   ")[0][2] == 100

    def test_missing_terminal_punctuation(self):
        findings = check_basic_quality(ORIGINAL, "The meeting has moved to Friday afternoon")
        assert [f[2] for f in findings] == [15]

    def test_closing_quote_after_period_is_fine(self):
        assert check_basic_quality(ORIGINAL, 'She said "the meeting has moved to Friday."') == []

    def test_excessive_repetition(self):
        candidate = "Really great, really good, really nice, really fine work here."
        findings = check_basic_quality(ORIGINAL, candidate)
        assert ("basic_quality", "Response contains excessive word repetition", 10) in findings


class TestTone:
    def test_removed_question(self):
        findings = check_tone("can we move the meeting to friday?", "We can move the meeting to Friday.")
        assert findings[0][2] == 20

    def test_capitalization_shift(self):
        findings = check_tone("The Meeting Moved.", "THE MEETING MOVED TO FRIDAY AFTERNOON.")
        assert findings[0][2] == 15

    def test_lowercase_original_skips_capitalization(self):
        assert check_tone(ORIGINAL, CLEAN) == []


class TestRecommendations:
    def test_question_advice(self):
        result = validate(ORIGINAL, "Could you tell me which day works?")
        advice = recommendations(result)
        assert any("NO QUESTIONS" in a for a in advice)

    def test_valid_result_has_no_advice(self):
        assert recommendations(validate(ORIGINAL, CLEAN)) == []
