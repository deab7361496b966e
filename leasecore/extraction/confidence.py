"""
Confidence Scoring

Turns extraction telemetry into a 0-100 score with ordered reason codes.
Factor weights: pattern match quality up to 30 plus 20 when at least two
patterns agree, completeness up to 25, format validity 15, context
keywords up to 10.
"""

from enum import Enum
from typing import List, Sequence

from pydantic import BaseModel, Field

from leasecore.extraction.extractor import FieldMatch
from leasecore.utils import round_score

PATTERN_QUALITY_WEIGHT = 30.0
AGREEMENT_BONUS = 20.0
COMPLETENESS_FULL = 25.0
COMPLETENESS_TOO_SHORT = 10.0
COMPLETENESS_TOO_LONG = 15.0
FORMAT_WEIGHT = 15.0
CONTEXT_WEIGHT = 10.0

MIN_VALUE_LENGTH = 3
MAX_VALUE_LENGTH = 200

HIGH_CONFIDENCE_SCORE = 90
MEDIUM_CONFIDENCE_SCORE = 70


class ReasonCode(str, Enum):
    """Closed vocabulary of confidence audit tags."""
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    LOW_PATTERN_MATCH = "LOW_PATTERN_MATCH"
    STRONG_PATTERN_MATCH = "STRONG_PATTERN_MATCH"
    MULTIPLE_PATTERNS_AGREE = "MULTIPLE_PATTERNS_AGREE"
    PATTERN_DISAGREEMENT = "PATTERN_DISAGREEMENT"
    FIELD_TOO_SHORT = "FIELD_TOO_SHORT"
    FIELD_TOO_LONG = "FIELD_TOO_LONG"
    FORMAT_INVALID = "FORMAT_INVALID"
    NO_CONTEXT_KEYWORDS = "NO_CONTEXT_KEYWORDS"
    HIGH_CONFIDENCE = "HIGH_CONFIDENCE"
    MEDIUM_CONFIDENCE = "MEDIUM_CONFIDENCE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"


BAND_CODES = frozenset(
    {ReasonCode.HIGH_CONFIDENCE.value, ReasonCode.MEDIUM_CONFIDENCE.value, ReasonCode.LOW_CONFIDENCE.value}
)


class ConfidenceFactors(BaseModel):
    """Points contributed by each factor."""
    pattern_match_quality: float = 0.0
    multiple_pattern_agreement: bool = False
    field_completeness: float = 0.0
    format_validation: bool = False
    context_validation: float = 0.0


class ConfidenceResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    reason_codes: List[str] = Field(default_factory=list)
    factors: ConfidenceFactors = Field(default_factory=ConfidenceFactors)


def confidence_band(score: int) -> ReasonCode:
    if score >= HIGH_CONFIDENCE_SCORE:
        return ReasonCode.HIGH_CONFIDENCE
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return ReasonCode.MEDIUM_CONFIDENCE
    return ReasonCode.LOW_CONFIDENCE


def calculate_field_confidence(
    match: FieldMatch,
    format_valid: bool,
    keywords: Sequence[str],
) -> ConfidenceResult:
    """
    Score one field extraction.

    Args:
        match: Extraction telemetry for the field
        format_valid: Whether the field validator accepted the normalized value
        keywords: Expected context keywords for the field

    Returns:
        ConfidenceResult with score, ordered reason codes and factor points
    """
    if not match.found:
        return ConfidenceResult(
            score=0,
            reason_codes=[ReasonCode.FIELD_NOT_FOUND.value, ReasonCode.LOW_CONFIDENCE.value],
        )

    codes: List[ReasonCode] = []
    factors = ConfidenceFactors()

    # Pattern match quality
    if match.patterns_total:
        ratio = match.patterns_matched / match.patterns_total
        factors.pattern_match_quality = ratio * PATTERN_QUALITY_WEIGHT
        if ratio < 0.3:
            codes.append(ReasonCode.LOW_PATTERN_MATCH)
        elif ratio >= 0.7:
            codes.append(ReasonCode.STRONG_PATTERN_MATCH)

    # Agreement between independent patterns
    if match.agreeing_patterns >= 2:
        factors.multiple_pattern_agreement = True
        factors.pattern_match_quality += AGREEMENT_BONUS
        codes.append(ReasonCode.MULTIPLE_PATTERNS_AGREE)
    elif match.patterns_matched > 1:
        codes.append(ReasonCode.PATTERN_DISAGREEMENT)

    # Completeness
    length = len(match.value_text)
    if length < MIN_VALUE_LENGTH:
        factors.field_completeness = COMPLETENESS_TOO_SHORT
        codes.append(ReasonCode.FIELD_TOO_SHORT)
    elif length > MAX_VALUE_LENGTH:
        factors.field_completeness = COMPLETENESS_TOO_LONG
        codes.append(ReasonCode.FIELD_TOO_LONG)
    else:
        factors.field_completeness = COMPLETENESS_FULL

    # Format
    format_points = 0.0
    if format_valid:
        factors.format_validation = True
        format_points = FORMAT_WEIGHT
    else:
        codes.append(ReasonCode.FORMAT_INVALID)

    # Context keywords
    if keywords:
        context = (match.context_window or "").lower()
        found = sum(1 for keyword in keywords if keyword.lower() in context)
        factors.context_validation = found / len(keywords) * CONTEXT_WEIGHT
        if found == 0:
            codes.append(ReasonCode.NO_CONTEXT_KEYWORDS)

    total = (
        factors.pattern_match_quality
        + factors.field_completeness
        + format_points
        + factors.context_validation
    )
    score = max(0, min(100, round_score(total)))
    codes.append(confidence_band(score))

    return ConfidenceResult(
        score=score,
        reason_codes=[code.value for code in codes],
        factors=factors,
    )


_EXPLANATIONS = (
    (ReasonCode.FIELD_NOT_FOUND, "Field not found in document"),
    (ReasonCode.LOW_PATTERN_MATCH, "Few extraction patterns matched"),
    (ReasonCode.PATTERN_DISAGREEMENT, "Multiple patterns disagreed"),
    (ReasonCode.FORMAT_INVALID, "Value format doesn't match expected"),
    (ReasonCode.NO_CONTEXT_KEYWORDS, "Expected keywords not found near value"),
    (ReasonCode.FIELD_TOO_SHORT, "Extracted value seems too short"),
    (ReasonCode.FIELD_TOO_LONG, "Extracted value seems too long"),
    (ReasonCode.MULTIPLE_PATTERNS_AGREE, "Multiple extraction patterns agree"),
    (ReasonCode.STRONG_PATTERN_MATCH, "Strong pattern match"),
)


def explain_confidence(result: ConfidenceResult) -> str:
    """Human-readable explanation of a confidence result."""
    if result.score >= HIGH_CONFIDENCE_SCORE:
        sentences = ["High confidence extraction"]
    elif result.score >= MEDIUM_CONFIDENCE_SCORE:
        sentences = ["Medium confidence - may need review"]
    else:
        sentences = ["Low confidence - requires review"]

    for code, sentence in _EXPLANATIONS:
        if code.value in result.reason_codes:
            sentences.append(sentence)

    return ". ".join(sentences) + "."
