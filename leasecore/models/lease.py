"""Pydantic models for extracted lease fields and the lease aggregate."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class ValidationState(str, Enum):
    """Position of a field in the human-in-the-loop review lifecycle."""
    CANDIDATE = "candidate"
    AUTO_PASS = "auto_pass"
    FLAGGED = "flagged"
    RULE_FAIL = "rule_fail"
    HUMAN_PASS = "human_pass"
    HUMAN_EDIT = "human_edit"


class VerificationStatus(str, Enum):
    """Lease-level status derived from its field states."""
    UNVERIFIED = "unverified"
    IN_REVIEW = "in_review"
    VERIFIED = "verified"


VERIFIED_STATES = frozenset(
    {ValidationState.HUMAN_PASS, ValidationState.HUMAN_EDIT, ValidationState.AUTO_PASS}
)
PENDING_STATES = frozenset(
    {ValidationState.FLAGGED, ValidationState.RULE_FAIL, ValidationState.CANDIDATE}
)
TERMINAL_STATES = frozenset({ValidationState.HUMAN_PASS, ValidationState.HUMAN_EDIT})


class SourceLocation(BaseModel):
    """Where in the document a value was found."""
    text_snippet: str = Field(..., description="Context window around the match")
    estimated_page: int = Field(..., ge=1, description="Estimated 1-based page number")


class ExtractedField(BaseModel):
    """Single extracted field with its confidence, provenance and review state."""
    lease_id: str = Field(..., min_length=1, description="Owning lease identifier")
    field_name: str = Field(..., min_length=1, description="Catalog field name")
    value_text: Optional[str] = Field(None, description="Raw captured text")
    value_normalized: Any = Field(None, description="Typed value produced by the normalizer")
    extraction_confidence: int = Field(0, ge=0, le=100, description="Confidence score (0-100)")
    reason_codes: list[str] = Field(default_factory=list, description="Ordered audit tags")
    source_location: Optional[SourceLocation] = Field(None, description="Match provenance")
    validation_state: ValidationState = Field(
        ValidationState.CANDIDATE, description="Review lifecycle state"
    )
    validation_notes: Optional[str] = Field(None, description="Reviewer or rule notes")
    last_modified_by: Optional[str] = Field(None, description="Actor of the last transition")
    patterns_matched: int = Field(0, ge=0, description="Patterns that hit")
    patterns_total: int = Field(0, ge=0, description="Patterns tried")

    @model_validator(mode="after")
    def _absent_value_is_pending(self) -> "ExtractedField":
        if self.value_text is None:
            if self.extraction_confidence != 0:
                raise ValueError("A field without value_text must have extraction_confidence 0")
            if self.validation_state not in PENDING_STATES:
                raise ValueError("A field without value_text must be in a pending state")
        return self

    @property
    def is_verified(self) -> bool:
        return self.validation_state in VERIFIED_STATES

    @property
    def is_terminal(self) -> bool:
        return self.validation_state in TERMINAL_STATES


class Lease(BaseModel):
    """Lease aggregate root: derived status and confidence over its fields."""
    lease_id: str = Field(..., min_length=1)
    org_id: Optional[str] = Field(None, description="Owning organization")
    verification_status: VerificationStatus = Field(VerificationStatus.UNVERIFIED)
    confidence_score: int = Field(0, ge=0, le=100, description="Mean field confidence")
    fields: list[ExtractedField] = Field(default_factory=list)
