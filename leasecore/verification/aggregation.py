"""Lease-level status and confidence derived from field states."""
from typing import Iterable, List, Optional, Sequence

from leasecore.exceptions import IllegalTransitionError
from leasecore.models.lease import (
    PENDING_STATES,
    VERIFIED_STATES,
    ExtractedField,
    Lease,
    ValidationState,
    VerificationStatus,
)
from leasecore.utils import round_score


def aggregate_status(fields: Sequence[ExtractedField]) -> VerificationStatus:
    """verified iff non-empty and all verified; in_review iff any pending."""
    if fields and all(field.validation_state in VERIFIED_STATES for field in fields):
        return VerificationStatus.VERIFIED
    if any(field.validation_state in PENDING_STATES for field in fields):
        return VerificationStatus.IN_REVIEW
    return VerificationStatus.UNVERIFIED


def lease_confidence(fields: Sequence[ExtractedField]) -> int:
    """Mean field confidence, halves rounded up; 0 without fields."""
    if not fields:
        return 0
    return round_score(sum(field.extraction_confidence for field in fields) / len(fields))


def recompute_lease(
    lease_id: str,
    fields: Sequence[ExtractedField],
    org_id: Optional[str] = None,
    previous_status: Optional[VerificationStatus] = None,
) -> Lease:
    """
    Rebuild the lease aggregate from a consistent snapshot of its fields.

    Raises:
        IllegalTransitionError: If a verified lease would be re-aggregated from zero fields
    """
    if not fields and previous_status == VerificationStatus.VERIFIED:
        raise IllegalTransitionError(
            previous_status.value,
            "re-aggregate",
            message=f"Lease '{lease_id}' is verified and cannot be re-aggregated from zero fields",
        )

    return Lease(
        lease_id=lease_id,
        org_id=org_id,
        verification_status=aggregate_status(fields),
        confidence_score=lease_confidence(fields),
        fields=list(fields),
    )


def qa_queue(
    fields: Iterable[ExtractedField],
    states: Optional[Iterable[ValidationState]] = None,
    max_confidence: Optional[int] = None,
) -> List[ExtractedField]:
    """
    Fields awaiting human review, lowest confidence first.

    Args:
        fields: Candidate fields
        states: Pending states to include (defaults to all pending states)
        max_confidence: Only include fields scoring at or below this value
    """
    wanted = frozenset(states) if states is not None else PENDING_STATES
    queued = [
        field for field in fields
        if field.validation_state in wanted
        and field.validation_state in PENDING_STATES
        and (max_confidence is None or field.extraction_confidence <= max_confidence)
    ]
    return sorted(queued, key=lambda field: (field.extraction_confidence, field.field_name))
