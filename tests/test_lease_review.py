"""Tests for in-memory lease review sessions."""
import pytest

from leasecore.exceptions import IllegalTransitionError, NotFoundError
from leasecore.models.lease import ValidationState, VerificationStatus
from leasecore.verification.lease_review import LeaseReview


@pytest.fixture
def review(machine, make_field):
    return LeaseReview(
        "lease-1",
        [
            make_field("base_rent", "2,500", confidence=60),
            make_field("tenant_name", "Acme Corp", confidence=40),
        ],
        machine,
        org_id="org-1",
    )


class TestLeaseReview:
    """Tests for LeaseReview."""

    def test_initial_aggregate(self, review):
        assert review.lease.verification_status == VerificationStatus.IN_REVIEW
        assert review.lease.confidence_score == 50

    def test_approve_sequence(self, review, actor, audit_sink):
        first = review.approve("base_rent", actor)

        assert first.verification_status == VerificationStatus.IN_REVIEW
        assert len(audit_sink.events_for("lease-1", "base_rent")) == 1

        second = review.approve("tenant_name", actor)

        assert second.verification_status == VerificationStatus.VERIFIED
        assert len(audit_sink.events_for("lease-1", "tenant_name")) == 1
        assert len(audit_sink.events) == 2
        assert review.lease is second

    def test_approve_twice_rejected(self, review, actor, audit_sink):
        review.approve("base_rent", actor)

        with pytest.raises(IllegalTransitionError):
            review.approve("base_rent", actor)

        assert len(audit_sink.events) == 1
        assert review.get_field("base_rent").validation_state == ValidationState.HUMAN_PASS

    def test_edit(self, review, actor):
        lease = review.edit("tenant_name", actor, "Acme Corporation")

        field = review.get_field("tenant_name")
        assert field.value_text == "Acme Corporation"
        assert field.validation_state == ValidationState.HUMAN_EDIT
        assert lease.verification_status == VerificationStatus.IN_REVIEW

    def test_unknown_field(self, review, actor):
        with pytest.raises(NotFoundError):
            review.approve("guarantor", actor)

    def test_merge_keeps_reviewed_values(self, review, actor, make_field):
        review.approve("base_rent", actor)

        lease = review.merge_reextraction(
            [
                make_field("base_rent", "9,999", confidence=95, state=ValidationState.AUTO_PASS),
                make_field("tenant_name", "Acme Corp", confidence=95, state=ValidationState.AUTO_PASS),
                make_field("guarantor", None),
            ],
            actor,
        )

        assert review.get_field("base_rent").value_text == "2,500"
        assert review.get_field("tenant_name").validation_state == ValidationState.AUTO_PASS
        assert review.get_field("guarantor").value_text is None
        assert lease.verification_status == VerificationStatus.IN_REVIEW

    def test_queue(self, review):
        assert [field.field_name for field in review.queue()] == ["tenant_name", "base_rent"]
        assert [field.field_name for field in review.queue(max_confidence=50)] == ["tenant_name"]
