"""Human-in-the-loop verification of extracted fields."""
from .aggregation import aggregate_status, lease_confidence, qa_queue, recompute_lease
from .lease_review import LeaseReview
from .state_machine import REVIEWABLE_STATES, VerificationStateMachine, initial_state

__all__ = [
    "aggregate_status",
    "lease_confidence",
    "qa_queue",
    "recompute_lease",
    "LeaseReview",
    "REVIEWABLE_STATES",
    "VerificationStateMachine",
    "initial_state",
]
