"""Persistence-facing services."""
from leasecore.services.field_review import FieldReviewService
from leasecore.services.lease_locks import LeaseLockRegistry

__all__ = ["FieldReviewService", "LeaseLockRegistry"]
