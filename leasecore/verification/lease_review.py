"""In-memory review session over one lease's fields."""
import logging
from typing import Any, Dict, Iterable, List, Optional

from leasecore.audit.models import ActorContext
from leasecore.exceptions import NotFoundError
from leasecore.models.lease import ExtractedField, Lease, ValidationState
from leasecore.verification.aggregation import qa_queue, recompute_lease
from leasecore.verification.state_machine import VerificationStateMachine

logger = logging.getLogger(__name__)


class LeaseReview:
    """
    Holds one lease's fields keyed by name and applies reviewer actions.

    The lease aggregate is recomputed after every transition. Not
    thread-safe; callers serialize access per lease.
    """

    def __init__(
        self,
        lease_id: str,
        fields: Iterable[ExtractedField],
        machine: VerificationStateMachine,
        org_id: Optional[str] = None,
    ):
        self.lease_id = lease_id
        self.org_id = org_id
        self.machine = machine
        self._fields: Dict[str, ExtractedField] = {field.field_name: field for field in fields}
        self.lease: Lease = recompute_lease(lease_id, self.fields, org_id=org_id)

    @property
    def fields(self) -> List[ExtractedField]:
        return list(self._fields.values())

    def get_field(self, field_name: str) -> ExtractedField:
        field = self._fields.get(field_name)
        if field is None:
            raise NotFoundError("Field", f"{self.lease_id}/{field_name}")
        return field

    def approve(self, field_name: str, actor: ActorContext, notes: Optional[str] = None) -> Lease:
        updated = self.machine.approve(self.get_field(field_name), actor, notes=notes)
        return self._apply(updated)

    def edit(
        self,
        field_name: str,
        actor: ActorContext,
        value_text: str,
        value_normalized: Any = None,
        notes: Optional[str] = None,
    ) -> Lease:
        updated = self.machine.edit(
            self.get_field(field_name),
            actor,
            value_text,
            value_normalized=value_normalized,
            notes=notes,
        )
        return self._apply(updated)

    def merge_reextraction(
        self,
        fresh_fields: Iterable[ExtractedField],
        actor: ActorContext,
        force: bool = False,
    ) -> Lease:
        """Fold a re-extraction into the session; new field names are added as-is."""
        for fresh in fresh_fields:
            existing = self._fields.get(fresh.field_name)
            if existing is None:
                self._fields[fresh.field_name] = fresh
            else:
                self._fields[fresh.field_name] = self.machine.merge_reextraction(
                    existing, fresh, actor, force=force
                )
        return self._refresh()

    def queue(
        self,
        states: Optional[Iterable[ValidationState]] = None,
        max_confidence: Optional[int] = None,
    ) -> List[ExtractedField]:
        return qa_queue(self.fields, states=states, max_confidence=max_confidence)

    def _apply(self, updated: ExtractedField) -> Lease:
        self._fields[updated.field_name] = updated
        return self._refresh()

    def _refresh(self) -> Lease:
        self.lease = recompute_lease(
            self.lease_id,
            self.fields,
            org_id=self.org_id,
            previous_status=self.lease.verification_status,
        )
        logger.debug(
            "Lease aggregate recomputed",
            extra={
                "lease_id": self.lease_id,
                "verification_status": self.lease.verification_status.value,
                "confidence_score": self.lease.confidence_score,
            }
        )
        return self.lease
