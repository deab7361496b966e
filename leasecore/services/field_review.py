"""
Field Review Service

Applies reviewer actions to persisted lease fields. Each action reads a
consistent snapshot of the lease's fields, performs the transition, writes
the field back and then rewrites the lease aggregate, all while holding the
lease's lock so concurrent reviewers of one lease are serialized. Audit
events are recorded only after both writes succeed.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, cast

from supabase import Client

from leasecore.audit.models import ActorContext
from leasecore.audit.sink import AuditSink
from leasecore.config import get_supabase_config
from leasecore.exceptions import NotFoundError, PersistenceError
from leasecore.extraction.lease_fields import PatternCatalog, get_pattern_catalog
from leasecore.models.lease import PENDING_STATES, ExtractedField, Lease, ValidationState, VerificationStatus
from leasecore.services.lease_locks import LeaseLockRegistry
from leasecore.verification.aggregation import qa_queue, recompute_lease
from leasecore.verification.state_machine import FieldTransition, VerificationStateMachine

logger = logging.getLogger(__name__)

# Columns persisted for a field row
FIELD_COLUMNS = (
    "lease_id, field_name, value_text, value_normalized, extraction_confidence, reason_codes, "
    "source_location, validation_state, validation_notes, last_modified_by, "
    "patterns_matched, patterns_total"
)


class FieldReviewService:
    """Service layer for reviewer actions on stored lease fields."""

    def __init__(
        self,
        supabase_client: Client,
        audit_sink: AuditSink,
        locks: LeaseLockRegistry,
        catalog: Optional[PatternCatalog] = None,
    ):
        """
        Initialize field review service.

        Args:
            supabase_client: Supabase client (service role)
            audit_sink: Destination for transition audit events
            locks: Shared per-lease lock registry
            catalog: Field catalog used to re-type stored values
        """
        self.client = supabase_client
        self.locks = locks
        self.catalog = catalog or get_pattern_catalog()
        self.machine = VerificationStateMachine(audit_sink, catalog=self.catalog)
        config = get_supabase_config()
        self.leases_table = config.leases_table
        self.fields_table = config.lease_fields_table

    def approve_field(
        self,
        lease_id: str,
        field_name: str,
        actor: ActorContext,
        notes: Optional[str] = None,
    ) -> Lease:
        """
        Approve a field's extracted value.

        Raises:
            NotFoundError: If the lease or field does not exist for the actor's org
            IllegalTransitionError: If the field cannot be approved
            PersistenceError: If a write returns no data
        """
        with self.locks.hold(lease_id):
            lease_row = self._load_lease_row(lease_id, actor)
            fields = self._load_fields(lease_id)
            field = self._pick(fields, lease_id, field_name)

            transition = self.machine.prepare_approve(field, actor, notes=notes)
            lease = self._commit(lease_row, fields, transition.field)
            self.machine.record(transition)
            return lease

    def edit_field(
        self,
        lease_id: str,
        field_name: str,
        actor: ActorContext,
        value_text: str,
        notes: Optional[str] = None,
    ) -> Lease:
        """
        Replace a field's value with a reviewer correction.

        Raises:
            ValidationError: If the value is blank
            NotFoundError: If the lease or field does not exist for the actor's org
            IllegalTransitionError: If the field cannot be edited
            PersistenceError: If a write returns no data
        """
        with self.locks.hold(lease_id):
            lease_row = self._load_lease_row(lease_id, actor)
            fields = self._load_fields(lease_id)
            field = self._pick(fields, lease_id, field_name)

            transition = self.machine.prepare_edit(field, actor, value_text, notes=notes)
            lease = self._commit(lease_row, fields, transition.field)
            self.machine.record(transition)
            return lease

    def store_extraction(
        self,
        lease_id: str,
        fresh_fields: Sequence[ExtractedField],
        actor: ActorContext,
        force: bool = False,
    ) -> Lease:
        """
        Persist an extraction run, keeping reviewer-verified values.

        A lease that does not exist yet is created for the actor's org.
        """
        with self.locks.hold(lease_id):
            existing_row = self._find_lease_row(lease_id)
            if existing_row is not None and existing_row.get("org_id") != actor.org_id:
                raise NotFoundError("Lease", lease_id)

            stored = {field.field_name: field for field in self._load_fields(lease_id)} if existing_row else {}
            merged: List[ExtractedField] = []
            transitions: List[FieldTransition] = []
            for fresh in fresh_fields:
                current = stored.pop(fresh.field_name, None)
                if current is None:
                    merged.append(fresh)
                else:
                    transition = self.machine.prepare_merge(current, fresh, actor, force=force)
                    transitions.append(transition)
                    merged.append(transition.field)
            merged.extend(stored.values())

            self._upsert_fields(merged)
            previous = (
                VerificationStatus(existing_row["verification_status"])
                if existing_row and existing_row.get("verification_status") else None
            )
            lease = recompute_lease(lease_id, merged, org_id=actor.org_id, previous_status=previous)
            self._write_lease(lease)
            for transition in transitions:
                self.machine.record(transition)

        logger.info(
            "Extraction stored",
            extra={
                "lease_id": lease_id,
                "field_count": len(merged),
                "verification_status": lease.verification_status.value,
                "user_id": actor.user_id,
            }
        )
        return lease

    def get_lease(self, lease_id: str, actor: ActorContext) -> Lease:
        lease_row = self._load_lease_row(lease_id, actor)
        fields = self._load_fields(lease_id)
        return recompute_lease(lease_id, fields, org_id=lease_row.get("org_id"))

    def list_qa_queue(
        self,
        actor: ActorContext,
        lease_id: Optional[str] = None,
        states: Optional[Iterable[ValidationState]] = None,
        max_confidence: Optional[int] = None,
        limit: int = 50,
    ) -> List[ExtractedField]:
        """
        Pending fields across the actor's org (or one lease), lowest confidence first.
        """
        if lease_id is not None:
            self._load_lease_row(lease_id, actor)
            lease_ids = [lease_id]
        else:
            result = (
                self.client.table(self.leases_table)
                .select("lease_id")
                .eq("org_id", actor.org_id)
                .execute()
            )
            lease_ids = [row["lease_id"] for row in cast(List[Dict[str, Any]], result.data or [])]

        if not lease_ids:
            return []

        wanted = [state.value for state in (states or PENDING_STATES)]
        result = (
            self.client.table(self.fields_table)
            .select(FIELD_COLUMNS)
            .in_("lease_id", lease_ids)
            .in_("validation_state", wanted)
            .execute()
        )
        fields = [self._field_from_record(row) for row in cast(List[Dict[str, Any]], result.data or [])]
        queued = qa_queue(fields, states=states, max_confidence=max_confidence)

        logger.info(
            "Listed QA queue",
            extra={
                "org_id": actor.org_id,
                "lease_id": lease_id,
                "item_count": len(queued),
                "limit": limit,
            }
        )
        return queued[:limit]

    def _find_lease_row(self, lease_id: str) -> Optional[Dict[str, Any]]:
        result = (
            self.client.table(self.leases_table)
            .select("lease_id, org_id, verification_status, confidence_score")
            .eq("lease_id", lease_id)
            .maybe_single()
            .execute()
        )
        if result is None or not result.data:
            return None
        return cast(Dict[str, Any], result.data)

    def _load_lease_row(self, lease_id: str, actor: ActorContext) -> Dict[str, Any]:
        row = self._find_lease_row(lease_id)
        # Leases of other orgs are reported as missing
        if row is None or row.get("org_id") != actor.org_id:
            raise NotFoundError("Lease", lease_id)
        return row

    def _load_fields(self, lease_id: str) -> List[ExtractedField]:
        result = (
            self.client.table(self.fields_table)
            .select(FIELD_COLUMNS)
            .eq("lease_id", lease_id)
            .execute()
        )
        return [self._field_from_record(row) for row in cast(List[Dict[str, Any]], result.data or [])]

    @staticmethod
    def _pick(fields: Sequence[ExtractedField], lease_id: str, field_name: str) -> ExtractedField:
        for field in fields:
            if field.field_name == field_name:
                return field
        raise NotFoundError("Field", f"{lease_id}/{field_name}")

    def _commit(
        self,
        lease_row: Dict[str, Any],
        fields: Sequence[ExtractedField],
        updated: ExtractedField,
    ) -> Lease:
        snapshot = [updated if field.field_name == updated.field_name else field for field in fields]
        self._write_field(updated)

        previous = lease_row.get("verification_status")
        lease = recompute_lease(
            updated.lease_id,
            snapshot,
            org_id=lease_row.get("org_id"),
            previous_status=VerificationStatus(previous) if previous else None,
        )
        self._write_lease(lease)
        return lease

    def _write_field(self, field: ExtractedField) -> None:
        result = (
            self.client.table(self.fields_table)
            .update(self._field_record(field))
            .eq("lease_id", field.lease_id)
            .eq("field_name", field.field_name)
            .execute()
        )
        if not result.data:
            logger.error(
                "Failed to update lease field",
                extra={"lease_id": field.lease_id, "field_name": field.field_name}
            )
            raise PersistenceError("field_update", f"Failed to update field '{field.field_name}'")

    def _upsert_fields(self, fields: Sequence[ExtractedField]) -> None:
        if not fields:
            return
        result = (
            self.client.table(self.fields_table)
            .upsert([self._field_record(field) for field in fields], on_conflict="lease_id,field_name")
            .execute()
        )
        if not result.data:
            raise PersistenceError("field_upsert", "Failed to store extracted fields")

    def _write_lease(self, lease: Lease) -> None:
        result = (
            self.client.table(self.leases_table)
            .upsert({
                "lease_id": lease.lease_id,
                "org_id": lease.org_id,
                "verification_status": lease.verification_status.value,
                "confidence_score": lease.confidence_score,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }, on_conflict="lease_id")
            .execute()
        )
        if not result.data:
            logger.error("Failed to update lease aggregate", extra={"lease_id": lease.lease_id})
            raise PersistenceError("lease_update", f"Failed to update lease '{lease.lease_id}'")

    @staticmethod
    def _field_record(field: ExtractedField) -> Dict[str, Any]:
        return field.model_dump(mode="json")

    def _field_from_record(self, row: Dict[str, Any]) -> ExtractedField:
        field = ExtractedField.model_validate(row)
        definition = self.catalog.get(field.field_name)
        # Stored JSON loses types such as dates; re-derive from the raw text
        if definition is not None and field.value_text is not None:
            field = field.model_copy(update={"value_normalized": definition.normalize(field.value_text)})
        return field
