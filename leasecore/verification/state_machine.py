"""
Field Verification State Machine

candidate -> {auto_pass, flagged, rule_fail} at scoring time
{auto_pass, flagged, rule_fail} -> {human_pass, human_edit} by reviewer action
any -> re-scored state only through an explicit re-extraction merge

Every reviewer transition produces exactly one audit event. The
``prepare_*`` methods build the transition without recording it, so a
caller that persists the field can record the event only once the write
has succeeded.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import BaseModel

from leasecore.audit.models import ActorContext, AuditEvent, AuditEventType
from leasecore.audit.sink import AuditSink
from leasecore.exceptions import IllegalTransitionError, ValidationError
from leasecore.extraction.lease_fields import PatternCatalog, get_pattern_catalog
from leasecore.models.lease import ExtractedField, ValidationState

logger = logging.getLogger(__name__)

REVIEWABLE_STATES = frozenset(
    {ValidationState.AUTO_PASS, ValidationState.FLAGGED, ValidationState.RULE_FAIL}
)


class FieldTransition(BaseModel):
    """Resulting field plus the audit event still to be recorded (None when nothing changed)."""
    field: ExtractedField
    event: Optional[AuditEvent] = None


def initial_state(score: int, format_valid: bool, threshold: int) -> ValidationState:
    """
    State assigned when a freshly scored field leaves ``candidate``.

    A validator rejection takes precedence over the score.
    """
    if not format_valid:
        return ValidationState.RULE_FAIL
    if score >= threshold:
        return ValidationState.AUTO_PASS
    return ValidationState.FLAGGED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationStateMachine:
    """Applies reviewer actions to fields and reports them to an audit sink."""

    def __init__(
        self,
        audit_sink: AuditSink,
        catalog: Optional[PatternCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the state machine.

        Args:
            audit_sink: Destination for transition audit events
            catalog: Field catalog used to normalize edited values
            clock: Timestamp source (defaults to current UTC time)
        """
        self.audit_sink = audit_sink
        self.catalog = catalog or get_pattern_catalog()
        self.clock = clock or _utcnow

    def approve(
        self,
        field: ExtractedField,
        actor: ActorContext,
        notes: Optional[str] = None,
    ) -> ExtractedField:
        """Approve and record the audit event immediately."""
        return self.record(self.prepare_approve(field, actor, notes=notes))

    def edit(
        self,
        field: ExtractedField,
        actor: ActorContext,
        value_text: str,
        value_normalized: Any = None,
        notes: Optional[str] = None,
    ) -> ExtractedField:
        """Edit and record the audit event immediately."""
        return self.record(
            self.prepare_edit(field, actor, value_text, value_normalized=value_normalized, notes=notes)
        )

    def merge_reextraction(
        self,
        existing: ExtractedField,
        fresh: ExtractedField,
        actor: ActorContext,
        force: bool = False,
    ) -> ExtractedField:
        """Merge and record any forced-overwrite audit event immediately."""
        return self.record(self.prepare_merge(existing, fresh, actor, force=force))

    def prepare_approve(
        self,
        field: ExtractedField,
        actor: ActorContext,
        notes: Optional[str] = None,
    ) -> FieldTransition:
        """
        Reviewer accepts the extracted value as-is.

        Raises:
            IllegalTransitionError: If the field is not reviewable or has no value
        """
        self._ensure_reviewable(field, "approve")
        if field.value_text is None:
            raise IllegalTransitionError(
                field.validation_state.value,
                "approve",
                message=f"Cannot approve field '{field.field_name}' without a value; edit it instead",
            )

        updated = field.model_copy(update={
            "validation_state": ValidationState.HUMAN_PASS,
            "validation_notes": notes if notes is not None else field.validation_notes,
            "last_modified_by": actor.user_id,
        })
        return FieldTransition(
            field=updated,
            event=self._event(AuditEventType.FIELD_APPROVED, actor, field, updated, notes),
        )

    def prepare_edit(
        self,
        field: ExtractedField,
        actor: ActorContext,
        value_text: str,
        value_normalized: Any = None,
        notes: Optional[str] = None,
    ) -> FieldTransition:
        """
        Reviewer replaces the value.

        The normalized value is derived from the catalog definition when not
        supplied.

        Raises:
            ValidationError: If the new value is blank
            IllegalTransitionError: If the field is not reviewable
        """
        if value_text is None or not value_text.strip():
            raise ValidationError(
                "Edited value must not be blank",
                details=[{"field": field.field_name, "message": "value_text is required"}],
            )
        self._ensure_reviewable(field, "edit")

        value_text = value_text.strip()
        if value_normalized is None:
            definition = self.catalog.get(field.field_name)
            value_normalized = definition.normalize(value_text) if definition else value_text

        updated = field.model_copy(update={
            "value_text": value_text,
            "value_normalized": value_normalized,
            "validation_state": ValidationState.HUMAN_EDIT,
            "validation_notes": notes if notes is not None else field.validation_notes,
            "last_modified_by": actor.user_id,
        })
        return FieldTransition(
            field=updated,
            event=self._event(AuditEventType.FIELD_EDITED, actor, field, updated, notes),
        )

    def prepare_merge(
        self,
        existing: ExtractedField,
        fresh: ExtractedField,
        actor: ActorContext,
        force: bool = False,
    ) -> FieldTransition:
        """
        Reconcile a re-extracted field with the stored one.

        Reviewer-asserted fields survive re-extraction unless ``force`` is set,
        in which case the overwrite is audited.
        """
        if existing.field_name != fresh.field_name:
            raise ValidationError(
                f"Cannot merge field '{fresh.field_name}' into '{existing.field_name}'"
            )

        if not existing.is_terminal:
            return FieldTransition(field=fresh)

        if not force:
            logger.info(
                "Kept reviewer-verified field on re-extraction",
                extra={"lease_id": existing.lease_id, "field_name": existing.field_name}
            )
            return FieldTransition(field=existing)

        return FieldTransition(
            field=fresh,
            event=self._event(
                AuditEventType.FIELD_REEXTRACTED,
                actor,
                existing,
                fresh,
                notes="Reviewer-verified value replaced by forced re-extraction",
            ),
        )

    def record(self, transition: FieldTransition) -> ExtractedField:
        """Write the transition's audit event, if any, and return its field."""
        event = transition.event
        if event is not None:
            self.audit_sink.record(event)
            logger.info(
                "Field transition",
                extra={
                    "lease_id": event.lease_id,
                    "field_name": event.field_name,
                    "event_type": event.event_type.value,
                    "previous_state": event.previous_state.value,
                    "new_state": event.new_state.value,
                    "actor_id": event.actor_id,
                }
            )
        return transition.field

    def _ensure_reviewable(self, field: ExtractedField, action: str) -> None:
        if field.validation_state not in REVIEWABLE_STATES:
            raise IllegalTransitionError(field.validation_state.value, action)

    def _event(
        self,
        event_type: AuditEventType,
        actor: ActorContext,
        before: ExtractedField,
        after: ExtractedField,
        notes: Optional[str],
    ) -> AuditEvent:
        return AuditEvent.create(
            event_type=event_type,
            actor=actor,
            lease_id=before.lease_id,
            field_name=before.field_name,
            previous_state=before.validation_state,
            new_state=after.validation_state,
            previous_value=before.value_text,
            new_value=after.value_text,
            notes=notes,
            timestamp=self.clock(),
        )
