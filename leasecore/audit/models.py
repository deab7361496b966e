"""Audit event models for field review transitions."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from leasecore.models.lease import ValidationState


class AuditEventType(str, Enum):
    FIELD_APPROVED = "FIELD_APPROVED"
    FIELD_EDITED = "FIELD_EDITED"
    FIELD_REEXTRACTED = "FIELD_REEXTRACTED"


class ActorContext(BaseModel):
    """Identity of whoever performs a transition. Always passed explicitly."""
    user_id: str = Field(..., min_length=1, description="Acting user ID")
    org_id: str = Field(..., min_length=1, description="Organization the action occurs in")

    class Config:
        """Pydantic configuration."""
        frozen = True


class AuditEvent(BaseModel):
    """Immutable record of one field transition.

    Carries both sides of the change so the review history can be replayed
    without consulting the field table.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()), description="Event identifier")
    event_type: AuditEventType = Field(..., description="Kind of transition")
    org_id: str = Field(..., description="Organization where the action occurred")
    lease_id: str = Field(..., description="Lease the field belongs to")
    field_name: str = Field(..., description="Field that changed")
    actor_id: str = Field(..., description="User who performed the action")
    timestamp: datetime = Field(..., description="When the transition happened (UTC)")
    previous_state: ValidationState
    new_state: ValidationState
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        """Pydantic configuration."""
        frozen = True

    def to_record(self) -> Dict[str, Any]:
        """Row representation for the audit events table."""
        return self.model_dump(mode="json")

    @classmethod
    def create(
        cls,
        event_type: AuditEventType,
        actor: ActorContext,
        lease_id: str,
        field_name: str,
        previous_state: ValidationState,
        new_state: ValidationState,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
        notes: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "AuditEvent":
        """Create an audit event, stamped with the current UTC time unless given one."""
        return cls(
            event_type=event_type,
            org_id=actor.org_id,
            lease_id=lease_id,
            field_name=field_name,
            actor_id=actor.user_id,
            timestamp=timestamp or datetime.now(timezone.utc),
            previous_state=previous_state,
            new_state=new_state,
            previous_value=previous_value,
            new_value=new_value,
            notes=notes,
            metadata=metadata or {},
        )
