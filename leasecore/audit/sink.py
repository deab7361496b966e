"""Audit sinks: where field transition events are recorded."""
import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from supabase import Client

from leasecore.audit.models import AuditEvent
from leasecore.config import get_audit_config, get_supabase_config
from leasecore.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class AuditSink(ABC):
    """Destination for audit events. Implementations must not drop events silently."""

    @abstractmethod
    def record(self, event: AuditEvent) -> None:
        """Persist one audit event."""


class InMemoryAuditSink(AuditSink):
    """Process-local sink for tests and batch tooling."""

    def __init__(self):
        self._events: List[AuditEvent] = []
        self._lock = threading.Lock()

    def record(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[AuditEvent]:
        with self._lock:
            return list(self._events)

    def events_for(self, lease_id: str, field_name: Optional[str] = None) -> List[AuditEvent]:
        return [
            event for event in self.events
            if event.lease_id == lease_id and (field_name is None or event.field_name == field_name)
        ]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class SupabaseAuditSink(AuditSink):
    """Writes audit events synchronously to the audit events table."""

    def __init__(self, supabase_client: Client, table_name: Optional[str] = None):
        """
        Initialize Supabase audit sink.

        Args:
            supabase_client: Supabase client (service role)
            table_name: Audit events table (defaults to SupabaseConfig.audit_events_table)
        """
        self.client = supabase_client
        self.table_name = table_name or get_supabase_config().audit_events_table

    def record(self, event: AuditEvent) -> None:
        """
        Insert the event.

        Raises:
            PersistenceError: If the insert returns no data
        """
        result = self.client.table(self.table_name).insert(event.to_record()).execute()

        if not result.data:
            logger.error(
                "Failed to write audit event",
                extra={
                    "event_id": event.event_id,
                    "lease_id": event.lease_id,
                    "field_name": event.field_name,
                }
            )
            raise PersistenceError("audit_insert", "Failed to write audit event")

        logger.debug(
            "Audit event written",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type.value,
                "lease_id": event.lease_id,
            }
        )


def get_audit_sink(supabase_client: Optional[Client] = None) -> AuditSink:
    """Get audit sink instance based on configuration.

    Args:
        supabase_client: Client for the supabase backend (defaults to the shared client)

    Returns:
        InMemoryAuditSink or SupabaseAuditSink per AUDIT_BACKEND
    """
    config = get_audit_config()

    if config.audit_backend == "memory":
        return InMemoryAuditSink()

    if supabase_client is None:
        from leasecore.db import get_supabase_client
        supabase_client = get_supabase_client()
    return SupabaseAuditSink(supabase_client)
