"""Audit trail for field review transitions."""
from .models import ActorContext, AuditEvent, AuditEventType
from .sink import AuditSink, InMemoryAuditSink, SupabaseAuditSink, get_audit_sink

__all__ = [
    "ActorContext",
    "AuditEvent",
    "AuditEventType",
    "AuditSink",
    "InMemoryAuditSink",
    "SupabaseAuditSink",
    "get_audit_sink",
]
