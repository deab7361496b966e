"""FastAPI dependencies for actor context and shared services."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from supabase import Client

from leasecore.audit.models import ActorContext
from leasecore.audit.sink import AuditSink, get_audit_sink
from leasecore.db import get_supabase_client
from leasecore.services.field_review import FieldReviewService
from leasecore.services.lease_locks import LeaseLockRegistry


def get_actor(
    x_actor_id: Optional[str] = Header(None, description="Acting user id"),
    x_org_id: Optional[str] = Header(None, description="Acting user's organization id"),
) -> ActorContext:
    """
    Dependency to get the acting reviewer from request headers.

    Raises:
        HTTPException: If either header is missing
    """
    if not x_actor_id or not x_org_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "NOT_AUTHENTICATED",
                "message": "X-Actor-Id and X-Org-Id headers are required",
            },
        )
    return ActorContext(user_id=x_actor_id, org_id=x_org_id)


def get_supabase() -> Client:
    return get_supabase_client()


@lru_cache(maxsize=1)
def get_lease_locks() -> LeaseLockRegistry:
    """Process-wide lock registry shared by every request."""
    return LeaseLockRegistry()


@lru_cache(maxsize=1)
def get_shared_audit_sink() -> AuditSink:
    return get_audit_sink()


def get_field_review_service(
    supabase: Client = Depends(get_supabase),
    audit_sink: AuditSink = Depends(get_shared_audit_sink),
    locks: LeaseLockRegistry = Depends(get_lease_locks),
) -> FieldReviewService:
    return FieldReviewService(supabase, audit_sink, locks)
