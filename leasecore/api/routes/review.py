"""
Review API Routes

Reviewer actions on stored lease fields and the QA queue of fields
awaiting human review.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status

from leasecore.api.dependencies import get_actor, get_field_review_service
from leasecore.api.schemas import ApproveRequest, EditRequest, LeaseResponse, QueueResponse
from leasecore.audit.models import ActorContext
from leasecore.models.lease import PENDING_STATES, ValidationState
from leasecore.services.field_review import FieldReviewService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/review",
    tags=["review"],
)


def _pending_states(requested: Optional[List[ValidationState]]) -> List[ValidationState]:
    if requested:
        return [state for state in requested if state in PENDING_STATES]
    return sorted(PENDING_STATES, key=lambda state: state.value)


@router.get(
    "/leases/{lease_id}",
    response_model=LeaseResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a lease with its fields",
)
def get_lease(
    lease_id: str = Path(..., min_length=1),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> LeaseResponse:
    return LeaseResponse(lease=service.get_lease(lease_id, actor))


@router.post(
    "/leases/{lease_id}/fields/{field_name}/approve",
    response_model=LeaseResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve a field",
    description="""
    Accept a field's extracted value as-is (state ``human_pass``).

    Only fields in auto_pass, flagged or rule_fail can be approved, and the
    field must have a value. Illegal transitions return 409. The lease's
    status and confidence are recomputed and returned.
    """,
)
def approve_field(
    request: Request,
    body: ApproveRequest,
    lease_id: str = Path(..., min_length=1),
    field_name: str = Path(..., min_length=1),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> LeaseResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    lease = service.approve_field(lease_id, field_name, actor, notes=body.notes)

    logger.info(
        "Field approved",
        extra={
            "request_id": request_id,
            "lease_id": lease_id,
            "field_name": field_name,
            "user_id": actor.user_id,
            "verification_status": lease.verification_status.value,
        },
    )
    return LeaseResponse(lease=lease)


@router.post(
    "/leases/{lease_id}/fields/{field_name}/edit",
    response_model=LeaseResponse,
    status_code=status.HTTP_200_OK,
    summary="Edit a field",
    description="""
    Replace a field's value with a reviewer correction (state ``human_edit``).

    The normalized value is derived from the field's type. A blank value
    returns 400; an illegal transition returns 409.
    """,
)
def edit_field(
    request: Request,
    body: EditRequest,
    lease_id: str = Path(..., min_length=1),
    field_name: str = Path(..., min_length=1),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> LeaseResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    lease = service.edit_field(lease_id, field_name, actor, body.value_text, notes=body.notes)

    logger.info(
        "Field edited",
        extra={
            "request_id": request_id,
            "lease_id": lease_id,
            "field_name": field_name,
            "user_id": actor.user_id,
            "verification_status": lease.verification_status.value,
        },
    )
    return LeaseResponse(lease=lease)


@router.get(
    "/leases/{lease_id}/queue",
    response_model=QueueResponse,
    status_code=status.HTTP_200_OK,
    summary="QA queue for one lease",
)
def list_lease_queue(
    lease_id: str = Path(..., min_length=1),
    max_confidence: Optional[int] = Query(None, ge=0, le=100),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> QueueResponse:
    states = _pending_states(None)
    items = service.list_qa_queue(actor, lease_id=lease_id, states=states, max_confidence=max_confidence)
    return QueueResponse(items=items, total_count=len(items), states=states)


@router.get(
    "/queue",
    response_model=QueueResponse,
    status_code=status.HTTP_200_OK,
    summary="QA queue",
    description="""
    Fields awaiting human review across your organization, lowest
    confidence first. Filter by lease, state and a confidence ceiling.
    """,
)
def list_queue(
    lease_id: Optional[str] = Query(None, min_length=1),
    state: Optional[List[ValidationState]] = Query(None, description="Pending states to include"),
    max_confidence: Optional[int] = Query(None, ge=0, le=100),
    limit: int = Query(50, ge=1, le=500),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> QueueResponse:
    states = _pending_states(state)
    items = service.list_qa_queue(
        actor,
        lease_id=lease_id,
        states=states,
        max_confidence=max_confidence,
        limit=limit,
    )
    return QueueResponse(items=items, total_count=len(items), states=states)
