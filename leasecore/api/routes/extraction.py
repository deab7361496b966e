"""
Extraction API Routes

Runs deterministic field extraction over lease text and stores extraction
runs for review.
"""

import logging

from fastapi import APIRouter, Depends, Path, Request, status

from leasecore.api.dependencies import get_actor, get_field_review_service
from leasecore.api.schemas import ExtractRequest, ExtractResponse, LeaseResponse, StoreExtractionRequest
from leasecore.audit.models import ActorContext
from leasecore.extraction.pipeline import extract_lease_fields
from leasecore.extraction.schema_builder import build_lease_schema
from leasecore.services.field_review import FieldReviewService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/extraction",
    tags=["extraction"],
)


@router.post(
    "/extract",
    response_model=ExtractResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract lease fields from text",
    description="""
    Apply the lease pattern catalog to plain document text.

    Returns one entry per catalog field with its raw and normalized value,
    confidence score (0-100), ordered reason codes, source context and
    initial review state, plus the structured lease schema built from the
    captured values. Nothing is stored.
    """,
)
def extract(request: Request, body: ExtractRequest) -> ExtractResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    report = extract_lease_fields(body.lease_id, body.text)
    schema = build_lease_schema(
        body.lease_id,
        report.fields,
        org_id=body.org_id,
        verification_status=report.verification_status,
    )

    logger.info(
        "Extraction request complete",
        extra={
            "request_id": request_id,
            "lease_id": body.lease_id,
            "fields_found": report.fields_found,
            "confidence_score": report.confidence_score,
        },
    )
    return ExtractResponse(report=report, lease_schema=schema)


@router.post(
    "/leases/{lease_id}",
    response_model=LeaseResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract and store a lease's fields",
    description="""
    Extract fields from text and store them for review.

    Fields a reviewer already approved or edited are kept unless ``force``
    is set, in which case the overwrite is audited. Requires the X-Actor-Id
    and X-Org-Id headers.
    """,
)
def store_extraction(
    request: Request,
    body: StoreExtractionRequest,
    lease_id: str = Path(..., min_length=1, description="Lease identifier"),
    actor: ActorContext = Depends(get_actor),
    service: FieldReviewService = Depends(get_field_review_service),
) -> LeaseResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    report = extract_lease_fields(lease_id, body.text)
    lease = service.store_extraction(lease_id, report.fields, actor, force=body.force)

    logger.info(
        "Stored extraction",
        extra={
            "request_id": request_id,
            "lease_id": lease_id,
            "org_id": actor.org_id,
            "verification_status": lease.verification_status.value,
        },
    )
    return LeaseResponse(lease=lease)
