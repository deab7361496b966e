"""
Compliance API Routes

Dated obligation calendars derived from lease schemas.
"""

import logging
from typing import List, Union

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import Response

from leasecore.analytics.batch import CalendarBatchResult, generate_calendars
from leasecore.analytics.compliance_calendar import ComplianceCalendarGenerator
from leasecore.analytics.exports import calendar_to_csv, calendar_to_ics
from leasecore.api.schemas import CalendarFormat, CalendarRequest, PortfolioCalendarRequest
from leasecore.models.analytics import CalendarEvent

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/compliance",
    tags=["compliance"],
)


@router.post(
    "/calendar",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Compliance calendar for one lease",
    description="""
    Generate the lease's obligation calendar ordered by date.

    Events come from renewal-option notice deadlines, escalation dates,
    stored notice events and the lease expiration. Status is ``overdue``
    before ``today``, ``completed`` for keys listed in ``completed`` and
    ``pending`` otherwise. ``format`` selects json, csv or ics.
    """,
)
def lease_calendar(
    request: Request,
    body: CalendarRequest,
    format: CalendarFormat = Query(CalendarFormat.JSON, description="Response format: json, csv or ics"),
) -> Union[List[CalendarEvent], Response]:
    request_id = getattr(request.state, "request_id", "unknown")

    completed = {(item.event_type, item.date) for item in body.completed}
    events = ComplianceCalendarGenerator().generate(body.lease, today=body.today, completed=completed)

    logger.info(
        "Compliance calendar request complete",
        extra={
            "request_id": request_id,
            "lease_id": body.lease.lease_id,
            "event_count": len(events),
            "format": format.value,
        },
    )

    filename = f"compliance_{body.lease.lease_id}"
    if format == CalendarFormat.CSV:
        return Response(
            content=calendar_to_csv(events),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
        )
    if format == CalendarFormat.ICS:
        return Response(
            content=calendar_to_ics(events),
            media_type="text/calendar",
            headers={"Content-Disposition": f'attachment; filename="{filename}.ics"'},
        )
    return events


@router.post(
    "/calendars",
    response_model=CalendarBatchResult,
    status_code=status.HTTP_200_OK,
    summary="Compliance calendars for many leases",
    description="""
    Generate calendars for every lease concurrently. A lease that fails is
    listed in ``failures`` without affecting the others.
    """,
)
async def portfolio_calendars(body: PortfolioCalendarRequest) -> CalendarBatchResult:
    return await generate_calendars(body.leases, today=body.today)
