"""
Analytics API Routes

Escalation projection, scenario comparison, clause parsing and portfolio
roll-ups over lease schemas supplied in the request body.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import Response

from leasecore.analytics.batch import ProjectionBatchResult, project_escalations
from leasecore.analytics.escalation import EscalationEngine, parse_escalation_clause
from leasecore.analytics.exports import projection_to_csv, rent_roll_to_csv
from leasecore.analytics.rent_roll import PortfolioAggregator
from leasecore.api.schemas import (
    CompareRequest,
    ExportFormat,
    ExposureRequest,
    ParseClauseRequest,
    PortfolioRequest,
    ProjectionRequest,
)
from leasecore.models.analytics import (
    EscalationProjection,
    PortfolioExposure,
    PortfolioRentRoll,
    ScenarioComparison,
)
from leasecore.models.escalation import EscalationRule

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/analytics",
    tags=["analytics", "rent"],
)

CSV_MEDIA_TYPE = "text/csv"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/escalation-projection",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Project rent under an escalation rule",
    description="""
    Project annual rent year by year under one escalation rule.

    Year 0 is the starting year and carries no escalation. Compounding runs
    on unrounded values; money is rounded half-up to cents. The summary
    reports total, average, NPV (year 0 undiscounted) and the effective
    annual rate. ``format=csv`` returns the yearly rows as CSV.
    """,
)
def escalation_projection(
    request: Request,
    body: ProjectionRequest,
    format: ExportFormat = Query(ExportFormat.JSON, description="Response format: json or csv"),
) -> Union[EscalationProjection, Response]:
    request_id = getattr(request.state, "request_id", "unknown")

    projection = EscalationEngine().project_with_summary(
        body.rule,
        body.starting_rent,
        body.start_year,
        years=body.years,
        cpi_rate=body.cpi_rate,
        discount_rate=body.discount_rate,
    )

    logger.info(
        "Escalation projection calculated",
        extra={
            "request_id": request_id,
            "rule_type": body.rule.type,
            "years": projection.summary.total_years,
            "total_rent": projection.summary.total_rent,
        },
    )

    if format == ExportFormat.CSV:
        return _csv_response(projection_to_csv(projection.projections), "escalation_projection.csv")
    return projection


@router.post(
    "/escalation-projection/compare",
    response_model=ScenarioComparison,
    status_code=status.HTTP_200_OK,
    summary="Compare escalation scenarios",
    description="""
    Project several named escalation rules over one shared horizon.

    Results are aligned by year index. The best scenario is the one with
    the highest total rent, the worst the lowest. Scenarios that pin a
    different horizon are rejected with SCENARIO_HORIZON_MISMATCH.
    """,
)
def compare_scenarios(request: Request, body: CompareRequest) -> ScenarioComparison:
    request_id = getattr(request.state, "request_id", "unknown")

    comparison = EscalationEngine().compare_scenarios(
        body.base_rent,
        body.start_year,
        body.scenarios,
        years=body.years,
        cpi_rate=body.cpi_rate,
    )

    logger.info(
        "Scenarios compared",
        extra={
            "request_id": request_id,
            "scenario_count": len(body.scenarios),
            "best_scenario": comparison.best_scenario,
            "difference": comparison.difference,
        },
    )
    return comparison


@router.post(
    "/escalation-clause/parse",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Parse an escalation clause",
    description="""
    Turn escalation clause text into a typed rule.

    Text that cannot be classified returns a ``none`` rule flagged for
    review rather than an error.
    """,
)
def parse_clause(body: ParseClauseRequest) -> EscalationRule:
    return parse_escalation_clause(body.text)


@router.post(
    "/escalation-projection/portfolio",
    response_model=ProjectionBatchResult,
    status_code=status.HTTP_200_OK,
    summary="Project escalations for many leases",
    description="""
    Project each lease's first escalation rule from its annualized base
    rent. Leases are processed concurrently; a lease that fails is listed
    in ``failures`` without affecting the others.
    """,
)
async def portfolio_projection(
    body: PortfolioRequest,
    start_year: int = Query(..., ge=1900, le=2200),
    years: Optional[int] = Query(None, ge=1, le=100),
    cpi_rate: Optional[float] = Query(None, description="Single CPI rate in percent"),
) -> ProjectionBatchResult:
    return await project_escalations(body.leases, start_year, years=years, cpi_rate=cpi_rate)


@router.post(
    "/rent-roll",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Portfolio rent roll",
    description="""
    Rent roll for one calendar year over verified leases.

    Schedule periods are allocated into the year by months of overlap.
    Leases without a schedule fall back to ``base_rent * 12`` and carry
    basis ``base_rent_estimate`` with a warning. Unverified leases are
    listed in ``skipped_lease_ids``. ``format=csv`` returns the entries as CSV.
    """,
)
def rent_roll(
    request: Request,
    body: PortfolioRequest,
    year: Optional[int] = Query(None, ge=1900, le=2200, description="Calendar year (default: current)"),
    format: ExportFormat = Query(ExportFormat.JSON, description="Response format: json or csv"),
) -> Union[PortfolioRentRoll, Response]:
    request_id = getattr(request.state, "request_id", "unknown")

    roll = PortfolioAggregator().rent_roll(body.leases, year=year)

    logger.info(
        "Rent roll request complete",
        extra={
            "request_id": request_id,
            "year": roll.year,
            "lease_count": roll.lease_count,
            "total_annual_rent": roll.total_annual_rent,
        },
    )

    if format == ExportFormat.CSV:
        return _csv_response(rent_roll_to_csv(roll), f"rent_roll_{roll.year}.csv")
    return roll


@router.post(
    "/exposure",
    response_model=PortfolioExposure,
    status_code=status.HTTP_200_OK,
    summary="Portfolio rent exposure",
    description="""
    Remaining contractual rent from the as-of date across verified leases,
    bucketed by calendar year and by property. Leases without both term
    dates are counted but listed in ``unbounded_lease_ids``.
    """,
)
def exposure(request: Request, body: ExposureRequest) -> PortfolioExposure:
    request_id = getattr(request.state, "request_id", "unknown")

    result = PortfolioAggregator().exposure(
        body.leases,
        as_of=body.as_of,
        horizon_years=body.horizon_years,
    )

    logger.info(
        "Exposure request complete",
        extra={
            "request_id": request_id,
            "lease_count": result.lease_count,
            "total_contractual_rent": result.total_contractual_rent,
        },
    )
    return result
