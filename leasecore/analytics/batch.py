"""
Batch Analytics

Runs per-lease calendar and projection generation across a portfolio.
Leases are independent, so they run concurrently in worker threads; one
lease failing is reported in ``failures`` and never aborts the batch.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field

from leasecore.analytics.compliance_calendar import ComplianceCalendarGenerator
from leasecore.analytics.escalation import CpiInput, EscalationEngine
from leasecore.exceptions import LeaseCoreError, ValidationError
from leasecore.models.analytics import CalendarEvent, EscalationProjection, LeaseFailure
from leasecore.models.escalation import NoEscalation
from leasecore.models.lease_schema import LeaseSchema

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CalendarBatchResult(BaseModel):
    events: Dict[str, List[CalendarEvent]] = Field(default_factory=dict, description="Events per lease")
    failures: List[LeaseFailure] = Field(default_factory=list)


class ProjectionBatchResult(BaseModel):
    projections: Dict[str, EscalationProjection] = Field(default_factory=dict, description="Projection per lease")
    failures: List[LeaseFailure] = Field(default_factory=list)


def _to_failure(lease_id: str, error: BaseException) -> LeaseFailure:
    if isinstance(error, LeaseCoreError):
        return LeaseFailure(lease_id=lease_id, code=error.code, message=error.message)
    return LeaseFailure(lease_id=lease_id, code=type(error).__name__, message=str(error))


async def run_per_lease(
    schemas: Sequence[LeaseSchema],
    operation: Callable[[LeaseSchema], T],
    operation_name: str,
) -> Tuple[Dict[str, T], List[LeaseFailure]]:
    """
    Apply ``operation`` to every lease concurrently.

    Returns:
        Results keyed by lease id, and one failure entry per lease that raised
    """
    tasks = [asyncio.to_thread(operation, schema) for schema in schemas]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: Dict[str, T] = {}
    failures: List[LeaseFailure] = []
    for schema, outcome in zip(schemas, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(
                "Lease failed in batch",
                extra={
                    "lease_id": schema.lease_id,
                    "operation": operation_name,
                    "error": str(outcome),
                },
                exc_info=outcome,
            )
            failures.append(_to_failure(schema.lease_id, outcome))
        else:
            results[schema.lease_id] = outcome

    logger.info(
        "Batch complete",
        extra={
            "operation": operation_name,
            "lease_count": len(schemas),
            "success_count": len(results),
            "failure_count": len(failures),
        }
    )
    return results, failures


async def generate_calendars(
    schemas: Sequence[LeaseSchema],
    today: Optional[date] = None,
    generator: Optional[ComplianceCalendarGenerator] = None,
) -> CalendarBatchResult:
    generator = generator or ComplianceCalendarGenerator()
    results, failures = await run_per_lease(
        schemas,
        lambda schema: generator.generate(schema, today=today),
        "compliance_calendar",
    )
    return CalendarBatchResult(events=results, failures=failures)


async def project_escalations(
    schemas: Sequence[LeaseSchema],
    start_year: int,
    years: Optional[int] = None,
    cpi_rate: CpiInput = None,
    discount_rate: Optional[float] = None,
    engine: Optional[EscalationEngine] = None,
) -> ProjectionBatchResult:
    """
    Project each lease's first escalation rule from its annualized base rent.

    Leases without an escalation project flat rent under a ``none`` rule.
    """
    engine = engine or EscalationEngine()

    def project(schema: LeaseSchema) -> EscalationProjection:
        if schema.economics.base_rent is None:
            raise ValidationError(f"Lease '{schema.lease_id}' has no base rent")
        rule = schema.economics.escalations[0] if schema.economics.escalations else NoEscalation()
        return engine.project_with_summary(
            rule,
            schema.economics.base_rent * 12,
            start_year,
            years=years,
            cpi_rate=cpi_rate,
            discount_rate=discount_rate,
        )

    results, failures = await run_per_lease(schemas, project, "escalation_projection")
    return ProjectionBatchResult(projections=results, failures=failures)
