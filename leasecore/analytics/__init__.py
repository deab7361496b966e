"""Lease analytics: escalation projection, compliance calendar and portfolio roll-ups."""
from leasecore.analytics.batch import (
    CalendarBatchResult,
    ProjectionBatchResult,
    generate_calendars,
    project_escalations,
)
from leasecore.analytics.compliance_calendar import ComplianceCalendarGenerator, next_escalation_date
from leasecore.analytics.escalation import (
    EscalationEngine,
    Scenario,
    calculate_npv,
    effective_rate,
    parse_escalation_clause,
)
from leasecore.analytics.exports import (
    calendar_to_csv,
    calendar_to_ics,
    projection_to_csv,
    rent_roll_to_csv,
)
from leasecore.analytics.rent_roll import PortfolioAggregator, overlap_months

__all__ = [
    "CalendarBatchResult",
    "ComplianceCalendarGenerator",
    "EscalationEngine",
    "PortfolioAggregator",
    "ProjectionBatchResult",
    "Scenario",
    "calculate_npv",
    "calendar_to_csv",
    "calendar_to_ics",
    "effective_rate",
    "generate_calendars",
    "next_escalation_date",
    "overlap_months",
    "parse_escalation_clause",
    "project_escalations",
    "projection_to_csv",
    "rent_roll_to_csv",
]
