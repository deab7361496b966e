"""Result models for projections, calendars, rent rolls and exposure."""
import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from leasecore.models.escalation import EscalationRule


class ProjectionYear(BaseModel):
    """One projected year of rent."""
    year_index: int = Field(..., ge=0, description="0 is the starting year")
    year: int = Field(..., description="Calendar year")
    annual_rent: float
    escalation_rate_applied: float = Field(0.0, description="Fractional growth over the prior year")
    escalation_amount: float = Field(0.0, description="Dollar change over the prior year")
    cumulative_rent: float
    notes: str = ""


class ProjectionSummary(BaseModel):
    total_years: int
    starting_rent: float
    ending_rent: float
    total_rent: float
    average_annual_rent: float
    npv: float
    discount_rate: float
    effective_rate: Optional[float] = Field(
        None, description="Constant annual rate from first to last year; null for one-year horizons"
    )


class EscalationProjection(BaseModel):
    rule: EscalationRule
    projections: list[ProjectionYear]
    summary: ProjectionSummary


class ScenarioResult(BaseModel):
    name: str
    rule: EscalationRule
    projections: list[ProjectionYear]
    total_rent: float
    average_annual_rent: float


class AlignedYear(BaseModel):
    """Rent for every scenario at one year index."""
    year_index: int
    year: int
    rents: dict[str, float]


class ScenarioComparison(BaseModel):
    years: int
    scenarios: list[ScenarioResult]
    aligned: list[AlignedYear]
    best_scenario: str = Field(..., description="Highest total rent")
    worst_scenario: str = Field(..., description="Lowest total rent")
    difference: float = Field(..., description="Best total minus worst total")


class CalendarEventType(str, Enum):
    RENEWAL_NOTICE = "renewal_notice"
    ESCALATION = "escalation"
    COMPLIANCE_CHECK = "compliance_check"
    TERMINATION_NOTICE = "termination_notice"


class CalendarEventStatus(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class DueWindow(BaseModel):
    start: dt.date
    end: dt.date


class CalendarEvent(BaseModel):
    lease_id: str
    date: dt.date
    event_type: CalendarEventType
    description: str
    status: CalendarEventStatus
    due_window: Optional[DueWindow] = None


class RentBasis(str, Enum):
    SCHEDULE = "schedule"
    BASE_RENT_ESTIMATE = "base_rent_estimate"


class RentRollEntry(BaseModel):
    """One lease in one calendar year."""
    lease_id: str
    tenant_name: Optional[str] = None
    property_address: Optional[str] = None
    year: int
    annual_rent: float
    monthly_rent: float
    cam: float
    taxes: float
    insurance: float
    total_annual: float
    total_monthly: float
    basis: RentBasis
    warnings: list[str] = Field(default_factory=list)


class LeaseFailure(BaseModel):
    """A lease that could not be processed in a batch operation."""
    lease_id: str
    code: str
    message: str


class PortfolioRentRoll(BaseModel):
    year: int
    entries: list[RentRollEntry] = Field(default_factory=list)
    total_annual_rent: float = 0.0
    total_monthly_rent: float = 0.0
    total_additional_rent: float = 0.0
    lease_count: int = 0
    skipped_lease_ids: list[str] = Field(default_factory=list, description="Not verified")
    failures: list[LeaseFailure] = Field(default_factory=list)


class PortfolioExposure(BaseModel):
    as_of: dt.date
    horizon_years: int
    total_contractual_rent: float = Field(0.0, description="Remaining rent across bounded leases")
    total_annual_rent: float = Field(0.0, description="Rent falling in the as-of year")
    lease_count: int = 0
    average_lease_value: float = 0.0
    exposure_by_year: dict[int, float] = Field(default_factory=dict)
    exposure_by_property: dict[str, float] = Field(default_factory=dict)
    unbounded_lease_ids: list[str] = Field(default_factory=list, description="Missing term dates")
    skipped_lease_ids: list[str] = Field(default_factory=list, description="Not verified")
    failures: list[LeaseFailure] = Field(default_factory=list)
