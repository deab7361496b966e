"""Request and response models for the HTTP API."""
from datetime import date
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from leasecore.analytics.escalation import Scenario
from leasecore.extraction.pipeline import ExtractionReport
from leasecore.models.analytics import CalendarEventType
from leasecore.models.escalation import EscalationRule
from leasecore.models.lease import ExtractedField, Lease, ValidationState
from leasecore.models.lease_schema import LeaseSchema

CpiRate = Optional[Union[float, List[float]]]


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class CalendarFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    ICS = "ics"


class ExtractRequest(BaseModel):
    lease_id: str = Field(..., min_length=1, description="Lease the document belongs to")
    text: str = Field(..., description="Plain document text")
    org_id: Optional[str] = Field(None, description="Owning organization for the built schema")


class ExtractResponse(BaseModel):
    report: ExtractionReport
    lease_schema: LeaseSchema = Field(..., description="Structured lease schema")


class StoreExtractionRequest(BaseModel):
    text: str = Field(..., description="Plain document text")
    force: bool = Field(False, description="Overwrite reviewer-verified fields")


class ProjectionRequest(BaseModel):
    rule: EscalationRule
    starting_rent: float = Field(..., ge=0, description="Annual rent in the first year")
    start_year: int = Field(..., ge=1900, le=2200)
    years: Optional[int] = Field(None, ge=1, le=100, description="Rows to project")
    cpi_rate: CpiRate = Field(None, description="CPI percent, single or per escalation year")
    discount_rate: Optional[float] = Field(None, gt=-1, description="NPV discount rate (decimal)")


class CompareRequest(BaseModel):
    base_rent: float = Field(..., ge=0, description="Annual rent in the first year")
    start_year: int = Field(..., ge=1900, le=2200)
    scenarios: List[Scenario] = Field(..., min_length=1)
    years: Optional[int] = Field(None, ge=1, le=100)
    cpi_rate: CpiRate = None


class ParseClauseRequest(BaseModel):
    text: str = Field(..., description="Escalation clause text")


class PortfolioRequest(BaseModel):
    leases: List[LeaseSchema] = Field(default_factory=list)


class ExposureRequest(PortfolioRequest):
    as_of: Optional[date] = None
    horizon_years: Optional[int] = Field(None, ge=1, le=50)


class CompletedEvent(BaseModel):
    event_type: CalendarEventType
    date: date


class CalendarRequest(BaseModel):
    lease: LeaseSchema
    today: Optional[date] = None
    completed: List[CompletedEvent] = Field(default_factory=list)


class PortfolioCalendarRequest(PortfolioRequest):
    today: Optional[date] = None


class ApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class EditRequest(BaseModel):
    value_text: str = Field(..., description="Corrected value")
    notes: Optional[str] = Field(None, max_length=2000)


class LeaseResponse(BaseModel):
    lease: Lease


class QueueResponse(BaseModel):
    items: List[ExtractedField]
    total_count: int
    states: List[ValidationState]
