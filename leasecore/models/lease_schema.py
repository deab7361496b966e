"""Structured lease schema consumed by the analytics generators.

Obligation notices and escalations are tagged variants so each kind is
handled explicitly downstream.
"""
import datetime as dt
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from leasecore.models.escalation import EscalationRule
from leasecore.models.lease import VerificationStatus


class RentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class RentScheduleEntry(BaseModel):
    """Rent due per period between two inclusive dates."""
    start_date: dt.date
    end_date: dt.date
    amount: float = Field(..., ge=0.0, description="Rent per period")
    frequency: RentFrequency = RentFrequency.MONTHLY

    @model_validator(mode="after")
    def _ordered(self) -> "RentScheduleEntry":
        if self.end_date < self.start_date:
            raise ValueError("Rent schedule end_date precedes start_date")
        return self


class RenewalOption(BaseModel):
    option_number: int = Field(1, ge=1)
    term_years: Optional[int] = Field(None, ge=1)
    notice_required_days: Optional[int] = Field(None, ge=0, description="Notice period in days")


class LeaseTerm(BaseModel):
    commencement_date: Optional[dt.date] = None
    expiration_date: Optional[dt.date] = None
    renewal_options: list[RenewalOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ordered(self) -> "LeaseTerm":
        if (
            self.commencement_date is not None
            and self.expiration_date is not None
            and self.expiration_date < self.commencement_date
        ):
            raise ValueError("Lease expiration_date precedes commencement_date")
        return self


class AdditionalRent(BaseModel):
    """Flat monthly add-on charges."""
    cam_monthly: float = Field(0.0, ge=0.0)
    taxes_monthly: float = Field(0.0, ge=0.0)
    insurance_monthly: float = Field(0.0, ge=0.0)

    @property
    def is_zero(self) -> bool:
        return not (self.cam_monthly or self.taxes_monthly or self.insurance_monthly)


class LeaseEconomics(BaseModel):
    base_rent: Optional[float] = Field(None, ge=0.0, description="Monthly base rent")
    base_rent_schedule: list[RentScheduleEntry] = Field(default_factory=list)
    escalations: list[EscalationRule] = Field(default_factory=list)
    additional_rent: AdditionalRent = Field(default_factory=AdditionalRent)


class _NoticeBase(BaseModel):
    notice_date: dt.date
    description: Optional[str] = None
    days_before_event: Optional[int] = Field(None, ge=0)


class RenewalNotice(_NoticeBase):
    event_type: Literal["renewal_notice"] = "renewal_notice"


class TerminationNotice(_NoticeBase):
    event_type: Literal["termination_notice"] = "termination_notice"


class ExpansionNotice(_NoticeBase):
    event_type: Literal["expansion_notice"] = "expansion_notice"


class RentEscalationNotice(_NoticeBase):
    event_type: Literal["rent_escalation"] = "rent_escalation"


class OtherNotice(_NoticeBase):
    event_type: Literal["other"] = "other"


NoticeEvent = Annotated[
    Union[RenewalNotice, TerminationNotice, ExpansionNotice, RentEscalationNotice, OtherNotice],
    Field(discriminator="event_type"),
]


class LeaseObligations(BaseModel):
    notice_events: list[NoticeEvent] = Field(default_factory=list)


class LeaseSchema(BaseModel):
    """Everything the calendar, projection and rent-roll generators read about a lease."""
    lease_id: str = Field(..., min_length=1)
    org_id: Optional[str] = None
    tenant_name: Optional[str] = None
    property_address: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    term: LeaseTerm = Field(default_factory=LeaseTerm)
    economics: LeaseEconomics = Field(default_factory=LeaseEconomics)
    obligations: LeaseObligations = Field(default_factory=LeaseObligations)
