"""Escalation rule variants.

A rule is a tagged union on ``type``. Percentages are expressed in
percentage points (``3.0`` means 3%), amounts in dollars.
"""
import datetime as dt
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EscalationType(str, Enum):
    PERCENT = "percent"
    FIXED_AMOUNT = "fixed_amount"
    CPI_LINKED = "cpi_linked"
    STEP_SCHEDULE = "step_schedule"
    NONE = "none"


class EscalationFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    ONE_TIME = "one_time"


class _RuleBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: EscalationFrequency = Field(
        EscalationFrequency.ANNUAL, description="How often the escalation is applied"
    )
    effective_date: Optional[dt.date] = Field(None, description="Explicit effective date")
    source_text: Optional[str] = Field(None, description="Clause text the rule was parsed from")


class PercentEscalation(_RuleBase):
    """Compounding percentage increase per escalation event."""
    type: Literal["percent"] = "percent"
    rate: float = Field(..., ge=0.0, description="Percentage points per event")

    @property
    def value(self) -> float:
        return self.rate


class FixedAmountEscalation(_RuleBase):
    """Constant dollar increase of the annual rent per escalation event."""
    type: Literal["fixed_amount"] = "fixed_amount"
    amount: float = Field(..., ge=0.0, description="Dollars added per event")

    @property
    def value(self) -> float:
        return self.amount


class CpiLinkedEscalation(_RuleBase):
    """Index-linked increase; the CPI rate itself is supplied at projection time."""
    type: Literal["cpi_linked"] = "cpi_linked"
    adjustment: float = Field(0.0, description="Percentage points added to CPI")
    cap: Optional[float] = Field(None, description="Maximum annual rate in percentage points")
    floor: Optional[float] = Field(None, description="Minimum annual rate in percentage points")

    @property
    def value(self) -> float:
        return self.adjustment


class RentStep(BaseModel):
    """Annual rent in force from ``year_index`` onward."""
    model_config = ConfigDict(frozen=True)

    year_index: int = Field(..., ge=0)
    annual_rent: float = Field(..., ge=0.0)


class StepScheduleEscalation(_RuleBase):
    """Rent looked up from an explicit table; the last step is held constant."""
    type: Literal["step_schedule"] = "step_schedule"
    steps: list[RentStep] = Field(..., min_length=1)

    @field_validator("steps")
    @classmethod
    def _sorted_unique(cls, steps: list[RentStep]) -> list[RentStep]:
        indexes = [step.year_index for step in steps]
        if len(set(indexes)) != len(indexes):
            raise ValueError("Step schedule year_index values must be unique")
        return sorted(steps, key=lambda step: step.year_index)

    @property
    def value(self) -> list[RentStep]:
        return self.steps


class NoEscalation(_RuleBase):
    """Unparsed or absent clause. Projects no escalation and needs review."""
    type: Literal["none"] = "none"
    requires_review: bool = True

    @property
    def value(self) -> None:
        return None


EscalationRule = Annotated[
    Union[
        PercentEscalation,
        FixedAmountEscalation,
        CpiLinkedEscalation,
        StepScheduleEscalation,
        NoEscalation,
    ],
    Field(discriminator="type"),
]


def describe_rule(rule: EscalationRule) -> str:
    """Short human-readable label for a rule."""
    frequency = rule.frequency.value
    if isinstance(rule, PercentEscalation):
        return f"percent {rule.rate:g}% {frequency}"
    if isinstance(rule, FixedAmountEscalation):
        return f"fixed_amount ${rule.amount:,.2f} {frequency}"
    if isinstance(rule, CpiLinkedEscalation):
        label = "cpi_linked CPI"
        if rule.adjustment:
            label += f" + {rule.adjustment:g}%"
        return f"{label} {frequency}"
    if isinstance(rule, StepScheduleEscalation):
        return f"step_schedule ({len(rule.steps)} steps)"
    if isinstance(rule, NoEscalation):
        return "none"
    raise TypeError(f"Unhandled escalation rule: {type(rule).__name__}")
