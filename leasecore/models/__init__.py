"""Pydantic data model."""
from .analytics import (
    AlignedYear,
    CalendarEvent,
    CalendarEventStatus,
    CalendarEventType,
    DueWindow,
    EscalationProjection,
    LeaseFailure,
    PortfolioExposure,
    PortfolioRentRoll,
    ProjectionSummary,
    ProjectionYear,
    RentBasis,
    RentRollEntry,
    ScenarioComparison,
    ScenarioResult,
)
from .escalation import (
    CpiLinkedEscalation,
    EscalationFrequency,
    EscalationRule,
    EscalationType,
    FixedAmountEscalation,
    NoEscalation,
    PercentEscalation,
    RentStep,
    StepScheduleEscalation,
    describe_rule,
)
from .lease import (
    PENDING_STATES,
    TERMINAL_STATES,
    VERIFIED_STATES,
    ExtractedField,
    Lease,
    SourceLocation,
    ValidationState,
    VerificationStatus,
)
from .lease_schema import (
    AdditionalRent,
    ExpansionNotice,
    LeaseEconomics,
    LeaseObligations,
    LeaseSchema,
    LeaseTerm,
    NoticeEvent,
    OtherNotice,
    RenewalNotice,
    RenewalOption,
    RentEscalationNotice,
    RentFrequency,
    RentScheduleEntry,
    TerminationNotice,
)

__all__ = [
    "AlignedYear",
    "CalendarEvent",
    "CalendarEventStatus",
    "CalendarEventType",
    "DueWindow",
    "EscalationProjection",
    "LeaseFailure",
    "PortfolioExposure",
    "PortfolioRentRoll",
    "ProjectionSummary",
    "ProjectionYear",
    "RentBasis",
    "RentRollEntry",
    "ScenarioComparison",
    "ScenarioResult",
    "CpiLinkedEscalation",
    "EscalationFrequency",
    "EscalationRule",
    "EscalationType",
    "FixedAmountEscalation",
    "NoEscalation",
    "PercentEscalation",
    "RentStep",
    "StepScheduleEscalation",
    "describe_rule",
    "PENDING_STATES",
    "TERMINAL_STATES",
    "VERIFIED_STATES",
    "ExtractedField",
    "Lease",
    "SourceLocation",
    "ValidationState",
    "VerificationStatus",
    "AdditionalRent",
    "ExpansionNotice",
    "LeaseEconomics",
    "LeaseObligations",
    "LeaseSchema",
    "LeaseTerm",
    "NoticeEvent",
    "OtherNotice",
    "RenewalNotice",
    "RenewalOption",
    "RentEscalationNotice",
    "RentFrequency",
    "RentScheduleEntry",
    "TerminationNotice",
]
