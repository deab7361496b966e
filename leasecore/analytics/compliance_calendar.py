"""
Compliance Calendar

Derives dated obligations from a lease schema. Four rules are applied and
unioned: renewal-option notice deadlines, escalation dates, stored notice
events, and the lease expiration itself. Events are regenerated on demand;
only ``status`` depends on the reference date.
"""

import logging
from datetime import date, timedelta
from typing import AbstractSet, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.models.analytics import CalendarEvent, CalendarEventStatus, CalendarEventType, DueWindow
from leasecore.models.escalation import EscalationFrequency, EscalationRule, NoEscalation, describe_rule
from leasecore.models.lease_schema import (
    ExpansionNotice,
    LeaseSchema,
    NoticeEvent,
    OtherNotice,
    RenewalNotice,
    RentEscalationNotice,
    TerminationNotice,
)

logger = logging.getLogger(__name__)

CompletedKey = Tuple[CalendarEventType, date]

_PERIOD_MONTHS = {
    EscalationFrequency.MONTHLY: 1,
    EscalationFrequency.QUARTERLY: 3,
    EscalationFrequency.ANNUAL: 12,
}


def notice_event_type(notice: NoticeEvent) -> CalendarEventType:
    """Calendar type for a stored notice; every notice kind is mapped."""
    if isinstance(notice, RenewalNotice):
        return CalendarEventType.RENEWAL_NOTICE
    if isinstance(notice, TerminationNotice):
        return CalendarEventType.TERMINATION_NOTICE
    if isinstance(notice, RentEscalationNotice):
        return CalendarEventType.ESCALATION
    if isinstance(notice, (ExpansionNotice, OtherNotice)):
        return CalendarEventType.COMPLIANCE_CHECK
    raise TypeError(f"Unhandled notice event: {type(notice).__name__}")


def next_escalation_date(
    commencement: date,
    frequency: EscalationFrequency,
    today: date,
) -> Optional[date]:
    """
    First recurrence of ``frequency`` after ``today``, counted from commencement.

    Returns None when the lease has not started or the frequency does not recur.
    """
    months = _PERIOD_MONTHS.get(frequency)
    if months is None or commencement > today:
        return None

    periods = 1
    candidate = commencement + relativedelta(months=months)
    while candidate <= today:
        periods += 1
        # Offsets are taken from the anchor so month-end dates do not drift
        candidate = commencement + relativedelta(months=months * periods)
    return candidate


class ComplianceCalendarGenerator:
    """Generates the ordered obligation calendar for one lease."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_pipeline_config()

    def generate(
        self,
        schema: LeaseSchema,
        today: Optional[date] = None,
        completed: Optional[AbstractSet[CompletedKey]] = None,
    ) -> List[CalendarEvent]:
        """
        Build the calendar for a lease.

        Args:
            schema: Structured lease schema
            today: Reference date for status and next-occurrence computation
            completed: ``(event_type, date)`` keys already handled by the caller

        Returns:
            Events ordered by date, then by generation rule and sequence
        """
        today = today or date.today()
        completed = completed or frozenset()

        events: List[CalendarEvent] = []
        events.extend(self._renewal_events(schema, today, completed))
        events.extend(self._escalation_events(schema, today, completed))
        events.extend(self._notice_events(schema, today, completed))
        events.extend(self._expiration_events(schema, today, completed))

        # sort is stable, so rule order and sequence break date ties
        events.sort(key=lambda event: event.date)

        logger.debug(
            "Compliance calendar generated",
            extra={"lease_id": schema.lease_id, "event_count": len(events)}
        )
        return events

    def _renewal_events(self, schema, today, completed) -> List[CalendarEvent]:
        expiration = schema.term.expiration_date
        if expiration is None:
            return []
        events = []
        for option in schema.term.renewal_options:
            if option.notice_required_days is None:
                continue
            deadline = expiration - timedelta(days=option.notice_required_days)
            events.append(self._event(
                schema.lease_id,
                deadline,
                CalendarEventType.RENEWAL_NOTICE,
                f"Renewal Option {option.option_number} Notice Deadline",
                today,
                completed,
                window_days=self.config.notice_due_window_days,
            ))
        return events

    def _escalation_events(self, schema, today, completed) -> List[CalendarEvent]:
        commencement = schema.term.commencement_date
        events = []
        for rule in schema.economics.escalations:
            event_date = self._escalation_date(rule, commencement, today)
            if event_date is None:
                continue
            events.append(self._event(
                schema.lease_id,
                event_date,
                CalendarEventType.ESCALATION,
                f"Rent Escalation: {describe_rule(rule)}",
                today,
                completed,
                window_days=0,
            ))
        return events

    @staticmethod
    def _escalation_date(
        rule: EscalationRule,
        commencement: Optional[date],
        today: date,
    ) -> Optional[date]:
        if isinstance(rule, NoEscalation):
            return None
        # An explicit effective date always wins over the recurrence
        if rule.effective_date is not None:
            return rule.effective_date
        if commencement is None:
            return None
        return next_escalation_date(commencement, rule.frequency, today)

    def _notice_events(self, schema, today, completed) -> List[CalendarEvent]:
        return [
            self._event(
                schema.lease_id,
                notice.notice_date,
                notice_event_type(notice),
                notice.description or f"Notice Required: {notice.event_type}",
                today,
                completed,
                window_days=self.config.notice_due_window_days,
            )
            for notice in schema.obligations.notice_events
        ]

    def _expiration_events(self, schema, today, completed) -> List[CalendarEvent]:
        expiration = schema.term.expiration_date
        if expiration is None:
            return []
        return [self._event(
            schema.lease_id,
            expiration,
            CalendarEventType.COMPLIANCE_CHECK,
            "Lease Expiration Date",
            today,
            completed,
            window_days=self.config.expiration_due_window_days,
        )]

    @staticmethod
    def _event(
        lease_id: str,
        event_date: date,
        event_type: CalendarEventType,
        description: str,
        today: date,
        completed: AbstractSet[CompletedKey],
        window_days: int,
    ) -> CalendarEvent:
        if (event_type, event_date) in completed:
            status = CalendarEventStatus.COMPLETED
        elif event_date < today:
            status = CalendarEventStatus.OVERDUE
        else:
            status = CalendarEventStatus.PENDING

        return CalendarEvent(
            lease_id=lease_id,
            date=event_date,
            event_type=event_type,
            description=description,
            status=status,
            due_window=DueWindow(start=event_date - timedelta(days=window_days), end=event_date),
        )
