"""CSV and iCalendar renderings of analytics results."""
import csv
import io
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from leasecore.models.analytics import CalendarEvent, PortfolioRentRoll, ProjectionYear

ICS_PRODID = "-//leasecore//Compliance Calendar//EN"

PROJECTION_HEADERS = [
    "Year Index",
    "Year",
    "Annual Rent",
    "Escalation Rate (%)",
    "Escalation Amount",
    "Cumulative Rent",
    "Notes",
]

RENT_ROLL_HEADERS = [
    "Lease ID",
    "Tenant",
    "Property",
    "Year",
    "Annual Rent",
    "Monthly Rent",
    "CAM",
    "Taxes",
    "Insurance",
    "Total Annual",
    "Total Monthly",
    "Basis",
    "Warnings",
]

CALENDAR_HEADERS = [
    "Date",
    "Lease ID",
    "Event Type",
    "Description",
    "Status",
    "Due Window Start",
    "Due Window End",
]


def _render_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Comma-joined rows with every field double-quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def projection_to_csv(projections: Sequence[ProjectionYear]) -> str:
    return _render_csv(PROJECTION_HEADERS, (
        [
            row.year_index,
            row.year,
            f"{row.annual_rent:.2f}",
            f"{row.escalation_rate_applied * 100:.2f}",
            f"{row.escalation_amount:.2f}",
            f"{row.cumulative_rent:.2f}",
            row.notes,
        ]
        for row in projections
    ))


def rent_roll_to_csv(roll: PortfolioRentRoll) -> str:
    return _render_csv(RENT_ROLL_HEADERS, (
        [
            entry.lease_id,
            entry.tenant_name or "",
            entry.property_address or "",
            entry.year,
            f"{entry.annual_rent:.2f}",
            f"{entry.monthly_rent:.2f}",
            f"{entry.cam:.2f}",
            f"{entry.taxes:.2f}",
            f"{entry.insurance:.2f}",
            f"{entry.total_annual:.2f}",
            f"{entry.total_monthly:.2f}",
            entry.basis.value,
            ";".join(entry.warnings),
        ]
        for entry in roll.entries
    ))


def calendar_to_csv(events: Sequence[CalendarEvent]) -> str:
    return _render_csv(CALENDAR_HEADERS, (
        [
            event.date.isoformat(),
            event.lease_id,
            event.event_type.value,
            event.description,
            event.status.value,
            event.due_window.start.isoformat() if event.due_window else "",
            event.due_window.end.isoformat() if event.due_window else "",
        ]
        for event in events
    ))


def _ics_text(value: str) -> str:
    """Escape TEXT values per RFC 5545."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def calendar_to_ics(events: Sequence[CalendarEvent], stamp: Optional[datetime] = None) -> str:
    """
    Minimal VCALENDAR with one all-day VEVENT per event.

    ``stamp`` becomes every DTSTAMP (defaults to now, UTC).
    """
    stamp = (stamp or datetime.now(timezone.utc)).astimezone(timezone.utc)
    dtstamp = stamp.strftime("%Y%m%dT%H%M%SZ")
    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODID}",
        "CALSCALE:GREGORIAN",
    ]
    for event in events:
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:{event.lease_id}-{event.date.isoformat()}",
            f"DTSTAMP:{dtstamp}",
            f"DTSTART;VALUE=DATE:{event.date.strftime('%Y%m%d')}",
            f"SUMMARY:{_ics_text(event.description)}",
            f"DESCRIPTION:{_ics_text(f'Lease {event.lease_id} - {event.description}')}",
            f"STATUS:{event.status.value.upper()}",
            "END:VEVENT",
        ])
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"
