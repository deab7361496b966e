"""Tests for CSV and iCalendar exports."""
import csv
import io
from datetime import date, datetime, timezone

from leasecore.analytics.escalation import EscalationEngine
from leasecore.analytics.exports import (
    calendar_to_csv,
    calendar_to_ics,
    projection_to_csv,
    rent_roll_to_csv,
)
from leasecore.analytics.rent_roll import PortfolioAggregator
from leasecore.models.analytics import CalendarEvent, CalendarEventStatus, CalendarEventType, DueWindow
from leasecore.models.escalation import PercentEscalation
from leasecore.models.lease_schema import AdditionalRent


def _event(description="Lease Expiration Date", status=CalendarEventStatus.PENDING):
    return CalendarEvent(
        lease_id="lease-1",
        date=date(2028, 12, 31),
        event_type=CalendarEventType.COMPLIANCE_CHECK,
        description=description,
        status=status,
        due_window=DueWindow(start=date(2028, 10, 2), end=date(2028, 12, 31)),
    )


class TestProjectionCsv:
    def test_rows(self):
        projections = EscalationEngine().project(PercentEscalation(rate=3.0), 100_000, 2024, years=2)

        lines = projection_to_csv(projections).splitlines()

        assert lines[0] == (
            '"Year Index","Year","Annual Rent","Escalation Rate (%)","Escalation Amount",'
            '"Cumulative Rent","Notes"'
        )
        assert lines[1] == '"0","2024","100000.00","0.00","0.00","100000.00","Starting rent"'
        assert lines[2] == (
            '"1","2025","103000.00","3.00","3000.00","203000.00","3% annual increase (compounding)"'
        )

    def test_empty_projection_has_header_only(self):
        assert projection_to_csv([]).count("\n") == 1


class TestRentRollCsv:
    def test_rows_parse_back(self, make_schema):
        schema = make_schema(additional=AdditionalRent(cam_monthly=500.0), base_rent=8_000.0)
        roll = PortfolioAggregator().rent_roll([schema], year=2025)

        rows = list(csv.reader(io.StringIO(rent_roll_to_csv(roll))))

        assert rows[0][0] == "Lease ID"
        assert rows[1][:5] == ["lease-1", "Acme Corp", "100 Main Street", "2025", "96000.00"]
        assert rows[1][6] == "6000.00"
        assert rows[1][-2] == "base_rent_estimate"
        assert rows[1][-1] == "RENT_ESTIMATED_FROM_BASE_RENT"


class TestCalendarCsv:
    def test_quotes_embedded_commas_and_quotes(self):
        text = calendar_to_csv([_event(description='Notice, "certified" mail')])

        line = text.splitlines()[1]
        assert line == (
            '"2028-12-31","lease-1","compliance_check","Notice, ""certified"" mail",'
            '"pending","2028-10-02","2028-12-31"'
        )


class TestCalendarIcs:
    def test_structure(self):
        text = calendar_to_ics([_event()], stamp=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))

        lines = text.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert "VERSION:2.0" in lines
        assert "BEGIN:VEVENT" in lines
        assert "UID:lease-1-2028-12-31" in lines
        assert "DTSTAMP:20250301T120000Z" in lines
        assert "DTSTART;VALUE=DATE:20281231" in lines
        assert "SUMMARY:Lease Expiration Date" in lines
        assert "STATUS:PENDING" in lines
        assert lines[-2] == "END:VCALENDAR"
        assert text.endswith("\r\n")

    def test_text_escaping(self):
        text = calendar_to_ics([_event(description="Notice; renewal, option\nsee clause 4")])
        assert r"SUMMARY:Notice\; renewal\, option\nsee clause 4" in text.split("\r\n")

    def test_empty_calendar(self):
        lines = calendar_to_ics([]).split("\r\n")
        assert "BEGIN:VEVENT" not in lines
        assert lines[-2] == "END:VCALENDAR"
