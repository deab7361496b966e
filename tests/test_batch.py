"""Tests for concurrent per-lease analytics."""
from datetime import date

import pytest

from leasecore.analytics.batch import generate_calendars, project_escalations, run_per_lease
from leasecore.exceptions import ValidationError
from leasecore.models.escalation import CpiLinkedEscalation, PercentEscalation


class TestGenerateCalendars:
    @pytest.mark.asyncio
    async def test_calendar_per_lease(self, make_schema):
        schemas = [make_schema(lease_id="lease-1"), make_schema(lease_id="lease-2", expiration=None)]

        result = await generate_calendars(schemas, today=date(2025, 3, 1))

        assert set(result.events) == {"lease-1", "lease-2"}
        assert [event.date for event in result.events["lease-1"]] == [date(2028, 12, 31)]
        assert result.events["lease-2"] == []
        assert result.failures == []


class TestProjectEscalations:
    @pytest.mark.asyncio
    async def test_projection_per_lease(self, make_schema):
        schemas = [
            make_schema(lease_id="lease-1", escalations=[PercentEscalation(rate=3.0)]),
            make_schema(lease_id="flat"),
        ]

        result = await project_escalations(schemas, start_year=2025, years=2)

        assert [row.annual_rent for row in result.projections["lease-1"].projections] == [120000.0, 123600.0]
        assert result.projections["flat"].rule.type == "none"
        assert result.failures == []

    @pytest.mark.asyncio
    async def test_failures_do_not_abort_batch(self, make_schema):
        schemas = [
            make_schema(lease_id="no-rent", base_rent=None),
            make_schema(lease_id="no-cpi", escalations=[CpiLinkedEscalation()]),
            make_schema(lease_id="ok", escalations=[PercentEscalation(rate=2.0)]),
        ]

        result = await project_escalations(schemas, start_year=2025, years=3)

        assert list(result.projections) == ["ok"]
        failures = {failure.lease_id: failure for failure in result.failures}
        assert set(failures) == {"no-rent", "no-cpi"}
        assert failures["no-rent"].code == "VALIDATION_ERROR"
        assert "CPI" in failures["no-cpi"].message


class TestRunPerLease:
    @pytest.mark.asyncio
    async def test_unexpected_errors_are_reported(self, make_schema):
        def explode(schema):
            if schema.lease_id == "bad":
                raise KeyError("missing")
            return schema.lease_id.upper()

        results, failures = await run_per_lease(
            [make_schema(lease_id="bad"), make_schema(lease_id="good")], explode, "test"
        )

        assert results == {"good": "GOOD"}
        [failure] = failures
        assert failure.code == "KeyError"

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        results, failures = await run_per_lease([], lambda schema: schema, "test")
        assert results == {}
        assert failures == []

    @pytest.mark.asyncio
    async def test_validation_error_code_kept(self, make_schema):
        def reject(schema):
            raise ValidationError("nope")

        _, [failure] = await run_per_lease([make_schema()], reject, "test")
        assert failure.code == "VALIDATION_ERROR"
        assert failure.message == "nope"
