"""Tests for portfolio rent roll and exposure."""
from datetime import date

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from leasecore.analytics.rent_roll import (
    ADDITIONAL_RENT_NOT_PRORATED,
    NO_RENT_DATA,
    RENT_ESTIMATED_FROM_BASE_RENT,
    TERM_OUTSIDE_TARGET_YEAR,
    PortfolioAggregator,
    overlap_months,
)
from leasecore.models.analytics import RentBasis
from leasecore.models.lease import VerificationStatus
from leasecore.models.lease_schema import AdditionalRent, RentFrequency, RentScheduleEntry

from .conftest import monthly_entry


@pytest.fixture
def aggregator(config):
    return PortfolioAggregator(config=config)


def _scheduled(make_schema, lease_id="lease-1", start=date(2024, 1, 1), end=date(2028, 12, 31), amount=10_000.0, **kwargs):
    return make_schema(
        lease_id=lease_id,
        commencement=start,
        expiration=end,
        schedule=[monthly_entry(start, end, amount)],
        **kwargs,
    )


class TestOverlapMonths:
    @pytest.mark.parametrize("start, end, expected", [
        (date(2025, 1, 1), date(2025, 12, 31), 12.0),
        (date(2024, 7, 1), date(2026, 6, 30), 12.0),
        (date(2025, 3, 1), date(2025, 5, 31), 3.0),
        (date(2026, 1, 1), date(2026, 12, 31), 0.0),
    ])
    def test_whole_months(self, start, end, expected):
        assert overlap_months(start, end, date(2025, 1, 1), date(2025, 12, 31)) == pytest.approx(expected)

    def test_leftover_days(self):
        months = overlap_months(date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 1), date(2025, 12, 31))
        assert months == pytest.approx(15 / 30.44)


class TestLeaseRentForYear:
    """Tests for one lease's rent roll line."""

    def test_full_year_schedule(self, aggregator, make_schema):
        entry = aggregator.lease_rent_for_year(_scheduled(make_schema), 2025)

        assert entry.annual_rent == 120000.0
        assert entry.monthly_rent == 10000.0
        assert entry.basis == RentBasis.SCHEDULE
        assert entry.warnings == []
        assert entry.tenant_name == "Acme Corp"

    def test_partial_first_year(self, aggregator, make_schema):
        entry = aggregator.lease_rent_for_year(_scheduled(make_schema, start=date(2024, 7, 1)), 2024)
        assert entry.annual_rent == 60000.0

    def test_leftover_days_prorated(self, aggregator, make_schema):
        schema = _scheduled(make_schema, start=date(2025, 1, 1), end=date(2025, 1, 15), amount=3044.0)
        assert aggregator.lease_rent_for_year(schema, 2025).annual_rent == 1500.0

    @pytest.mark.parametrize("frequency, amount", [
        (RentFrequency.QUARTERLY, 30_000.0),
        (RentFrequency.ANNUAL, 120_000.0),
    ])
    def test_entry_frequencies(self, aggregator, make_schema, frequency, amount):
        schema = make_schema(schedule=[RentScheduleEntry(
            start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), amount=amount, frequency=frequency
        )])
        assert aggregator.lease_rent_for_year(schema, 2025).annual_rent == 120000.0

    def test_base_rent_fallback_is_flagged(self, aggregator, make_schema):
        entry = aggregator.lease_rent_for_year(make_schema(base_rent=8_000.0), 2025)

        assert entry.annual_rent == 96000.0
        assert entry.basis == RentBasis.BASE_RENT_ESTIMATE
        assert entry.warnings == [RENT_ESTIMATED_FROM_BASE_RENT]

    def test_fallback_outside_term(self, aggregator, make_schema):
        entry = aggregator.lease_rent_for_year(make_schema(base_rent=8_000.0), 2030)

        # No proration on the fallback path, only a warning
        assert entry.annual_rent == 96000.0
        assert TERM_OUTSIDE_TARGET_YEAR in entry.warnings

    def test_no_rent_data(self, aggregator, make_schema):
        entry = aggregator.lease_rent_for_year(make_schema(base_rent=None), 2025)

        assert entry.annual_rent == 0.0
        assert entry.warnings == [NO_RENT_DATA]

    def test_additional_rent(self, aggregator, make_schema):
        schema = _scheduled(
            make_schema,
            additional=AdditionalRent(cam_monthly=500.0, taxes_monthly=250.0, insurance_monthly=100.0),
        )

        entry = aggregator.lease_rent_for_year(schema, 2025)

        assert entry.cam == 6000.0
        assert entry.taxes == 3000.0
        assert entry.insurance == 1200.0
        assert entry.total_annual == 130200.0
        assert entry.total_monthly == 10850.0
        assert ADDITIONAL_RENT_NOT_PRORATED not in entry.warnings

    def test_additional_rent_not_prorated_in_partial_year(self, aggregator, make_schema):
        schema = _scheduled(make_schema, start=date(2024, 7, 1), additional=AdditionalRent(cam_monthly=500.0))

        entry = aggregator.lease_rent_for_year(schema, 2024)

        assert entry.cam == 6000.0
        assert entry.warnings == [ADDITIONAL_RENT_NOT_PRORATED]


class TestRentRoll:
    """Tests for the portfolio rent roll."""

    def test_totals_and_skips(self, aggregator, make_schema):
        schemas = [
            _scheduled(make_schema, "lease-1"),
            _scheduled(make_schema, "lease-2", amount=5_000.0, additional=AdditionalRent(cam_monthly=100.0)),
            _scheduled(make_schema, "lease-3", status=VerificationStatus.IN_REVIEW),
        ]

        roll = aggregator.rent_roll(schemas, year=2025)

        assert roll.year == 2025
        assert [entry.lease_id for entry in roll.entries] == ["lease-1", "lease-2"]
        assert roll.lease_count == 2
        assert roll.total_annual_rent == 180000.0
        assert roll.total_monthly_rent == 15000.0
        assert roll.total_additional_rent == 1200.0
        assert roll.skipped_lease_ids == ["lease-3"]
        assert roll.failures == []

    def test_failure_isolated(self, aggregator, make_schema, monkeypatch):
        original = aggregator.lease_rent_for_year

        def flaky(schema, year):
            if schema.lease_id == "bad":
                raise ValueError("corrupt schedule")
            return original(schema, year)

        monkeypatch.setattr(aggregator, "lease_rent_for_year", flaky)

        roll = aggregator.rent_roll([_scheduled(make_schema, "bad"), _scheduled(make_schema, "good")], year=2025)

        assert [entry.lease_id for entry in roll.entries] == ["good"]
        [failure] = roll.failures
        assert failure.lease_id == "bad"
        assert failure.code == "ValueError"
        assert failure.message == "corrupt schedule"

    def test_empty_portfolio(self, aggregator):
        roll = aggregator.rent_roll([], year=2025)
        assert roll.lease_count == 0
        assert roll.total_annual_rent == 0.0


class TestRentRollConservation:
    """A schedule inside one year keeps its literal total."""

    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        first_month=st.integers(min_value=1, max_value=12),
        span=st.integers(min_value=1, max_value=12),
        amount=st.integers(min_value=0, max_value=1_000_000).map(lambda cents: cents / 100),
        year=st.integers(min_value=2000, max_value=2100),
    )
    def test_contained_monthly_schedule(self, make_schema, first_month, span, amount, year):
        last_month = min(12, first_month + span - 1)
        start = date(year, first_month, 1)
        end = date(year + 1, 1, 1) if last_month == 12 else date(year, last_month + 1, 1)
        end = date.fromordinal(end.toordinal() - 1)
        schema = make_schema(commencement=start, expiration=end, schedule=[monthly_entry(start, end, amount)])

        entry = PortfolioAggregator().lease_rent_for_year(schema, year)

        months = last_month - first_month + 1
        assert entry.annual_rent == pytest.approx(round(amount * months, 2), abs=0.011)


class TestExposure:
    """Tests for portfolio exposure."""

    def test_buckets(self, aggregator, make_schema):
        exposure = aggregator.exposure([_scheduled(make_schema)], as_of=date(2025, 1, 1), horizon_years=3)

        assert exposure.total_contractual_rent == 480000.0
        assert exposure.exposure_by_year == {2025: 120000.0, 2026: 120000.0, 2027: 120000.0}
        assert exposure.total_annual_rent == 120000.0
        assert exposure.exposure_by_property == {"100 Main Street": 480000.0}
        assert exposure.lease_count == 1
        assert exposure.average_lease_value == 480000.0

    def test_mid_year_as_of(self, aggregator, make_schema):
        exposure = aggregator.exposure([_scheduled(make_schema)], as_of=date(2025, 7, 1), horizon_years=2)

        assert exposure.total_contractual_rent == 420000.0
        assert exposure.exposure_by_year == {2025: 60000.0, 2026: 120000.0}

    def test_base_rent_fallback_is_prorated(self, aggregator, make_schema):
        exposure = aggregator.exposure([make_schema()], as_of=date(2025, 1, 1), horizon_years=1)

        assert exposure.total_contractual_rent == 480000.0
        assert exposure.exposure_by_year == {2025: 120000.0}

    def test_default_horizon(self, aggregator, make_schema, config):
        exposure = aggregator.exposure([_scheduled(make_schema)], as_of=date(2025, 1, 1))
        assert len(exposure.exposure_by_year) == config.exposure_horizon_years
        assert exposure.exposure_by_year[2029] == 0.0

    def test_unbounded_and_skipped(self, aggregator, make_schema):
        schemas = [
            _scheduled(make_schema, "lease-1"),
            make_schema(lease_id="open-ended", expiration=None),
            _scheduled(make_schema, "draft", status=VerificationStatus.UNVERIFIED),
        ]

        exposure = aggregator.exposure(schemas, as_of=date(2025, 1, 1), horizon_years=1)

        assert exposure.lease_count == 2
        assert exposure.unbounded_lease_ids == ["open-ended"]
        assert exposure.skipped_lease_ids == ["draft"]
        assert exposure.total_contractual_rent == 480000.0
        assert exposure.average_lease_value == 240000.0

    def test_unknown_property(self, aggregator, make_schema):
        exposure = aggregator.exposure(
            [_scheduled(make_schema, property_address=None)], as_of=date(2025, 1, 1), horizon_years=1
        )
        assert list(exposure.exposure_by_property) == ["Unknown"]
