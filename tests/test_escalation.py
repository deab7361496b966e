"""Tests for escalation projection, NPV and summaries."""
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from leasecore.analytics.escalation import EscalationEngine, calculate_npv, effective_rate
from leasecore.exceptions import ValidationError
from leasecore.models.escalation import (
    CpiLinkedEscalation,
    EscalationFrequency,
    FixedAmountEscalation,
    NoEscalation,
    PercentEscalation,
    RentStep,
    StepScheduleEscalation,
)


@pytest.fixture
def engine(config):
    return EscalationEngine(config=config)


def _rents(projections):
    return [row.annual_rent for row in projections]


class TestProject:
    """Tests for EscalationEngine.project."""

    def test_percent_annual(self, engine):
        projections = engine.project(PercentEscalation(rate=3.0), 100_000, 2024, years=5)

        assert _rents(projections) == [100000.0, 103000.0, 106090.0, 109272.7, 112550.88]
        assert [row.year for row in projections] == [2024, 2025, 2026, 2027, 2028]
        assert projections[0].escalation_rate_applied == 0.0
        assert projections[0].notes == "Starting rent"
        assert projections[1].escalation_rate_applied == pytest.approx(0.03)
        assert projections[1].escalation_amount == 3000.0
        assert projections[-1].cumulative_rent == 530913.58

    def test_percent_monthly_compounds(self, engine):
        rule = PercentEscalation(rate=1.0, frequency=EscalationFrequency.MONTHLY)
        projections = engine.project(rule, 100_000, 2024, years=2)
        assert _rents(projections) == [100000.0, 112682.5]

    def test_percent_one_time(self, engine):
        rule = PercentEscalation(rate=10.0, frequency=EscalationFrequency.ONE_TIME)
        projections = engine.project(rule, 100_000, 2024, years=3)

        assert _rents(projections) == [100000.0, 110000.0, 110000.0]
        assert projections[2].notes == "No escalation this year"

    def test_fixed_amount(self, engine):
        projections = engine.project(FixedAmountEscalation(amount=5_000), 100_000, 2024, years=3)
        assert _rents(projections) == [100000.0, 105000.0, 110000.0]

    def test_cpi_cap_and_floor(self, engine):
        rule = CpiLinkedEscalation(cap=4.0, floor=2.0)
        projections = engine.project(rule, 100_000, 2024, years=4, cpi_rate=[5.0, 1.0, 3.0])

        assert _rents(projections) == [100000.0, 104000.0, 106080.0, 109262.4]
        assert projections[1].notes == "CPI 5.00% capped at 4%"
        assert projections[2].notes == "CPI 1.00% floored at 2%"
        assert projections[3].notes == "CPI 3.00%"

    def test_cpi_scalar_with_adjustment(self, engine):
        rule = CpiLinkedEscalation(adjustment=1.0)
        projections = engine.project(rule, 100_000, 2024, years=2, cpi_rate=2.0)

        assert _rents(projections) == [100000.0, 103000.0]
        assert projections[1].notes == "CPI 2.00% + 1%"

    def test_cpi_quarterly_compounds_within_year(self, engine):
        rule = CpiLinkedEscalation(frequency=EscalationFrequency.QUARTERLY)
        projections = engine.project(rule, 100_000, 2024, years=2, cpi_rate=4.0)
        assert _rents(projections) == [100000.0, 104060.4]

    def test_cpi_required(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            engine.project(CpiLinkedEscalation(), 100_000, 2024, years=3)
        assert exc_info.value.details[0]["field"] == "cpi_rate"

    def test_cpi_sequence_too_short(self, engine):
        with pytest.raises(ValidationError):
            engine.project(CpiLinkedEscalation(), 100_000, 2024, years=4, cpi_rate=[3.0])

    def test_step_schedule(self, engine):
        rule = StepScheduleEscalation(steps=[
            RentStep(year_index=3, annual_rent=150_000),
            RentStep(year_index=1, annual_rent=120_000),
        ])
        projections = engine.project(rule, 100_000, 2024, years=5)

        assert _rents(projections) == [100000.0, 120000.0, 120000.0, 150000.0, 150000.0]
        assert all(row.notes == "Step schedule" for row in projections)

    def test_no_escalation_is_flat(self, engine):
        projections = engine.project(NoEscalation(), 50_000, 2024, years=3)

        assert _rents(projections) == [50000.0, 50000.0, 50000.0]
        assert projections[0].notes == "No escalation (clause requires review)"

    def test_default_horizon_from_config(self, engine, config):
        projections = engine.project(PercentEscalation(rate=2.0), 100_000, 2024)
        assert len(projections) == config.default_projection_years

    @pytest.mark.parametrize("kwargs", [
        {"starting_rent": -1.0, "years": 3},
        {"starting_rent": 100.0, "years": 0},
    ])
    def test_invalid_inputs(self, engine, kwargs):
        with pytest.raises(ValidationError):
            engine.project(PercentEscalation(rate=3.0), start_year=2024, **kwargs)


class TestSummary:
    """Tests for projection summaries, NPV and effective rate."""

    def test_summary_example(self, engine):
        result = engine.project_with_summary(PercentEscalation(rate=3.0), 100_000, 2024, years=5, discount_rate=0.05)
        summary = result.summary

        assert summary.total_years == 5
        assert summary.starting_rent == 100000.0
        assert summary.ending_rent == 112550.88
        assert summary.total_rent == 530913.58
        assert summary.average_annual_rent == 106182.72
        assert summary.npv == pytest.approx(481311.75, abs=0.1)
        assert summary.effective_rate == pytest.approx(0.03, abs=1e-12)

    def test_one_year_has_no_effective_rate(self, engine):
        result = engine.project_with_summary(PercentEscalation(rate=3.0), 100_000, 2024, years=1)
        assert result.summary.effective_rate is None
        assert result.summary.npv == 100000.0

    def test_default_discount_rate(self, engine, config):
        result = engine.project_with_summary(NoEscalation(), 100_000, 2024, years=2)
        assert result.summary.discount_rate == config.default_discount_rate

    def test_empty_projection(self, engine):
        with pytest.raises(ValidationError):
            engine.summarize([])

    def test_npv_year_zero_undiscounted(self):
        assert calculate_npv([100.0, 110.0], 0.10) == 200.0

    def test_npv_rejects_rate_at_minus_one(self):
        with pytest.raises(ValidationError):
            calculate_npv([100.0], -1.0)

    @pytest.mark.parametrize("first, last, years, expected", [
        (100.0, 100.0, 1, None),
        (0.0, 100.0, 3, None),
        (100.0, 121.0, 3, pytest.approx(0.1)),
    ])
    def test_effective_rate(self, first, last, years, expected):
        assert effective_rate(first, last, years) == expected


class TestProjectionProperties:
    """Property-based tests for projections."""

    @settings(max_examples=100, deadline=None)
    @given(
        rate=st.floats(min_value=0.0, max_value=10.0, allow_nan=False),
        starting_rent=st.floats(min_value=0.0, max_value=5_000_000.0, allow_nan=False),
        years=st.integers(min_value=1, max_value=20),
        frequency=st.sampled_from(list(EscalationFrequency)),
    )
    def test_non_negative_rates_never_decrease_rent(self, rate, starting_rent, years, frequency):
        engine = EscalationEngine()
        projections = engine.project(
            PercentEscalation(rate=rate, frequency=frequency), starting_rent, 2024, years=years
        )

        rents = _rents(projections)
        assert len(rents) == years
        assert all(later >= earlier for earlier, later in zip(rents, rents[1:]))

    @settings(max_examples=100, deadline=None)
    @given(
        amount=st.floats(min_value=0.0, max_value=100_000.0, allow_nan=False),
        years=st.integers(min_value=1, max_value=20),
    )
    def test_cumulative_rent_is_running_total(self, amount, years):
        engine = EscalationEngine()
        projections = engine.project(FixedAmountEscalation(amount=amount), 60_000, 2024, years=years)

        running = 0.0
        for row in projections:
            running = round(running + row.annual_rent, 2)
            assert row.cumulative_rent == pytest.approx(running, abs=0.011)
