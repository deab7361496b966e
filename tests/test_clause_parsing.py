"""Tests for escalation clause parsing."""
from datetime import date

import pytest

from leasecore.analytics.escalation import EscalationEngine, parse_escalation_clause
from leasecore.models.escalation import (
    CpiLinkedEscalation,
    EscalationFrequency,
    FixedAmountEscalation,
    NoEscalation,
    PercentEscalation,
    StepScheduleEscalation,
    describe_rule,
)


class TestParseEscalationClause:
    """Tests for parse_escalation_clause."""

    def test_percent_annual(self):
        rule = parse_escalation_clause("Base rent shall increase by 3% annually")

        assert isinstance(rule, PercentEscalation)
        assert rule.rate == 3.0
        assert rule.frequency == EscalationFrequency.ANNUAL
        assert rule.source_text == "Base rent shall increase by 3% annually"

    def test_percent_quarterly(self):
        rule = parse_escalation_clause("Rent increases 2.5% each quarter")

        assert isinstance(rule, PercentEscalation)
        assert rule.rate == 2.5
        assert rule.frequency == EscalationFrequency.QUARTERLY

    def test_percent_one_time(self):
        rule = parse_escalation_clause("A one-time increase of 10% applies in year two")
        assert rule.frequency == EscalationFrequency.ONE_TIME

    def test_fixed_amount(self):
        rule = parse_escalation_clause("Annual rent shall increase by $5,000 per year")

        assert isinstance(rule, FixedAmountEscalation)
        assert rule.amount == 5000.0

    def test_cpi_with_adjustment_cap_and_floor(self):
        rule = parse_escalation_clause(
            "Rent adjusts annually by CPI plus 1%, capped at 5% and floored at 2%"
        )

        assert isinstance(rule, CpiLinkedEscalation)
        assert rule.adjustment == 1.0
        assert rule.cap == 5.0
        assert rule.floor == 2.0

    def test_cpi_takes_precedence_over_percentages(self):
        rule = parse_escalation_clause("Increase equal to the Consumer Price Index, not to exceed 4%")

        assert isinstance(rule, CpiLinkedEscalation)
        assert rule.adjustment == 0.0

    def test_step_schedule(self):
        rule = parse_escalation_clause(
            "Year 1: $10,000 per month\nYear 2: $10,500 per month\nYear 3: $11,000 per month"
        )

        assert isinstance(rule, StepScheduleEscalation)
        assert [(step.year_index, step.annual_rent) for step in rule.steps] == [
            (0, 120000.0),
            (1, 126000.0),
            (2, 132000.0),
        ]

    def test_effective_date(self):
        rule = parse_escalation_clause("Rent increases 3% annually effective January 1, 2026")
        assert rule.effective_date == date(2026, 1, 1)

    @pytest.mark.parametrize("text, rate, frequency", [
        ("Base rent of $10,000 per month shall increase by 3% annually", 3.0, EscalationFrequency.ANNUAL),
        ("Tenant shall pay monthly base rent of $12,000. On each anniversary base rent "
         "shall increase 2.5% per annum.", 2.5, EscalationFrequency.ANNUAL),
        ("Base rent of $10,000 monthly increases by 3% each year", 3.0, EscalationFrequency.ANNUAL),
        ("Monthly rent of $9,000 with quarterly increases of 1%", 1.0, EscalationFrequency.QUARTERLY),
        ("Base rent of $4,000 per month; rent shall increase 0.25% per month", 0.25,
         EscalationFrequency.MONTHLY),
    ])
    def test_percent_with_rent_amount(self, text, rate, frequency):
        rule = parse_escalation_clause(text)

        assert isinstance(rule, PercentEscalation)
        assert rule.rate == rate
        assert rule.frequency == frequency

    @pytest.mark.parametrize("text, amount, frequency", [
        ("Base rent of $10,000 per month shall increase by $500 annually", 500.0,
         EscalationFrequency.ANNUAL),
        ("Base rent of $10,000 per month shall increase by $250 per month each year", 3000.0,
         EscalationFrequency.ANNUAL),
        ("Monthly rent is $8,000, subject to a $1,200 annual increase", 1200.0,
         EscalationFrequency.ANNUAL),
    ])
    def test_fixed_amount_with_rent_amount(self, text, amount, frequency):
        rule = parse_escalation_clause(text)

        assert isinstance(rule, FixedAmountEscalation)
        assert rule.amount == amount
        assert rule.frequency == frequency

    def test_rent_amount_does_not_drive_projection(self):
        rule = parse_escalation_clause("Base rent of $10,000 per month shall increase by 3% annually")

        rents = [row.annual_rent for row in EscalationEngine().project(rule, 120_000, 2025, years=2)]

        assert rents == [120000.0, 123600.0]

    @pytest.mark.parametrize("text, adjustment, cap", [
        ("Base rent of $8,500 per month shall be adjusted annually by CPI plus 1.5%, capped at 6%",
         1.5, 6.0),
        ("Monthly rent of $6,000 shall escalate each year with the Consumer Price Index", 0.0, None),
    ])
    def test_cpi_with_rent_amount(self, text, adjustment, cap):
        rule = parse_escalation_clause(text)

        assert isinstance(rule, CpiLinkedEscalation)
        assert rule.adjustment == adjustment
        assert rule.cap == cap
        assert rule.frequency == EscalationFrequency.ANNUAL

    def test_rent_change_from_to_fails_closed(self):
        rule = parse_escalation_clause("Rent shall increase from $10,000 per month to $10,500 per month")
        assert isinstance(rule, NoEscalation)

    @pytest.mark.parametrize("text", [None, "", "   ", "Rent as agreed between the parties"])
    def test_unrecognized_fails_closed(self, text):
        rule = parse_escalation_clause(text)

        assert isinstance(rule, NoEscalation)
        assert rule.requires_review is True
        assert rule.value is None


class TestDescribeRule:
    @pytest.mark.parametrize("rule, label", [
        (PercentEscalation(rate=3.0), "percent 3% annual"),
        (FixedAmountEscalation(amount=1500), "fixed_amount $1,500.00 annual"),
        (CpiLinkedEscalation(adjustment=1.5), "cpi_linked CPI + 1.5% annual"),
        (NoEscalation(), "none"),
    ])
    def test_labels(self, rule, label):
        assert describe_rule(rule) == label
