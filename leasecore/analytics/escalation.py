"""
Escalation Engine

Parses escalation clause text into a rule and projects annual rent over a
horizon. Compounding runs on unrounded values; reported money is rounded
half-up to cents. Year 0 is the starting year and carries no escalation.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.exceptions import ScenarioHorizonError, ValidationError
from leasecore.extraction.normalizers import normalize_currency, normalize_date
from leasecore.models.analytics import (
    AlignedYear,
    EscalationProjection,
    ProjectionSummary,
    ProjectionYear,
    ScenarioComparison,
    ScenarioResult,
)
from leasecore.models.escalation import (
    CpiLinkedEscalation,
    EscalationFrequency,
    EscalationRule,
    FixedAmountEscalation,
    NoEscalation,
    PercentEscalation,
    RentStep,
    StepScheduleEscalation,
)
from leasecore.utils import round_cents

logger = logging.getLogger(__name__)

CpiInput = Union[float, Sequence[float], None]

EVENTS_PER_YEAR = {
    EscalationFrequency.MONTHLY: 12,
    EscalationFrequency.QUARTERLY: 4,
    EscalationFrequency.ANNUAL: 1,
}


class Scenario(BaseModel):
    """Named rule to compare; ``years`` pins the horizon the caller expects."""
    name: str = Field(..., min_length=1)
    rule: EscalationRule
    years: Optional[int] = Field(None, ge=1)


def escalation_events(frequency: EscalationFrequency, year_index: int) -> int:
    """How many escalation events happen on the way into ``year_index``."""
    if year_index <= 0:
        return 0
    if frequency == EscalationFrequency.ONE_TIME:
        return 1 if year_index == 1 else 0
    return EVENTS_PER_YEAR[frequency]


def effective_rate(first: float, last: float, years: int) -> Optional[float]:
    """Constant annual rate taking ``first`` to ``last``; None when undefined."""
    if years <= 1 or first <= 0 or last < 0:
        return None
    return (last / first) ** (1 / (years - 1)) - 1


def calculate_npv(annual_rents: Sequence[float], discount_rate: float) -> float:
    """Discounted sum; year 0 is undiscounted."""
    if discount_rate <= -1:
        raise ValidationError(
            "Discount rate must be greater than -1",
            details=[{"field": "discount_rate", "message": str(discount_rate)}],
        )
    return round_cents(sum(
        rent / (1 + discount_rate) ** index for index, rent in enumerate(annual_rents)
    ))


class EscalationEngine:
    """Projection, NPV and scenario comparison over escalation rules."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_pipeline_config()

    def project(
        self,
        rule: EscalationRule,
        starting_rent: float,
        start_year: int,
        years: Optional[int] = None,
        cpi_rate: CpiInput = None,
    ) -> List[ProjectionYear]:
        """
        Project annual rent for ``years`` rows starting at ``start_year``.

        Args:
            rule: Escalation rule to apply
            starting_rent: Annual rent in year 0
            start_year: Calendar year of year 0
            years: Number of projected rows (defaults to PipelineConfig)
            cpi_rate: Annual CPI in percentage points, either one rate or one
                rate per escalation year (``cpi_rate[i - 1]`` drives year ``i``)

        Returns:
            One ProjectionYear per year, index 0 first

        Raises:
            ValidationError: On a non-positive horizon, negative rent or missing CPI input
        """
        years = years if years is not None else self.config.default_projection_years
        self._validate_inputs(rule, starting_rent, years, cpi_rate)

        raw_rents = self._raw_rents(rule, starting_rent, years, cpi_rate)

        projections: List[ProjectionYear] = []
        cumulative = 0.0
        for index, raw in enumerate(raw_rents):
            annual_rent = round_cents(raw)
            cumulative = round_cents(cumulative + annual_rent)
            previous = raw_rents[index - 1] if index else raw
            projections.append(ProjectionYear(
                year_index=index,
                year=start_year + index,
                annual_rent=annual_rent,
                escalation_rate_applied=(raw / previous - 1) if index and previous > 0 else 0.0,
                escalation_amount=round_cents(raw - previous),
                cumulative_rent=cumulative,
                notes=self._notes(rule, index, cpi_rate),
            ))

        logger.debug(
            "Escalation projected",
            extra={
                "rule_type": rule.type,
                "years": years,
                "starting_rent": starting_rent,
                "total_rent": cumulative,
            }
        )
        return projections

    def summarize(
        self,
        projections: Sequence[ProjectionYear],
        discount_rate: Optional[float] = None,
    ) -> ProjectionSummary:
        """Totals, NPV and effective rate for a projection."""
        if not projections:
            raise ValidationError("Cannot summarize an empty projection")
        rate = self.config.default_discount_rate if discount_rate is None else discount_rate
        rents = [row.annual_rent for row in projections]
        total = projections[-1].cumulative_rent

        return ProjectionSummary(
            total_years=len(projections),
            starting_rent=rents[0],
            ending_rent=rents[-1],
            total_rent=total,
            average_annual_rent=round_cents(total / len(projections)),
            npv=calculate_npv(rents, rate),
            discount_rate=rate,
            effective_rate=effective_rate(rents[0], rents[-1], len(rents)),
        )

    def project_with_summary(
        self,
        rule: EscalationRule,
        starting_rent: float,
        start_year: int,
        years: Optional[int] = None,
        cpi_rate: CpiInput = None,
        discount_rate: Optional[float] = None,
    ) -> EscalationProjection:
        projections = self.project(rule, starting_rent, start_year, years=years, cpi_rate=cpi_rate)
        summary = self.summarize(projections, discount_rate=discount_rate)
        # Effective rate from unrounded endpoints so exact growth reads exactly
        raw = self._raw_rents(rule, starting_rent, len(projections), cpi_rate)
        summary.effective_rate = effective_rate(raw[0], raw[-1], len(raw))
        return EscalationProjection(rule=rule, projections=projections, summary=summary)

    def compare_scenarios(
        self,
        base_rent: float,
        start_year: int,
        scenarios: Sequence[Scenario],
        years: Optional[int] = None,
        cpi_rate: CpiInput = None,
    ) -> ScenarioComparison:
        """
        Project every scenario over one horizon, aligned by year index.

        Best is the scenario with the highest total rent, worst the lowest.

        Raises:
            ValidationError: On an empty scenario set or duplicate names
            ScenarioHorizonError: If a scenario pins a different horizon
        """
        if not scenarios:
            raise ValidationError("At least one scenario is required")

        names = [scenario.name for scenario in scenarios]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValidationError(
                "Scenario names must be unique",
                details=[{"scenario": name, "message": "duplicate"} for name in duplicates],
            )

        horizon = years
        if horizon is None:
            pinned = [scenario.years for scenario in scenarios if scenario.years is not None]
            horizon = pinned[0] if pinned else self.config.default_projection_years
        mismatched = {
            scenario.name: scenario.years
            for scenario in scenarios
            if scenario.years is not None and scenario.years != horizon
        }
        if mismatched:
            raise ScenarioHorizonError(horizon, mismatched)

        results: List[ScenarioResult] = []
        for scenario in scenarios:
            projections = self.project(scenario.rule, base_rent, start_year, years=horizon, cpi_rate=cpi_rate)
            total = projections[-1].cumulative_rent
            results.append(ScenarioResult(
                name=scenario.name,
                rule=scenario.rule,
                projections=projections,
                total_rent=total,
                average_annual_rent=round_cents(total / horizon),
            ))

        aligned = [
            AlignedYear(
                year_index=index,
                year=start_year + index,
                rents={result.name: result.projections[index].annual_rent for result in results},
            )
            for index in range(horizon)
        ]

        # Stable on ties: earlier scenarios win
        best = max(results, key=lambda result: result.total_rent)
        worst = min(results, key=lambda result: result.total_rent)

        return ScenarioComparison(
            years=horizon,
            scenarios=results,
            aligned=aligned,
            best_scenario=best.name,
            worst_scenario=worst.name,
            difference=round_cents(best.total_rent - worst.total_rent),
        )

    def _validate_inputs(
        self,
        rule: EscalationRule,
        starting_rent: float,
        years: int,
        cpi_rate: CpiInput,
    ) -> None:
        if years < 1:
            raise ValidationError(
                "Projection horizon must be at least one year",
                details=[{"field": "years", "message": str(years)}],
            )
        if starting_rent < 0:
            raise ValidationError(
                "Starting rent must not be negative",
                details=[{"field": "starting_rent", "message": str(starting_rent)}],
            )
        if isinstance(rule, CpiLinkedEscalation):
            if cpi_rate is None:
                raise ValidationError(
                    "CPI-linked escalation requires a CPI rate",
                    details=[{"field": "cpi_rate", "message": "required for cpi_linked rules"}],
                )
            if not isinstance(cpi_rate, (int, float)) and len(cpi_rate) < years - 1:
                raise ValidationError(
                    f"CPI-linked escalation needs {years - 1} yearly rates, got {len(cpi_rate)}",
                    details=[{"field": "cpi_rate", "message": "too few rates"}],
                )

    def _raw_rents(
        self,
        rule: EscalationRule,
        starting_rent: float,
        years: int,
        cpi_rate: CpiInput,
    ) -> List[float]:
        rents: List[float] = []
        for index in range(years):
            if isinstance(rule, StepScheduleEscalation):
                rents.append(self._step_rent(rule, starting_rent, index))
                continue
            if index == 0:
                rents.append(float(starting_rent))
                continue

            previous = rents[-1]
            events = escalation_events(rule.frequency, index)
            if isinstance(rule, PercentEscalation):
                rents.append(previous * (1 + rule.rate / 100) ** events)
            elif isinstance(rule, FixedAmountEscalation):
                rents.append(previous + rule.amount * events)
            elif isinstance(rule, CpiLinkedEscalation):
                annual = self._cpi_annual_rate(rule, cpi_rate, index)
                per_event = annual / 100 / events if events else 0.0
                rents.append(previous * (1 + per_event) ** events)
            elif isinstance(rule, NoEscalation):
                rents.append(previous)
            else:
                raise TypeError(f"Unhandled escalation rule: {type(rule).__name__}")
        return rents

    @staticmethod
    def _step_rent(rule: StepScheduleEscalation, starting_rent: float, index: int) -> float:
        """Latest step at or before ``index``; the starting rent before the first step."""
        rent = float(starting_rent)
        for step in rule.steps:
            if step.year_index > index:
                break
            rent = step.annual_rent
        return rent

    @staticmethod
    def _cpi_rate_for(cpi_rate: CpiInput, index: int) -> float:
        if isinstance(cpi_rate, (int, float)):
            return float(cpi_rate)
        return float(cpi_rate[index - 1])

    def _cpi_annual_rate(self, rule: CpiLinkedEscalation, cpi_rate: CpiInput, index: int) -> float:
        rate = self._cpi_rate_for(cpi_rate, index) + rule.adjustment
        if rule.cap is not None:
            rate = min(rate, rule.cap)
        if rule.floor is not None:
            rate = max(rate, rule.floor)
        return rate

    def _notes(self, rule: EscalationRule, index: int, cpi_rate: CpiInput) -> str:
        if isinstance(rule, NoEscalation):
            return "No escalation (clause requires review)" if index == 0 else "No escalation"
        if isinstance(rule, StepScheduleEscalation):
            return "Step schedule"
        if index == 0:
            return "Starting rent"
        if escalation_events(rule.frequency, index) == 0:
            return "No escalation this year"
        if isinstance(rule, PercentEscalation):
            return f"{rule.rate:g}% {rule.frequency.value} increase (compounding)"
        if isinstance(rule, FixedAmountEscalation):
            return f"${rule.amount:,.2f} {rule.frequency.value} increase"
        if isinstance(rule, CpiLinkedEscalation):
            base = self._cpi_rate_for(cpi_rate, index)
            applied = self._cpi_annual_rate(rule, cpi_rate, index)
            if rule.cap is not None and applied == rule.cap and base + rule.adjustment > rule.cap:
                return f"CPI {base:.2f}% capped at {rule.cap:g}%"
            if rule.floor is not None and applied == rule.floor and base + rule.adjustment < rule.floor:
                return f"CPI {base:.2f}% floored at {rule.floor:g}%"
            if rule.adjustment:
                return f"CPI {base:.2f}% + {rule.adjustment:g}%"
            return f"CPI {base:.2f}%"
        raise TypeError(f"Unhandled escalation rule: {type(rule).__name__}")


_CPI_MENTION = re.compile(r"(?i)\bcpi\b|consumer\s+price\s+index")
_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_AMOUNT = r"\$\s*(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)"
_PER_MONTH = r"\s*(?:per\s+month|a\s+month|/\s*month|monthly)\b"
_INCREASE_VERB = re.compile(r"(?i)\b(?:increas|escalat|adjust)\w*")
# Dollar figure after the increase verb ("increase by $500"), or one naming
# the increase itself ("a $500 annual increase"). Rent amounts before the
# verb never count.
_FIXED = re.compile(
    r"(?i)(?:\b(?:increas|escalat|adjust)\w*(?:(?!\bfrom\b)[^\n$%]){0,40}?" + _AMOUNT + r"(" + _PER_MONTH + r")?)"
    r"|(?:" + _AMOUNT + r"\s+(?:(?:annual|yearly|quarterly|one[- ]time)\s+)?"
    r"(?:increase|escalation|adjustment)\b)"
)
_MONTHLY_AMOUNT = re.compile(r"(?i)" + _AMOUNT + _PER_MONTH)
_FREQUENCY_ADJECTIVE = re.compile(
    r"(?i)\b(one[- ]time|annual|yearly|quarterly|monthly)\s+(?:increas|escalat|adjust)\w*"
)
_FREQUENCY_WORDS = (
    (EscalationFrequency.ONE_TIME, re.compile(r"(?i)one[- ]time")),
    (EscalationFrequency.ANNUAL, re.compile(
        r"(?i)\bannual(?:ly)?\b|\byearly\b|per\s+(?:year|annum)|(?:each|every)\s+year"
    )),
    (EscalationFrequency.QUARTERLY, re.compile(r"(?i)quarter")),
    (EscalationFrequency.MONTHLY, re.compile(r"(?i)\bmonthly\b|per\s+month|(?:each|every)\s+month")),
)
_CLAUSE_BREAK = re.compile(r"[;\n]|\.(?:\s|$)")
_CPI_ADJUSTMENT = re.compile(r"(?i)(?:cpi|consumer\s+price\s+index)\s*(?:\+|plus)\s*(\d+(?:\.\d+)?)\s*%")
_CAP = re.compile(r"(?i)cap(?:ped)?\s+(?:at\s+)?(?:of\s+)?(\d+(?:\.\d+)?)\s*%")
_FLOOR = re.compile(r"(?i)floor(?:ed)?\s+(?:at\s+)?(?:of\s+)?(\d+(?:\.\d+)?)\s*%")
_STEP_LINE = re.compile(
    r"(?i)year\s+(\d+)\s*[:\-]?\s*\$\s*(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)(\s*(?:per\s+month|monthly|/\s*month))?"
)
_EFFECTIVE = re.compile(
    r"(?i)(?:effective|commencing|beginning)\s+(?:on\s+)?"
    r"([A-Z][a-z]+\s+\d{1,2},?\s+\d{4}|\d{1,2}[-/]\d{1,2}[-/]\d{2,4}|\d{4}-\d{2}-\d{2})"
)


def _escalation_phrase(text: str) -> str:
    """Text from the first increase verb to the end of its clause."""
    verb = _INCREASE_VERB.search(text)
    if not verb:
        return text
    phrase = text[verb.start():verb.start() + 160]
    return _CLAUSE_BREAK.split(phrase, maxsplit=1)[0]


def _detect_frequency(text: str) -> EscalationFrequency:
    """
    Escalation frequency, read only from the increase wording.

    An adjective on the verb ("quarterly increase") wins, then frequency
    words in the escalation phrase. "$X per month" states an amount, not a
    frequency. Defaults to annual.
    """
    cleaned = _MONTHLY_AMOUNT.sub(" ", text)
    adjective = _FREQUENCY_ADJECTIVE.search(cleaned)
    if adjective:
        word = adjective.group(1)
        for frequency, pattern in _FREQUENCY_WORDS:
            if pattern.search(word):
                return frequency

    phrase = _escalation_phrase(cleaned)
    for frequency, pattern in _FREQUENCY_WORDS:
        if pattern.search(phrase):
            return frequency
    return EscalationFrequency.ANNUAL


def parse_escalation_clause(text: Optional[str]) -> EscalationRule:
    """
    Parse clause text into an escalation rule.

    Tried in order: percent increase, fixed dollar increase, CPI-linked,
    step table; the first hit wins. A percentage or dollar figure next to a
    CPI reference belongs to the CPI rule. Anything else yields a ``none``
    rule that requires review, never a guessed rate.
    """
    if not text or not text.strip():
        return NoEscalation()

    clause = text.strip()
    mentions_cpi = bool(_CPI_MENTION.search(clause))
    frequency = _detect_frequency(clause)
    effective = _EFFECTIVE.search(clause)
    effective_date = normalize_date(effective.group(1)) if effective else None
    common = {"frequency": frequency, "effective_date": effective_date, "source_text": clause[:500]}

    if not mentions_cpi:
        step_lines = _STEP_LINE.findall(clause)
        percent = _PERCENT.search(clause)
        if percent and len(step_lines) < 2:
            return PercentEscalation(rate=float(percent.group(1)), **common)

        fixed = _FIXED.search(clause)
        if fixed and len(step_lines) < 2:
            amount = normalize_currency(fixed.group(1) or fixed.group(3))
            if amount is not None:
                # monthly figure; rules carry annual amounts
                if fixed.group(2):
                    amount *= 12
                return FixedAmountEscalation(amount=amount, **common)

    if mentions_cpi:
        adjustment = _CPI_ADJUSTMENT.search(clause)
        cap = _CAP.search(clause)
        floor = _FLOOR.search(clause)
        return CpiLinkedEscalation(
            adjustment=float(adjustment.group(1)) if adjustment else 0.0,
            cap=float(cap.group(1)) if cap else None,
            floor=float(floor.group(1)) if floor else None,
            **common,
        )

    steps: Dict[int, float] = {}
    for year_number, amount_text, monthly in _STEP_LINE.findall(clause):
        amount = normalize_currency(amount_text)
        if amount is None or int(year_number) < 1:
            continue
        steps.setdefault(int(year_number) - 1, amount * 12 if monthly else amount)
    if len(steps) >= 2:
        return StepScheduleEscalation(
            steps=[RentStep(year_index=index, annual_rent=rent) for index, rent in sorted(steps.items())],
            frequency=EscalationFrequency.ANNUAL,
            effective_date=effective_date,
            source_text=clause[:500],
        )

    logger.info(
        "Escalation clause not recognized",
        extra={"text": clause[:80]}
    )
    return NoEscalation(source_text=clause[:500])
