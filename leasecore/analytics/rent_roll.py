"""
Portfolio Aggregator

Allocates rent-schedule periods into calendar years for rent rolls and
buckets remaining contractual rent by year and property for exposure.

Overlap is measured in whole calendar months plus leftover days / 30.44,
so a schedule fully inside the target year keeps its literal total.
Add-on charges (CAM, taxes, insurance) are flat monthly amounts times 12
and are not prorated against the lease term; affected entries carry an
ADDITIONAL_RENT_NOT_PRORATED warning.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.exceptions import LeaseCoreError
from leasecore.models.analytics import (
    LeaseFailure,
    PortfolioExposure,
    PortfolioRentRoll,
    RentBasis,
    RentRollEntry,
)
from leasecore.models.lease import VerificationStatus
from leasecore.models.lease_schema import LeaseSchema, RentFrequency
from leasecore.utils import round_cents

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30.44

# Share of one period's amount earned per month
_MONTHLY_FACTOR = {
    RentFrequency.MONTHLY: 1.0,
    RentFrequency.QUARTERLY: 1.0 / 3.0,
    RentFrequency.ANNUAL: 1.0 / 12.0,
}

ADDITIONAL_RENT_NOT_PRORATED = "ADDITIONAL_RENT_NOT_PRORATED"
RENT_ESTIMATED_FROM_BASE_RENT = "RENT_ESTIMATED_FROM_BASE_RENT"
NO_RENT_DATA = "NO_RENT_DATA"
TERM_OUTSIDE_TARGET_YEAR = "TERM_OUTSIDE_TARGET_YEAR"


def overlap_months(start: date, end: date, window_start: date, window_end: date) -> float:
    """Months shared by two inclusive date ranges; 0 when they do not meet."""
    first = max(start, window_start)
    last = min(end, window_end)
    if last < first:
        return 0.0

    stop = last + timedelta(days=1)
    delta = relativedelta(stop, first)
    whole = delta.years * 12 + delta.months
    leftover = (stop - (first + relativedelta(months=whole))).days
    return whole + leftover / DAYS_PER_MONTH


def rent_between(schema: LeaseSchema, start: date, end: date) -> float:
    """Unrounded rent earned between two inclusive dates."""
    economics = schema.economics
    if economics.base_rent_schedule:
        return sum(
            entry.amount * _MONTHLY_FACTOR[entry.frequency]
            * overlap_months(entry.start_date, entry.end_date, start, end)
            for entry in economics.base_rent_schedule
        )

    term = schema.term
    if economics.base_rent is None or term.commencement_date is None or term.expiration_date is None:
        return 0.0
    return economics.base_rent * overlap_months(term.commencement_date, term.expiration_date, start, end)


def _is_bounded(schema: LeaseSchema) -> bool:
    return schema.term.commencement_date is not None and schema.term.expiration_date is not None


class PortfolioAggregator:
    """Rent roll and exposure over a set of verified leases."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_pipeline_config()

    def lease_rent_for_year(self, schema: LeaseSchema, year: int) -> RentRollEntry:
        """
        Rent roll line for one lease and one calendar year.

        Without a rent schedule the figure is ``base_rent * 12`` for the whole
        year, reported with ``basis=base_rent_estimate``.
        """
        year_start, year_end = date(year, 1, 1), date(year, 12, 31)
        economics = schema.economics
        warnings: List[str] = []

        if economics.base_rent_schedule:
            basis = RentBasis.SCHEDULE
            annual_rent = rent_between(schema, year_start, year_end)
        else:
            basis = RentBasis.BASE_RENT_ESTIMATE
            if economics.base_rent is None:
                annual_rent = 0.0
                warnings.append(NO_RENT_DATA)
            else:
                annual_rent = economics.base_rent * 12
                warnings.append(RENT_ESTIMATED_FROM_BASE_RENT)
                if _is_bounded(schema) and overlap_months(
                    schema.term.commencement_date, schema.term.expiration_date, year_start, year_end
                ) == 0:
                    warnings.append(TERM_OUTSIDE_TARGET_YEAR)

        additional = economics.additional_rent
        cam = additional.cam_monthly * 12
        taxes = additional.taxes_monthly * 12
        insurance = additional.insurance_monthly * 12

        if not additional.is_zero and self._covers_part_of_year(schema, year_start, year_end):
            warnings.append(ADDITIONAL_RENT_NOT_PRORATED)

        total_annual = annual_rent + cam + taxes + insurance

        return RentRollEntry(
            lease_id=schema.lease_id,
            tenant_name=schema.tenant_name,
            property_address=schema.property_address,
            year=year,
            annual_rent=round_cents(annual_rent),
            monthly_rent=round_cents(annual_rent / 12),
            cam=round_cents(cam),
            taxes=round_cents(taxes),
            insurance=round_cents(insurance),
            total_annual=round_cents(total_annual),
            total_monthly=round_cents(total_annual / 12),
            basis=basis,
            warnings=warnings,
        )

    def rent_roll(
        self,
        schemas: Iterable[LeaseSchema],
        year: Optional[int] = None,
    ) -> PortfolioRentRoll:
        """
        Portfolio rent roll for a calendar year (current year by default).

        Unverified leases are skipped; a lease that fails is reported in
        ``failures`` without aborting the rest.
        """
        year = year or date.today().year
        roll = PortfolioRentRoll(year=year)

        for schema in schemas:
            if schema.verification_status != VerificationStatus.VERIFIED:
                roll.skipped_lease_ids.append(schema.lease_id)
                continue
            try:
                roll.entries.append(self.lease_rent_for_year(schema, year))
            except (LeaseCoreError, ArithmeticError, ValueError) as e:
                roll.failures.append(self._failure(schema.lease_id, e, "rent_roll"))

        roll.lease_count = len(roll.entries)
        roll.total_annual_rent = round_cents(sum(entry.annual_rent for entry in roll.entries))
        roll.total_monthly_rent = round_cents(sum(entry.monthly_rent for entry in roll.entries))
        roll.total_additional_rent = round_cents(
            sum(entry.cam + entry.taxes + entry.insurance for entry in roll.entries)
        )

        logger.info(
            "Rent roll generated",
            extra={
                "year": year,
                "lease_count": roll.lease_count,
                "skipped": len(roll.skipped_lease_ids),
                "failures": len(roll.failures),
            }
        )
        return roll

    def exposure(
        self,
        schemas: Iterable[LeaseSchema],
        as_of: Optional[date] = None,
        horizon_years: Optional[int] = None,
    ) -> PortfolioExposure:
        """
        Remaining contractual rent bucketed by calendar year and property.

        Year buckets start with the as-of year. Leases without both term
        dates cannot be bounded and are listed in ``unbounded_lease_ids``.
        """
        as_of = as_of or date.today()
        horizon = horizon_years or self.config.exposure_horizon_years
        years = list(range(as_of.year, as_of.year + horizon))

        by_year: Dict[int, float] = {year: 0.0 for year in years}
        by_property: Dict[str, float] = {}
        result = PortfolioExposure(as_of=as_of, horizon_years=horizon)
        total = 0.0

        for schema in schemas:
            if schema.verification_status != VerificationStatus.VERIFIED:
                result.skipped_lease_ids.append(schema.lease_id)
                continue
            result.lease_count += 1
            if not _is_bounded(schema):
                result.unbounded_lease_ids.append(schema.lease_id)
                continue
            try:
                remaining_start = max(as_of, schema.term.commencement_date)
                expiration = schema.term.expiration_date
                remaining = rent_between(schema, remaining_start, expiration)
                yearly = {
                    year: rent_between(
                        schema,
                        max(remaining_start, date(year, 1, 1)),
                        min(expiration, date(year, 12, 31)),
                    )
                    for year in years
                }
            except (LeaseCoreError, ArithmeticError, ValueError) as e:
                result.failures.append(self._failure(schema.lease_id, e, "exposure"))
                continue

            total += remaining
            for year, amount in yearly.items():
                by_year[year] += amount
            property_key = schema.property_address or "Unknown"
            by_property[property_key] = by_property.get(property_key, 0.0) + remaining

        result.total_contractual_rent = round_cents(total)
        result.exposure_by_year = {year: round_cents(amount) for year, amount in by_year.items()}
        result.exposure_by_property = {key: round_cents(amount) for key, amount in by_property.items()}
        result.total_annual_rent = result.exposure_by_year.get(as_of.year, 0.0)
        result.average_lease_value = (
            round_cents(total / result.lease_count) if result.lease_count else 0.0
        )

        logger.info(
            "Portfolio exposure calculated",
            extra={
                "as_of": as_of.isoformat(),
                "lease_count": result.lease_count,
                "unbounded": len(result.unbounded_lease_ids),
                "failures": len(result.failures),
            }
        )
        return result

    @staticmethod
    def _covers_part_of_year(schema: LeaseSchema, year_start: date, year_end: date) -> bool:
        term = schema.term
        if term.commencement_date is not None and term.commencement_date > year_start:
            return True
        if term.expiration_date is not None and term.expiration_date < year_end:
            return True
        return False

    @staticmethod
    def _failure(lease_id: str, error: Exception, operation: str) -> LeaseFailure:
        logger.error(
            "Lease failed during portfolio aggregation",
            extra={"lease_id": lease_id, "operation": operation, "error": str(error)},
            exc_info=True,
        )
        code = error.code if isinstance(error, LeaseCoreError) else type(error).__name__
        message = error.message if isinstance(error, LeaseCoreError) else str(error)
        return LeaseFailure(lease_id=lease_id, code=code, message=message)
