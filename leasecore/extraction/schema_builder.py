"""Builds the structured lease schema from extracted fields."""
import logging
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from leasecore.analytics.escalation import parse_escalation_clause
from leasecore.extraction.normalizers import normalize_currency
from leasecore.models.escalation import EscalationRule
from leasecore.models.lease import ExtractedField, VerificationStatus
from leasecore.models.lease_schema import (
    AdditionalRent,
    LeaseEconomics,
    LeaseSchema,
    LeaseTerm,
    RenewalOption,
    RentFrequency,
    RentScheduleEntry,
)

logger = logging.getLogger(__name__)

_NOTICE_DAYS = re.compile(r"(?i)(\d+)\s*(?:calendar\s+|business\s+)?days")
_TERM_YEARS = re.compile(r"(?i)(\d+)\s*(?:-\s*)?years?")
_MONTHLY_AMOUNT = re.compile(
    r"(?i)\$\s*(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)\s*(?:per\s+month|monthly|/\s*month)"
)


def _values(fields: Iterable[ExtractedField]) -> Dict[str, ExtractedField]:
    return {field.field_name: field for field in fields if field.value_text is not None}


def _as_date(value: Any) -> Optional[date]:
    return value if isinstance(value, date) else None


def _monthly_amount(field: Optional[ExtractedField]) -> float:
    if field is None:
        return 0.0
    match = _MONTHLY_AMOUNT.search(field.value_text)
    if not match:
        return 0.0
    return normalize_currency(match.group(1)) or 0.0


def _renewal_options(field: Optional[ExtractedField]) -> List[RenewalOption]:
    if field is None:
        return []
    notice = _NOTICE_DAYS.search(field.value_text)
    years = _TERM_YEARS.search(field.value_text)
    return [RenewalOption(
        option_number=1,
        term_years=int(years.group(1)) if years and int(years.group(1)) >= 1 else None,
        notice_required_days=int(notice.group(1)) if notice else None,
    )]


def build_lease_schema(
    lease_id: str,
    fields: Iterable[ExtractedField],
    org_id: Optional[str] = None,
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED,
) -> LeaseSchema:
    """
    Assemble a LeaseSchema from extracted (or reviewed) fields.

    A single monthly rent schedule entry spanning the term is produced when
    start, end and base rent are all known. The escalation clause is parsed
    into a rule; an unrecognized clause becomes a ``none`` rule.
    """
    values = _values(fields)

    commencement = _as_date(values["lease_start"].value_normalized) if "lease_start" in values else None
    expiration = _as_date(values["lease_end"].value_normalized) if "lease_end" in values else None
    if commencement and expiration and expiration < commencement:
        logger.warning(
            "Lease end precedes lease start; term dates dropped",
            extra={"lease_id": lease_id}
        )
        commencement = expiration = None

    base_rent = None
    if "base_rent" in values and isinstance(values["base_rent"].value_normalized, (int, float)):
        base_rent = float(values["base_rent"].value_normalized)

    schedule: List[RentScheduleEntry] = []
    if commencement and expiration and base_rent is not None:
        schedule.append(RentScheduleEntry(
            start_date=commencement,
            end_date=expiration,
            amount=base_rent,
            frequency=RentFrequency.MONTHLY,
        ))

    escalations: List[EscalationRule] = []
    if "escalation_clause" in values:
        escalations.append(parse_escalation_clause(values["escalation_clause"].value_text))

    return LeaseSchema(
        lease_id=lease_id,
        org_id=org_id,
        tenant_name=values["tenant_name"].value_normalized if "tenant_name" in values else None,
        property_address=values["property_address"].value_normalized if "property_address" in values else None,
        verification_status=verification_status,
        term=LeaseTerm(
            commencement_date=commencement,
            expiration_date=expiration,
            renewal_options=_renewal_options(values.get("renewal_options")),
        ),
        economics=LeaseEconomics(
            base_rent=base_rent,
            base_rent_schedule=schedule,
            escalations=escalations,
            additional_rent=AdditionalRent(
                cam_monthly=_monthly_amount(values.get("cam_details")),
                taxes_monthly=_monthly_amount(values.get("tax_details")),
                insurance_monthly=_monthly_amount(values.get("insurance_details")),
            ),
        ),
    )
