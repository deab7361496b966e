"""
Lease Field Catalog

Static definitions for every field the extractor looks for in lease text.
Each definition lists its candidate patterns most-specific-first: the first
pattern that yields a non-blank capture supplies the value, later hits only
count toward match telemetry. Reordering patterns changes extraction output.
"""

import re
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.extraction.normalizers import normalize_field_value


class FieldType(str, Enum):
    """Field data type."""
    STRING = "string"
    CURRENCY = "currency"
    DATE = "date"
    ENUM = "enum"


class FieldPriority(str, Enum):
    """Review priority class; critical fields need a higher score to auto-pass."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FieldDefinition(BaseModel):
    """Definition for a single extraction field."""
    model_config = ConfigDict(frozen=True)

    field_name: str = Field(..., min_length=1, description="Unique field key")
    patterns: Tuple[str, ...] = Field(..., min_length=1, description="Regex sources, one capture group each")
    priority: FieldPriority = Field(..., description="Review priority class")
    field_type: FieldType = Field(..., description="Value type")
    keywords: Tuple[str, ...] = Field(..., min_length=1, description="Context keywords for scoring")
    enum_values: Optional[Tuple[str, ...]] = Field(None, description="Allowed enum values")
    min_length: int = Field(1, ge=0, description="Minimum normalized text length")
    max_length: Optional[int] = Field(None, description="Maximum normalized text length")
    require_digit: bool = Field(False, description="Text value must contain a digit")
    require_uppercase: bool = Field(False, description="Text value must contain an uppercase letter")

    @property
    def compiled_patterns(self) -> List[re.Pattern]:
        return [re.compile(source) for source in self.patterns]

    @property
    def is_critical(self) -> bool:
        return self.priority == FieldPriority.CRITICAL

    def required_threshold(self, config: Optional[PipelineConfig] = None) -> int:
        """Minimum confidence for the field to auto-pass review."""
        config = config or get_pipeline_config()
        if self.is_critical:
            return config.critical_review_threshold
        return config.default_review_threshold

    def normalize(self, value_text: Optional[str]) -> Any:
        return normalize_field_value(value_text, self.field_type.value, self.enum_values)

    def validate_value(self, normalized: Any) -> bool:
        """Validator predicate over the normalized value."""
        if normalized is None:
            return False

        if self.field_type == FieldType.CURRENCY:
            return isinstance(normalized, float) and normalized > 0
        if self.field_type == FieldType.DATE:
            return isinstance(normalized, date) and 1900 <= normalized.year <= 2200
        if self.field_type == FieldType.ENUM:
            return normalized in (self.enum_values or ())

        text = str(normalized)
        if len(text) < self.min_length:
            return False
        if self.max_length is not None and len(text) > self.max_length:
            return False
        if self.require_digit and not re.search(r"\d", text):
            return False
        if self.require_uppercase and not re.search(r"[A-Z]", text):
            return False
        return True


_AMOUNT = r"(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)"
_NUMERIC_DATE = r"([0-9]{1,2}[-/][0-9]{1,2}[-/][0-9]{2,4})"
_LONG_DATE = r"([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})"
_ENTITY = r"([A-Z][a-zA-Z &.,'-]{2,100})"


def get_lease_field_definitions() -> List[FieldDefinition]:
    """
    Get lease field definitions in catalog order.

    Patterns carry an inline ``(?i)`` flag where matching is
    case-insensitive. The first tenant and landlord patterns only fold case
    for the label, so the capture starts at a capitalized name. Party names
    never span lines.

    Returns:
        List of field definitions
    """
    return [
        # IDENTIFIERS
        FieldDefinition(
            field_name="lease_id",
            patterns=(
                r"(?i)(?:lease|agreement|contract)\s*(?:id|no|number|#)[\s:]*([A-Z0-9-]+)",
                r"(?i)lease\s*(?:agreement|contract)?\s*#?\s*([A-Z0-9-]{5,20})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("lease", "agreement", "id", "number"),
            min_length=3,
            max_length=50,
        ),
        FieldDefinition(
            field_name="property_id",
            patterns=(
                r"(?i)(?:property|premises|unit)\s*(?:id|no|number|#)[\s:]*([A-Z0-9-]+)",
                r"(?i)property\s*#?\s*([A-Z0-9-]{3,20})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("property", "premises", "id", "unit"),
            min_length=2,
            max_length=50,
        ),

        # PARTIES & PROPERTY
        FieldDefinition(
            field_name="tenant_name",
            patterns=(
                r"(?i:tenant|lessee)[\s:]+([A-Z][a-zA-Z &.,'-]{2,100}(?:LLC|Inc|Corp|Ltd)?)",
                r"(?i)(?:between|by and between)[\s\S]{0,100}?(?:landlord|lessor)[\s\S]{0,50}?and\s+" + _ENTITY,
                r"(?i)lessee:\s*" + _ENTITY,
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.STRING,
            keywords=("tenant", "lessee", "renter"),
            min_length=2,
            require_uppercase=True,
        ),
        FieldDefinition(
            field_name="landlord_name",
            patterns=(
                r"(?i:landlord|lessor)[\s:]+([A-Z][a-zA-Z &.,'-]{2,100}(?:LLC|Inc|Corp|Ltd)?)",
                r"(?i)(?:between|by and between)\s+" + _ENTITY + r"(?:,|\s+and)",
                r"(?i)lessor:\s*" + _ENTITY,
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("landlord", "lessor", "owner"),
            min_length=2,
            require_uppercase=True,
        ),
        FieldDefinition(
            field_name="property_address",
            patterns=(
                r"(?i)(?:property|premises|located at|demised premises)[\s:]+([0-9]+\s+[A-Za-z\s]+"
                r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr|Court|Ct|Way|Place|Pl|Parkway|Pkwy)"
                r"[^\n]{0,80})",
                r"(?i)address:\s*([0-9]+\s+[A-Za-z\s]+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd)[^\n]{0,80})",
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.STRING,
            keywords=("property", "premises", "located", "address"),
            min_length=10,
            require_digit=True,
        ),

        # TERM
        FieldDefinition(
            field_name="lease_start",
            patterns=(
                r"(?i)(?:commencement date|start date|effective date|lease begins?)[\s:]+" + _NUMERIC_DATE,
                r"(?i)(?:beginning|commencing|effective)\s+(?:on\s+)?" + _LONG_DATE,
                r"(?i)(?:term|lease)\s+(?:shall\s+)?(?:commence|begin)\s+(?:on\s+)?" + _LONG_DATE,
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.DATE,
            keywords=("commencement", "start", "effective", "beginning"),
        ),
        FieldDefinition(
            field_name="lease_end",
            patterns=(
                r"(?i)(?:expiration date|end date|termination date|lease ends?)[\s:]+" + _NUMERIC_DATE,
                r"(?i)(?:ending|expiring|terminating)\s+(?:on\s+)?" + _LONG_DATE,
                r"(?i)(?:term|lease)\s+(?:shall\s+)?(?:expire|end|terminate)\s+(?:on\s+)?" + _LONG_DATE,
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.DATE,
            keywords=("expiration", "end", "termination", "ending"),
        ),
        FieldDefinition(
            field_name="term_length",
            patterns=(
                r"(?i)(?:term|lease term|duration)[\s:]+(\d+\s*(?:months?|years?))",
                r"(?i)(?:period|term)\s+of\s+(\d+\s*(?:months?|years?))",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("term", "duration", "length", "period"),
            require_digit=True,
        ),

        # RENT
        FieldDefinition(
            field_name="base_rent",
            patterns=(
                r"(?i)(?:base rent|monthly rent|rent amount)[\s:]+\$?" + _AMOUNT,
                r"(?i)\$" + _AMOUNT + r"\s*(?:per month|monthly|/month)",
                r"(?i)rent(?:al)?(?:\s+of)?[\s:]+\$" + _AMOUNT,
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.CURRENCY,
            keywords=("rent", "base", "monthly", "payment"),
        ),
        FieldDefinition(
            field_name="rent_schedule",
            patterns=(
                r"(?i)rent\s+schedule[\s\S]{0,500}?((?:year\s+\d+[\s:]+\$\d+[^\n]*\n?)+)",
                r"(?i)(?:annual|monthly)\s+rent[\s\S]{0,200}?((?:\d{4}[-/]\d{2}[-/]\d{2}[\s:]+\$\d+[^\n]*\n?){2,})",
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.STRING,
            keywords=("rent", "schedule", "payment", "table"),
            min_length=3,
            require_digit=True,
        ),
        FieldDefinition(
            field_name="escalation_clause",
            patterns=(
                r"(?i)(?:rent|annual)\s+(?:escalation|increase|adjustment)[\s:]+(\d+(?:\.\d+)?%?|\$\d+|CPI[^\n]{0,100})",
                r"(?i)(?:rent|base rent)\s+shall\s+(?:increase|be adjusted)\s+(?:by\s+)?([^\n]{10,150})",
                r"(?i)(CPI\s*(?:\+|\s+plus)\s*\d+(?:\.\d+)?%)",
            ),
            priority=FieldPriority.CRITICAL,
            field_type=FieldType.STRING,
            keywords=("escalation", "increase", "adjustment", "cpi"),
            min_length=3,
        ),
        FieldDefinition(
            field_name="rent_commencement",
            patterns=(
                r"(?i)(?:rent|payment)\s+commencement(?:\s+date)?[\s:]+" + _NUMERIC_DATE,
                r"(?i)rent\s+(?:shall\s+)?(?:commence|begin)\s+(?:on\s+)?" + _LONG_DATE,
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.DATE,
            keywords=("rent", "commencement", "payment", "start"),
        ),

        # OPTIONS & RIGHTS
        FieldDefinition(
            field_name="renewal_options",
            patterns=(
                r"(?i)(?:renewal|extension)\s+options?[\s\S]{0,300}?(\d+\s+(?:months?|years?)[^\n.]{0,100})",
                r"(?i)option\s+to\s+(?:renew|extend)[\s\S]{0,200}?([^\n.]{20,200})",
                r"(?i)notice\s+of\s+(?:intent to\s+)?(?:renew|renewal)[\s:]+([^\n.]{10,150})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("renewal", "option", "extend", "extension"),
            min_length=10,
        ),
        FieldDefinition(
            field_name="termination_rights",
            patterns=(
                r"(?i)(?:early\s+)?termination[^\n.]{0,200}?((?:notice|penalty|fee|payment)[^\n.]{10,150})",
                r"(?i)break\s+(?:clause|option|right)[\s\S]{0,150}?([^\n.]{10,150})",
                r"(?i)right\s+to\s+terminate[\s\S]{0,150}?([^\n.]{10,150})",
            ),
            priority=FieldPriority.MEDIUM,
            field_type=FieldType.STRING,
            keywords=("termination", "break", "early", "cancel"),
            min_length=5,
        ),

        # EXPENSES
        FieldDefinition(
            field_name="operating_expenses",
            patterns=(
                r"(?i)operating\s+expenses?[\s\S]{0,200}?((?:gross[- ]up|base year|tenant['\s]+share)[^\n.]{10,150})",
                r"(?i)(?:CAM|common area maintenance)\s+(?:charges?|expenses?)[\s\S]{0,150}?([^\n.]{10,150})",
                r"(?i)additional\s+rent[\s\S]{0,150}?(operating[^\n.]{10,150})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("operating", "expense", "cam", "triple net"),
            min_length=5,
        ),
        FieldDefinition(
            field_name="lease_type",
            patterns=(
                r"(?i)((?:triple|double|modified)\s+net|gross|full[- ]service|NNN)",
                r"(?i)lease\s+type[\s:]+([^\n]{5,50})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.ENUM,
            keywords=("gross", "net", "triple", "modified"),
            enum_values=("triple net", "double net", "modified net", "full service", "nnn", "gross"),
        ),
        FieldDefinition(
            field_name="cam_details",
            patterns=(
                r"(?i)CAM[\s\S]{0,150}?(pro[- ]?rata\s+share[^\n.]{0,100}|proportionate\s+share[^\n.]{0,100})",
                r"(?i)common\s+area\s+maintenance[\s\S]{0,200}?(\$\d+[^\n.]{0,100})",
            ),
            priority=FieldPriority.MEDIUM,
            field_type=FieldType.STRING,
            keywords=("cam", "common", "area", "maintenance"),
            min_length=3,
        ),
        FieldDefinition(
            field_name="tax_details",
            patterns=(
                r"(?i)(?:real estate|property)\s+tax(?:es)?[\s\S]{0,200}?(tenant[^\n.]{0,150}|\$\d+[^\n.]{0,100})",
                r"(?i)tax(?:es)?\s+(?:obligation|responsibility)[\s:]+([^\n.]{10,150})",
            ),
            priority=FieldPriority.MEDIUM,
            field_type=FieldType.STRING,
            keywords=("tax", "property tax", "real estate tax"),
            min_length=5,
        ),
        FieldDefinition(
            field_name="insurance_details",
            patterns=(
                r"(?i)insurance[\s\S]{0,200}?((?:general liability|property|casualty)[^\n.]{10,150})",
                r"(?i)(?:coverage|policy)\s+amount[\s:]+\$(\d{1,3}(?:,\d{3})*)",
            ),
            priority=FieldPriority.MEDIUM,
            field_type=FieldType.STRING,
            keywords=("insurance", "liability", "coverage"),
            min_length=5,
        ),

        # PAYMENT TERMS
        FieldDefinition(
            field_name="late_fee",
            patterns=(
                r"(?i)late\s+(?:fee|charge|payment)[\s:]+(\d+%?|\$\d+[^\n]{0,50})",
                r"(?i)(?:if|when)\s+rent\s+(?:is\s+)?not\s+paid[\s\S]{0,100}?(\d+%|\$\d+)[^\n.]{0,50}",
            ),
            priority=FieldPriority.MEDIUM,
            field_type=FieldType.STRING,
            keywords=("late", "fee", "charge", "penalty"),
            require_digit=True,
        ),
        FieldDefinition(
            field_name="payment_frequency",
            patterns=(
                r"(?i)(?:rent|payment)\s+(?:is\s+)?(?:due|payable)\s+(monthly|quarterly|annually)",
                r"(?i)payments?\s+of\s+\$\d+\s+(monthly|quarterly|annually)",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.ENUM,
            keywords=("payment", "frequency", "due", "monthly"),
            enum_values=("monthly", "quarterly", "annually"),
        ),
        FieldDefinition(
            field_name="payment_due_date",
            patterns=(
                r"(?i)(?:rent|payment)\s+due\s+(?:on\s+)?(?:the\s+)?(\d{1,2}(?:st|nd|rd|th)?(?:\s+day)?)",
                r"(?i)payable\s+on\s+(?:or before\s+)?(?:the\s+)?(\d{1,2}(?:st|nd|rd|th)?)",
                r"(?i)due\s+(?:date|on)[\s:]+(\d{1,2})",
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.STRING,
            keywords=("due", "date", "payment", "payable"),
            require_digit=True,
        ),

        # NOTICES
        FieldDefinition(
            field_name="notice_address_landlord",
            patterns=(
                r"(?i)notices?\s+to\s+(?:landlord|lessor)[\s:]+([^\n]{20,200})",
                r"(?i)landlord(?:'s)?\s+address[\s:]+([^\n]{20,150})",
            ),
            priority=FieldPriority.LOW,
            field_type=FieldType.STRING,
            keywords=("notice", "address", "correspondence"),
            min_length=10,
        ),
        FieldDefinition(
            field_name="notice_address_tenant",
            patterns=(
                r"(?i)notices?\s+to\s+(?:tenant|lessee)[\s:]+([^\n]{20,200})",
                r"(?i)tenant(?:'s)?\s+address[\s:]+([^\n]{20,150})",
            ),
            priority=FieldPriority.LOW,
            field_type=FieldType.STRING,
            keywords=("notice", "address", "correspondence"),
            min_length=10,
        ),

        # SECURITY
        FieldDefinition(
            field_name="security_deposit",
            patterns=(
                r"(?i)security\s+deposit[\s:]+\$?" + _AMOUNT,
                r"(?i)deposit[\s:]+\$" + _AMOUNT,
            ),
            priority=FieldPriority.HIGH,
            field_type=FieldType.CURRENCY,
            keywords=("security", "deposit"),
        ),
        FieldDefinition(
            field_name="guarantor",
            patterns=(
                r"(?i)guarantor[\s:]+" + _ENTITY,
                r"(?i)guarantee[d]?\s+by\s+" + _ENTITY,
            ),
            priority=FieldPriority.LOW,
            field_type=FieldType.STRING,
            keywords=("guarantor", "guarantee", "surety"),
            min_length=2,
        ),
    ]


class PatternCatalog:
    """Ordered, name-indexed collection of field definitions."""

    def __init__(self, definitions: List[FieldDefinition]):
        names = [definition.field_name for definition in definitions]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field definitions: {', '.join(duplicates)}")
        self._definitions: Tuple[FieldDefinition, ...] = tuple(definitions)
        self._by_name: Dict[str, FieldDefinition] = {d.field_name: d for d in definitions}

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._by_name

    @property
    def field_names(self) -> List[str]:
        return [definition.field_name for definition in self._definitions]

    def get(self, field_name: str) -> Optional[FieldDefinition]:
        return self._by_name.get(field_name)

    def critical_fields(self) -> List[str]:
        return [d.field_name for d in self._definitions if d.is_critical]


@lru_cache(maxsize=1)
def get_pattern_catalog() -> PatternCatalog:
    """Get the default lease pattern catalog singleton."""
    return PatternCatalog(get_lease_field_definitions())
