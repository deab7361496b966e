"""
Value Normalizers

Turns raw captured text into typed values: dates, currency amounts,
enum members and trimmed text. A normalizer returns None when the text
cannot be interpreted; it never raises.
"""

import re
import logging
from datetime import date, datetime
from typing import Any, Optional, Sequence

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

_NULL_TOKENS = {"null", "none", "n/a", ""}

# Parse defaults for partially specified dates are pinned so parsing is deterministic.
_DATE_DEFAULT = datetime(2000, 1, 1)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    if value.lower() in _NULL_TOKENS:
        return None
    return value


def normalize_date(value: Any) -> Optional[date]:
    """
    Normalize a date value.

    Accepts ``date``/``datetime`` objects, ISO strings, numeric
    ``M/D/YYYY`` and ``M-D-YY`` forms, and long forms like
    ``January 1, 2025``.

    Args:
        value: Date value (string, date, datetime, or None)

    Returns:
        ``datetime.date`` or None if invalid
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    cleaned = _clean(value)
    if cleaned is None:
        return None

    # Bare numbers are not dates ("30" would otherwise parse as a day of month)
    if not re.search(r"[-/,\s]|[A-Za-z]", cleaned):
        return None

    try:
        return date_parser.parse(cleaned, default=_DATE_DEFAULT, dayfirst=False).date()
    except (ValueError, OverflowError):
        logger.warning(
            "Failed to normalize date",
            extra={"value": cleaned[:50]}
        )
        return None


def normalize_currency(value: Any) -> Optional[float]:
    """
    Normalize currency value to float.

    Removes $, commas, and whitespace; ``(1,000)`` reads as negative.

    Args:
        value: Currency value (string, number, or None)

    Returns:
        Normalized float value or None if invalid
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _clean(value)
    if cleaned is None:
        return None

    numeric = re.sub(r"[$,\s]", "", cleaned)

    if numeric.startswith("(") and numeric.endswith(")"):
        numeric = "-" + numeric[1:-1]

    try:
        return float(numeric)
    except ValueError:
        logger.warning(
            "Failed to normalize currency",
            extra={"value": cleaned[:50]}
        )
        return None


def normalize_integer(value: Any) -> Optional[int]:
    """
    Normalize integer value.

    Returns:
        Normalized integer or None if invalid
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None

    cleaned = _clean(value)
    if cleaned is None:
        return None

    try:
        return int(float(re.sub(r"[,\s]", "", cleaned)))
    except ValueError:
        logger.warning(
            "Failed to normalize integer",
            extra={"value": cleaned[:50]}
        )
        return None


def normalize_enum(value: Any, allowed_values: Sequence[str]) -> Optional[str]:
    """
    Normalize enum value to match allowed values.

    Exact (case-insensitive) matches win over containment matches; hyphens
    and whitespace runs compare as single spaces.

    Args:
        value: Enum value (string or None)
        allowed_values: Allowed enum values

    Returns:
        Normalized enum value or None if invalid
    """
    cleaned = _clean(value)
    if cleaned is None:
        return None

    candidate = re.sub(r"[-\s]+", " ", cleaned.lower())

    for allowed in allowed_values:
        if candidate == allowed.lower():
            return allowed

    for allowed in allowed_values:
        if allowed.lower() in candidate:
            return allowed

    logger.warning(
        "Enum value not in allowed values",
        extra={
            "value": candidate[:50],
            "allowed_values": list(allowed_values)
        }
    )
    return None


def normalize_text(value: Any) -> Optional[str]:
    """Trim and collapse internal whitespace."""
    cleaned = _clean(value)
    if cleaned is None:
        return None
    return re.sub(r"\s+", " ", cleaned)


def normalize_field_value(
    value: Any,
    field_type: str,
    enum_values: Optional[Sequence[str]] = None
) -> Any:
    """
    Normalize field value based on type.

    Args:
        value: Raw field value
        field_type: Field type (string, date, currency, enum)
        enum_values: Allowed values for enum type

    Returns:
        Normalized value
    """
    if value is None:
        return None

    if field_type == "date":
        return normalize_date(value)
    elif field_type == "currency":
        return normalize_currency(value)
    elif field_type == "enum":
        if enum_values:
            return normalize_enum(value, enum_values)
        return normalize_text(value)
    else:  # string
        return normalize_text(value)
