"""Deterministic field extraction from lease text.

The pipeline and schema builder live in ``leasecore.extraction.pipeline``
and ``leasecore.extraction.schema_builder``.
"""
from .confidence import ConfidenceResult, ReasonCode, calculate_field_confidence, explain_confidence
from .extractor import FieldExtractor, FieldMatch
from .lease_fields import (
    FieldDefinition,
    FieldPriority,
    FieldType,
    PatternCatalog,
    get_lease_field_definitions,
    get_pattern_catalog,
)
from .normalizers import (
    normalize_currency,
    normalize_date,
    normalize_enum,
    normalize_field_value,
    normalize_integer,
    normalize_text,
)

__all__ = [
    "ConfidenceResult",
    "ReasonCode",
    "calculate_field_confidence",
    "explain_confidence",
    "FieldExtractor",
    "FieldMatch",
    "FieldDefinition",
    "FieldPriority",
    "FieldType",
    "PatternCatalog",
    "get_lease_field_definitions",
    "get_pattern_catalog",
    "normalize_currency",
    "normalize_date",
    "normalize_enum",
    "normalize_field_value",
    "normalize_integer",
    "normalize_text",
]
