"""
Extraction Pipeline

Runs the deterministic extraction path for one lease document:
1. Apply the pattern catalog to the text
2. Normalize and validate each captured value
3. Score confidence with reason codes
4. Assign the initial review state from score and field priority
5. Aggregate lease status and confidence

Absent fields are reported, never raised.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.extraction.confidence import calculate_field_confidence
from leasecore.extraction.extractor import FieldExtractor, FieldMatch
from leasecore.extraction.lease_fields import FieldDefinition, PatternCatalog, get_pattern_catalog
from leasecore.models.lease import (
    ExtractedField,
    SourceLocation,
    ValidationState,
    VerificationStatus,
)
from leasecore.verification.aggregation import aggregate_status, lease_confidence
from leasecore.verification.state_machine import initial_state

logger = logging.getLogger(__name__)


class ExtractionReport(BaseModel):
    """Complete per-field report for one document."""
    lease_id: str = Field(..., description="Lease identifier")
    fields: List[ExtractedField] = Field(..., description="One entry per catalog field")
    confidence_score: int = Field(..., ge=0, le=100, description="Mean field confidence")
    verification_status: VerificationStatus = Field(..., description="Derived lease status")
    fields_found: int = Field(..., ge=0, description="Fields with a captured value")

    def get(self, field_name: str) -> Optional[ExtractedField]:
        for field in self.fields:
            if field.field_name == field_name:
                return field
        return None

    def needs_review(self) -> List[ExtractedField]:
        return [field for field in self.fields if not field.is_verified]


def build_field(
    lease_id: str,
    definition: FieldDefinition,
    match: FieldMatch,
    config: PipelineConfig,
) -> ExtractedField:
    """Score one match and place it in its initial review state."""
    normalized = definition.normalize(match.value_text) if match.found else None
    format_valid = definition.validate_value(normalized)
    confidence = calculate_field_confidence(match, format_valid, definition.keywords)

    if match.found:
        state = initial_state(confidence.score, format_valid, definition.required_threshold(config))
        location = SourceLocation(
            text_snippet=match.context_window or "",
            estimated_page=match.estimated_page or 1,
        )
    else:
        state = ValidationState.FLAGGED
        location = None

    return ExtractedField(
        lease_id=lease_id,
        field_name=definition.field_name,
        value_text=match.value_text,
        value_normalized=normalized,
        extraction_confidence=confidence.score,
        reason_codes=confidence.reason_codes,
        source_location=location,
        validation_state=state,
        patterns_matched=match.patterns_matched,
        patterns_total=match.patterns_total,
    )


def extract_lease_fields(
    lease_id: str,
    text: Optional[str],
    catalog: Optional[PatternCatalog] = None,
    config: Optional[PipelineConfig] = None,
) -> ExtractionReport:
    """
    Extract, score and classify every catalog field from document text.

    Args:
        lease_id: Lease the document belongs to
        text: Plain document text (empty or None reports every field missing)
        catalog: Field catalog (defaults to the lease catalog)
        config: Pipeline configuration

    Returns:
        ExtractionReport covering every catalog field
    """
    catalog = catalog or get_pattern_catalog()
    config = config or get_pipeline_config()
    extractor = FieldExtractor(catalog=catalog, config=config)

    fields = [
        build_field(lease_id, catalog.get(match.field_name), match, config)
        for match in extractor.extract(text)
    ]

    report = ExtractionReport(
        lease_id=lease_id,
        fields=fields,
        confidence_score=lease_confidence(fields),
        verification_status=aggregate_status(fields),
        fields_found=sum(1 for field in fields if field.value_text is not None),
    )

    logger.info(
        "Lease extraction complete",
        extra={
            "lease_id": lease_id,
            "fields_found": report.fields_found,
            "fields_total": len(fields),
            "confidence_score": report.confidence_score,
            "verification_status": report.verification_status.value,
        }
    )
    return report
