"""
Field Extractor

Applies the pattern catalog to plain document text. For every field, all
candidate patterns are tried in declared order; the first non-blank capture
wins and the remaining hits only feed match telemetry. A missing field is a
normal outcome, reported as a match with no value.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from leasecore.config import PipelineConfig, get_pipeline_config
from leasecore.extraction.lease_fields import FieldDefinition, PatternCatalog, get_pattern_catalog

logger = logging.getLogger(__name__)

PAGE_BREAK = "\f"


class FieldMatch(BaseModel):
    """Extraction telemetry for one field."""
    field_name: str = Field(..., description="Catalog field name")
    value_text: Optional[str] = Field(None, description="Trimmed winning capture")
    match_index: Optional[int] = Field(None, ge=0, description="Offset of the winning match")
    context_window: Optional[str] = Field(None, description="Text around the winning match")
    estimated_page: Optional[int] = Field(None, ge=1, description="1-based page estimate")
    patterns_matched: int = Field(0, ge=0, description="Patterns with a non-blank capture")
    patterns_total: int = Field(0, ge=0, description="Patterns tried")
    agreeing_patterns: int = Field(0, ge=0, description="Hits whose capture equals the winner")

    @property
    def found(self) -> bool:
        return self.value_text is not None


class FieldExtractor:
    """
    Regex-based field extractor.

    Stateless apart from its catalog and configuration; one instance can be
    shared across threads and documents.
    """

    def __init__(
        self,
        catalog: Optional[PatternCatalog] = None,
        config: Optional[PipelineConfig] = None,
    ):
        """
        Initialize field extractor.

        Args:
            catalog: Field definitions to apply (defaults to the lease catalog)
            config: Pipeline configuration (context window and page size)
        """
        self.catalog = catalog or get_pattern_catalog()
        self.config = config or get_pipeline_config()

    def extract(self, text: Optional[str]) -> List[FieldMatch]:
        """
        Extract every catalog field from document text.

        Args:
            text: Plain document text; None or empty yields no values

        Returns:
            One FieldMatch per catalog field, in catalog order
        """
        text = text or ""
        matches = [self.extract_field(definition, text) for definition in self.catalog]

        logger.info(
            "Field extraction complete",
            extra={
                "text_length": len(text),
                "fields_total": len(matches),
                "fields_found": sum(1 for match in matches if match.found),
            }
        )
        return matches

    def extract_field(self, definition: FieldDefinition, text: str) -> FieldMatch:
        """Run one definition's patterns against the text."""
        patterns = definition.compiled_patterns
        winner: Optional[str] = None
        winner_index: Optional[int] = None
        captures: List[str] = []

        for pattern in patterns:
            match = pattern.search(text)
            if match is None:
                continue
            capture = match.group(1)
            if capture is None or not capture.strip():
                continue
            captures.append(capture.strip())
            if winner is None:
                winner = capture.strip()
                winner_index = match.start()

        if winner is None:
            return FieldMatch(field_name=definition.field_name, patterns_total=len(patterns))

        return FieldMatch(
            field_name=definition.field_name,
            value_text=winner,
            match_index=winner_index,
            context_window=self.context_window(text, winner_index),
            estimated_page=self.estimate_page(text, winner_index),
            patterns_matched=len(captures),
            patterns_total=len(patterns),
            agreeing_patterns=sum(1 for capture in captures if capture == winner),
        )

    def context_window(self, text: str, index: int) -> str:
        start = max(0, index - self.config.context_chars_before)
        return text[start:index + self.config.context_chars_after]

    def estimate_page(self, text: str, index: int) -> int:
        """Form feeds mark page breaks; without them pages are fixed-size blocks."""
        if PAGE_BREAK in text:
            return text.count(PAGE_BREAK, 0, index) + 1
        return index // self.config.chars_per_page + 1
