"""Tests for the lease pattern catalog."""
import re
from datetime import date

import pytest

from leasecore.config import PipelineConfig
from leasecore.extraction.lease_fields import (
    FieldDefinition,
    FieldPriority,
    FieldType,
    PatternCatalog,
    get_lease_field_definitions,
    get_pattern_catalog,
)

EXPECTED_FIELDS = [
    "lease_id", "property_id", "tenant_name", "landlord_name", "property_address",
    "lease_start", "lease_end", "term_length", "base_rent", "rent_schedule",
    "escalation_clause", "rent_commencement", "renewal_options", "termination_rights",
    "operating_expenses", "lease_type", "cam_details", "tax_details", "insurance_details",
    "late_fee", "payment_frequency", "payment_due_date", "notice_address_landlord",
    "notice_address_tenant", "security_deposit", "guarantor",
]


class TestCatalogContents:
    """Tests for the default catalog."""

    def test_field_order(self):
        assert get_pattern_catalog().field_names == EXPECTED_FIELDS

    def test_critical_fields(self):
        assert set(get_pattern_catalog().critical_fields()) == {
            "tenant_name", "property_address", "lease_start", "lease_end",
            "base_rent", "rent_schedule", "escalation_clause",
        }

    def test_every_pattern_compiles_with_one_capture_group(self):
        for definition in get_pattern_catalog():
            for pattern in definition.compiled_patterns:
                assert isinstance(pattern, re.Pattern)
                assert pattern.groups == 1, f"{definition.field_name}: {pattern.pattern}"

    def test_every_definition_has_keywords(self):
        for definition in get_pattern_catalog():
            assert definition.keywords

    def test_catalog_is_cached(self):
        assert get_pattern_catalog() is get_pattern_catalog()

    def test_lookup(self):
        catalog = get_pattern_catalog()
        assert "base_rent" in catalog
        assert "pets_allowed" not in catalog
        assert catalog.get("pets_allowed") is None
        assert catalog.get("base_rent").field_type == FieldType.CURRENCY
        assert len(catalog) == 26

    def test_duplicate_names_rejected(self):
        definitions = get_lease_field_definitions()
        with pytest.raises(ValueError, match="base_rent"):
            PatternCatalog(definitions + [get_pattern_catalog().get("base_rent")])


class TestRequiredThreshold:
    def test_critical_threshold(self):
        config = PipelineConfig()
        assert get_pattern_catalog().get("base_rent").required_threshold(config) == 85

    def test_default_threshold(self):
        config = PipelineConfig()
        assert get_pattern_catalog().get("late_fee").required_threshold(config) == 70
        assert get_pattern_catalog().get("lease_id").required_threshold(config) == 70

    def test_threshold_follows_config(self):
        config = PipelineConfig(critical_review_threshold=95, default_review_threshold=50)
        catalog = get_pattern_catalog()
        assert catalog.get("lease_end").required_threshold(config) == 95
        assert catalog.get("guarantor").required_threshold(config) == 50


class TestValidators:
    """Validators run on normalized values."""

    @pytest.fixture
    def catalog(self):
        return get_pattern_catalog()

    def test_currency(self, catalog):
        definition = catalog.get("base_rent")
        assert definition.validate_value(definition.normalize("2,500"))
        assert not definition.validate_value(definition.normalize("0"))
        assert not definition.validate_value(None)

    def test_date_range(self, catalog):
        definition = catalog.get("lease_start")
        assert definition.validate_value(date(2024, 1, 1))
        assert not definition.validate_value(date(1850, 1, 1))
        assert not definition.validate_value("2024-01-01")

    def test_enum(self, catalog):
        definition = catalog.get("lease_type")
        assert definition.validate_value(definition.normalize("Triple Net"))
        assert not definition.validate_value(definition.normalize("percentage rent"))

    def test_text_rules(self, catalog):
        address = catalog.get("property_address")
        assert address.validate_value("100 Main Street")
        assert not address.validate_value("Main Street")  # no digit

        tenant = catalog.get("tenant_name")
        assert tenant.validate_value("Acme Corp")
        assert not tenant.validate_value("acme corp")  # no uppercase

    def test_max_length(self):
        definition = FieldDefinition(
            field_name="code",
            patterns=(r"code:\s*(\w+)",),
            priority=FieldPriority.LOW,
            field_type=FieldType.STRING,
            keywords=("code",),
            max_length=4,
        )
        assert definition.validate_value("ABCD")
        assert not definition.validate_value("ABCDE")

    def test_definitions_are_frozen(self, catalog):
        with pytest.raises(Exception):
            catalog.get("base_rent").priority = FieldPriority.LOW
