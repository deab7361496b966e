"""Shared test configuration and fixtures."""
import os
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import pytest

# Set up test environment variables before any imports
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key-for-testing")
os.environ.setdefault("AUDIT_BACKEND", "memory")
os.environ.setdefault("LEASECORE_LOG_LEVEL", "ERROR")

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from leasecore.audit.models import ActorContext  # noqa: E402
from leasecore.audit.sink import InMemoryAuditSink  # noqa: E402
from leasecore.config import PipelineConfig  # noqa: E402
from leasecore.models.lease import ExtractedField, SourceLocation, ValidationState, VerificationStatus  # noqa: E402
from leasecore.models.lease_schema import (  # noqa: E402
    AdditionalRent,
    LeaseEconomics,
    LeaseSchema,
    LeaseTerm,
    RentFrequency,
    RentScheduleEntry,
)
from leasecore.verification.state_machine import VerificationStateMachine  # noqa: E402

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config() -> PipelineConfig:
    """Pipeline configuration with default values."""
    return PipelineConfig()


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def actor() -> ActorContext:
    return ActorContext(user_id="reviewer-1", org_id="org-1")


@pytest.fixture
def other_org_actor() -> ActorContext:
    return ActorContext(user_id="reviewer-9", org_id="org-9")


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def machine(audit_sink, fixed_clock) -> VerificationStateMachine:
    return VerificationStateMachine(audit_sink, clock=fixed_clock)


@pytest.fixture
def make_field() -> Callable[..., ExtractedField]:
    """Factory for extracted fields with sensible defaults."""
    def _make(
        field_name: str = "base_rent",
        value_text: Optional[str] = "2,500",
        state: ValidationState = ValidationState.FLAGGED,
        confidence: Optional[int] = None,
        lease_id: str = "lease-1",
        value_normalized: Any = None,
    ) -> ExtractedField:
        if confidence is None:
            confidence = 60 if value_text is not None else 0
        return ExtractedField(
            lease_id=lease_id,
            field_name=field_name,
            value_text=value_text,
            value_normalized=value_normalized,
            extraction_confidence=confidence,
            reason_codes=[] if value_text is not None else ["FIELD_NOT_FOUND", "LOW_CONFIDENCE"],
            source_location=(
                SourceLocation(text_snippet=value_text, estimated_page=1) if value_text else None
            ),
            validation_state=state,
        )
    return _make


@pytest.fixture
def make_schema() -> Callable[..., LeaseSchema]:
    """Factory for verified lease schemas."""
    def _make(
        lease_id: str = "lease-1",
        commencement: Optional[date] = date(2024, 1, 1),
        expiration: Optional[date] = date(2028, 12, 31),
        base_rent: Optional[float] = 10_000.0,
        schedule: Optional[List[RentScheduleEntry]] = None,
        escalations: Optional[list] = None,
        additional: Optional[AdditionalRent] = None,
        property_address: Optional[str] = "100 Main Street",
        status: VerificationStatus = VerificationStatus.VERIFIED,
        renewal_options: Optional[list] = None,
        notice_events: Optional[list] = None,
    ) -> LeaseSchema:
        return LeaseSchema(
            lease_id=lease_id,
            org_id="org-1",
            tenant_name="Acme Corp",
            property_address=property_address,
            verification_status=status,
            term=LeaseTerm(
                commencement_date=commencement,
                expiration_date=expiration,
                renewal_options=renewal_options or [],
            ),
            economics=LeaseEconomics(
                base_rent=base_rent,
                base_rent_schedule=schedule or [],
                escalations=escalations or [],
                additional_rent=additional or AdditionalRent(),
            ),
            obligations={"notice_events": notice_events or []},
        )
    return _make


def monthly_entry(start: date, end: date, amount: float) -> RentScheduleEntry:
    return RentScheduleEntry(start_date=start, end_date=end, amount=amount, frequency=RentFrequency.MONTHLY)


def result(data: Any) -> Mock:
    """Supabase execute() result carrying ``data``."""
    response = Mock()
    response.data = data
    return response


def table_chain(*responses: Any) -> Mock:
    """
    Query-builder mock for one table.

    Every builder method returns the chain itself; successive execute()
    calls return the given responses in order.
    """
    chain = Mock()
    for method in ("select", "eq", "in_", "order", "range", "limit", "maybe_single",
                   "update", "upsert", "insert"):
        getattr(chain, method).return_value = chain
    chain.execute.side_effect = [result(data) for data in responses]
    return chain


@pytest.fixture
def mock_supabase() -> Callable[[Dict[str, Mock]], Mock]:
    """Build a Supabase client mock from per-table chains."""
    def _build(tables: Dict[str, Mock]) -> Mock:
        client = Mock()
        client.table.side_effect = lambda name: tables[name]
        return client
    return _build
