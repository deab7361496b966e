"""Supabase configuration for the persistence-facing services."""
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseConfig(BaseSettings):
    """Supabase configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SUPABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="",
        description="Supabase project URL (SUPABASE_URL)",
    )

    service_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (SUPABASE_SERVICE_KEY)",
    )

    # Table names
    leases_table: str = Field(default="leases", description="Lease aggregate table")
    lease_fields_table: str = Field(default="lease_fields", description="Extracted field table")
    audit_events_table: str = Field(default="audit_events", description="Audit event table")


class AuditConfig(BaseSettings):
    """Audit sink selection from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    audit_backend: Literal["memory", "supabase"] = Field(
        default="supabase",
        description="Audit sink backend: 'memory' (process-local) or 'supabase'",
    )


@lru_cache(maxsize=1)
def get_supabase_config() -> SupabaseConfig:
    """Get Supabase configuration singleton."""
    return SupabaseConfig()


@lru_cache(maxsize=1)
def get_audit_config() -> AuditConfig:
    """Get audit configuration singleton."""
    return AuditConfig()
