"""Configuration for the extraction, verification and analytics pipeline."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineConfig(BaseSettings):
    """Pipeline tuning knobs loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LEASECORE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Verification thresholds
    critical_review_threshold: int = Field(
        default=85,
        ge=0,
        le=100,
        description="Minimum score for a critical field to auto-pass",
    )
    default_review_threshold: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Minimum score for any other field to auto-pass",
    )

    # Extraction
    context_chars_before: int = Field(
        default=100,
        ge=0,
        description="Characters captured before the match start",
    )
    context_chars_after: int = Field(
        default=200,
        ge=0,
        description="Characters captured after the match start",
    )
    chars_per_page: int = Field(
        default=3000,
        gt=0,
        description="Page size used to estimate a page when text has no form feeds",
    )

    # Analytics
    default_discount_rate: float = Field(
        default=0.05,
        ge=0.0,
        description="Discount rate used for NPV when the caller supplies none",
    )
    default_projection_years: int = Field(
        default=5,
        ge=1,
        description="Projection horizon used when the caller supplies none",
    )
    exposure_horizon_years: int = Field(
        default=10,
        ge=1,
        description="Number of calendar years bucketed in portfolio exposure",
    )
    notice_due_window_days: int = Field(
        default=7,
        ge=0,
        description="Look-back window ending at notice-type calendar events",
    )
    expiration_due_window_days: int = Field(
        default=90,
        ge=0,
        description="Look-back window ending at the lease expiration event",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level for configure_logging()",
    )


@lru_cache(maxsize=1)
def get_pipeline_config() -> PipelineConfig:
    """
    Get pipeline configuration singleton.

    Returns:
        PipelineConfig instance
    """
    return PipelineConfig()
