"""Configuration for leasecore."""
from .pipeline_config import PipelineConfig, get_pipeline_config
from .supabase_config import AuditConfig, SupabaseConfig, get_audit_config, get_supabase_config

__all__ = [
    "PipelineConfig",
    "get_pipeline_config",
    "SupabaseConfig",
    "get_supabase_config",
    "AuditConfig",
    "get_audit_config",
]
