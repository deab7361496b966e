"""Supabase client for lease persistence."""
from functools import lru_cache

from supabase import Client, create_client

from leasecore.config import get_supabase_config


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Get the service-role Supabase client singleton.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_SERVICE_KEY is not set
    """
    config = get_supabase_config()
    if not config.url or not config.service_key:
        raise ValueError(
            "Supabase is not configured. Set SUPABASE_URL and SUPABASE_SERVICE_KEY."
        )
    return create_client(config.url, config.service_key)
