# 📦 supabase_client.py

from functools import lru_cache

import structlog
from supabase import Client, create_client

from settings import settings
from utils.errors import MatchingConfigurationError

log = structlog.get_logger()


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Shared Supabase client, created on first use."""
    if not settings.supabase_url or not settings.supabase_key:
        raise MatchingConfigurationError(
            "Supabase is not configured: set SUPABASE_URL and SUPABASE_KEY."
        )
    log.info("Creating Supabase client", url=settings.supabase_url)
    return create_client(settings.supabase_url, settings.supabase_key)
