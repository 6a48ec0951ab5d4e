"""Supabase client for database operations."""

from functools import lru_cache
from typing import Optional

from supabase import create_client, Client

from ..config import get_settings
from ..logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_TABLES = ("reminders", "contacts", "message_templates", "status_updates", "stickers")


@lru_cache(maxsize=1)
def get_supabase_client() -> Optional[Client]:
    """Get Supabase client instance."""
    settings = get_settings()

    if not settings.supabase_configured:
        logger.warning("Supabase credentials not configured")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        logger.info("Supabase client initialized successfully")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None


def verify_tables(client: Optional[Client]) -> bool:
    """Check that every table the service reads is reachable."""
    if not client:
        logger.error("Cannot verify tables: Supabase client not available")
        return False

    ok = True
    for table in REQUIRED_TABLES:
        try:
            client.table(table).select('id').limit(1).execute()
        except Exception as e:
            logger.error(f"Table '{table}' is not accessible: {e}")
            ok = False

    if ok:
        logger.info("Database tables verified")
    return ok
