#!/usr/bin/env python3
"""Simple script to check that the Supabase tables used by the reminder service are reachable."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from whatsapp_reminders.config import get_settings
from whatsapp_reminders.logging_config import configure_logging
from whatsapp_reminders.services.supabase_client import REQUIRED_TABLES, get_supabase_client, verify_tables


def check_database() -> bool:
    """Check database connection and tables."""
    print("🔍 Checking Supabase database connection...")

    if not get_settings().supabase_configured:
        print("❌ Supabase credentials not configured (set SUPABASE_URL and SUPABASE_KEY)")
        return False

    client = get_supabase_client()
    if client is None:
        print("❌ Database connection failed, see log output above")
        return False
    print("✅ Supabase client created")

    if not verify_tables(client):
        print(f"❌ One or more tables are missing: expected {', '.join(REQUIRED_TABLES)}")
        return False

    print("\n🎉 Database is properly configured!")
    return True


if __name__ == "__main__":
    configure_logging()
    sys.exit(0 if check_database() else 1)
