"""Supabase client for calendar, configuration and item lookups."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Example rows expected by the repositories:
#
# # blackout_dates
# supabase.table('blackout_dates').insert({
#     'calendar': 'standard',
#     'delivery_date': '2026-12-24',
# }).execute()
#
# # integration_config (single row)
# supabase.table('integration_config').insert({
#     'distance_api_key': '...',
# }).execute()
#
# # items
# supabase.table('items').insert({
#     'item_id': '5521',
#     'asset_account': '726',
# }).execute()
