"""Lookups against single-row integration configuration and the item master."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import normalize_identifier

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get_api_key(self) -> Optional[str]: ...


class ItemLookup(Protocol):
    def asset_account(self, item_id: str) -> Optional[str]: ...


class SettingsCredentialStore:
    """API key taken straight from settings (``SHIPGUARD_DISTANCE_API_KEY``)."""

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key

    def get_api_key(self) -> Optional[str]:
        return self._api_key or settings.distance_api_key or None


class SupabaseCredentialStore:
    """Reads the API key from the first row of the integration config table."""

    def __init__(self, client: Any = None, table: str | None = None, column: str | None = None) -> None:
        self._client = client
        self.table = table or settings.config_table
        self.column = column or settings.api_key_column

    def get_api_key(self) -> Optional[str]:
        client = self._client or get_supabase_client()
        if not client:
            return None
        response = client.table(self.table).select(self.column).limit(1).execute()
        if not response.data:
            return None
        value = response.data[0].get(self.column)
        return str(value).strip() if value else None


class SupabaseItemLookup:
    def __init__(self, client: Any = None, table: str | None = None) -> None:
        self._client = client
        self.table = table or settings.items_table

    def asset_account(self, item_id: str) -> Optional[str]:
        client = self._client or get_supabase_client()
        if not client:
            logger.warning("Database not configured - cannot look up item asset accounts")
            return None
        response = client.table(self.table).select("asset_account").eq("item_id", item_id).limit(1).execute()
        if not response.data:
            return None
        return normalize_identifier(response.data[0].get("asset_account"))


def get_credential_store() -> CredentialStore:
    if get_supabase_client():
        return SupabaseCredentialStore()
    return SettingsCredentialStore()
