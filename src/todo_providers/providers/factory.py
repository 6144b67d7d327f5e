from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..db import KeyValueStore
from ..settings import Settings
from .airtable import AirtableProvider
from .base import DataProvider
from .capabilities import is_airtable_configured, is_supabase_configured
from .local import LocalStorageProvider
from .supabase import SupabaseProvider

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def select_provider(
    settings: Settings,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    store: Optional[KeyValueStore] = None,
) -> DataProvider:
    """
    Return the provider for the first configured backend in priority order:
    supabase, then airtable, then local storage (always available).

    No I/O happens here beyond opening the local store. `http_client` is handed to
    whichever remote provider is chosen; `store` replaces the configured local store.
    """
    if is_supabase_configured(settings):
        provider: DataProvider = SupabaseProvider.from_settings(settings, client=http_client)
    elif is_airtable_configured(settings):
        provider = AirtableProvider.from_settings(settings, client=http_client)
    elif store is not None:
        provider = LocalStorageProvider(store)
    else:
        provider = LocalStorageProvider.from_settings(settings)
    logger.info("Using %s data provider", provider.kind)
    return provider
