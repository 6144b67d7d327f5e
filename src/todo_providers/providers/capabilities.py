from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..settings import (
    AIRTABLE_API_KEY_PLACEHOLDER,
    AIRTABLE_BASE_ID_PLACEHOLDER,
    AIRTABLE_TABLE_ID_PLACEHOLDER,
    SUPABASE_KEY_PLACEHOLDERS,
    SUPABASE_URL_PLACEHOLDERS,
    Settings,
)


def _is_set(value: Optional[str], placeholders: Iterable[str]) -> bool:
    return bool(value) and value not in placeholders


# PUBLIC_INTERFACE
def is_supabase_configured(settings: Settings) -> bool:
    """True iff both the base URL and the access key are present and not placeholders."""
    return _is_set(settings.supabase_url, SUPABASE_URL_PLACEHOLDERS) and _is_set(
        settings.supabase_key, SUPABASE_KEY_PLACEHOLDERS
    )


# PUBLIC_INTERFACE
def is_airtable_configured(settings: Settings) -> bool:
    """True iff the token, base id and table id are all present and not placeholders."""
    return (
        _is_set(settings.airtable_api_key, {AIRTABLE_API_KEY_PLACEHOLDER})
        and _is_set(settings.airtable_base_id, {AIRTABLE_BASE_ID_PLACEHOLDER})
        and _is_set(settings.airtable_table_id, {AIRTABLE_TABLE_ID_PLACEHOLDER})
    )


# PUBLIC_INTERFACE
def is_local_configured(settings: Settings) -> bool:
    """Local storage needs no credentials; it is the fallback of last resort."""
    return True


# PUBLIC_INTERFACE
def configured_backends(settings: Settings) -> Dict[str, bool]:
    """Probe result per backend kind, in selection priority order."""
    return {
        "supabase": is_supabase_configured(settings),
        "airtable": is_airtable_configured(settings),
        "local": is_local_configured(settings),
    }
