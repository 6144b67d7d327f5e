"""
Interchangeable todo backends behind one CRUD contract.
"""

from .airtable import AirtableProvider
from .base import DataProvider, DeleteResult, TodoListResult, TodoResult
from .capabilities import (
    configured_backends,
    is_airtable_configured,
    is_local_configured,
    is_supabase_configured,
)
from .factory import select_provider
from .local import LocalStorageProvider
from .supabase import SupabaseProvider

__all__ = [
    "AirtableProvider",
    "DataProvider",
    "DeleteResult",
    "LocalStorageProvider",
    "SupabaseProvider",
    "TodoListResult",
    "TodoResult",
    "configured_backends",
    "is_airtable_configured",
    "is_local_configured",
    "is_supabase_configured",
    "select_provider",
]
