from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

# Values the setup wizard writes into a fresh .env; they mean "not set".
SUPABASE_URL_PLACEHOLDERS = frozenset({"your-project-url", "https://your-project.supabase.co"})
SUPABASE_KEY_PLACEHOLDERS = frozenset({"your-publishable-key", "your-anon-key"})
AIRTABLE_API_KEY_PLACEHOLDER = "your-api-key"
AIRTABLE_BASE_ID_PLACEHOLDER = "your-base-id"
AIRTABLE_TABLE_ID_PLACEHOLDER = "your-table-id"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SUPABASE_URL: base URL of the hosted relational store
    - SUPABASE_PUBLISHABLE_KEY: access key (SUPABASE_ANON_KEY is accepted as a fallback)
    - AIRTABLE_API_KEY: personal access token for the spreadsheet backend
    - AIRTABLE_BASE_ID: base (container) identifier
    - AIRTABLE_TABLE_ID: table identifier within the base
    - LOCAL_STORE_BACKEND: 'sqlite' (default) or 'memory' store behind the local provider
    - LOCAL_STORE_PATH: path to the sqlite file. Default './data/local_store.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to enable optional HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME: username for basic auth (required when ENABLE_BASIC_AUTH=true)
    - BASIC_AUTH_PASSWORD: password for basic auth (required when ENABLE_BASIC_AUTH=true)
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table_id: Optional[str] = None
    local_store_backend: str = "sqlite"
    local_store_path: str = "./data/local_store.db"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    enable_basic_auth: bool = False
    basic_auth_username: Optional[str] = None
    basic_auth_password: Optional[str] = None
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _get_optional(*names: str) -> Optional[str]:
    """Return the first non-blank value among the given env vars, stripped."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    local_backend = _get_env("LOCAL_STORE_BACKEND", "sqlite").strip().lower()
    if local_backend not in {"memory", "sqlite"}:
        local_backend = "sqlite"

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)

    return Settings(
        supabase_url=_get_optional("SUPABASE_URL"),
        supabase_key=_get_optional("SUPABASE_PUBLISHABLE_KEY", "SUPABASE_ANON_KEY"),
        airtable_api_key=_get_optional("AIRTABLE_API_KEY"),
        airtable_base_id=_get_optional("AIRTABLE_BASE_ID"),
        airtable_table_id=_get_optional("AIRTABLE_TABLE_ID"),
        local_store_backend=local_backend,
        local_store_path=_get_env("LOCAL_STORE_PATH", "./data/local_store.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None,
        basic_auth_password=os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None,
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
