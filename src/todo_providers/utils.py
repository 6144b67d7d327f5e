from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import httpx


# PUBLIC_INTERFACE
def utc_now_iso() -> str:
    """
    Current UTC time as an ISO8601 string with millisecond precision and a 'Z' suffix,
    e.g. '2025-01-25T10:15:30.123Z'. Lexicographic order matches chronological order.
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def response_error_message(response: httpx.Response, default: str) -> str:
    """
    Extract a human-readable error message from a JSON error body.

    Understands the PostgREST shape ({"message": ...}) and the Airtable shapes
    ({"error": {"type": ..., "message": ...}} and {"error": "NOT_FOUND"}).
    Falls back to `default` followed by the HTTP status.
    """
    body: Any
    try:
        body = response.json()
    except ValueError:
        body = None

    message: Optional[str] = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            message = err.get("message") or err.get("type")
        elif isinstance(err, str):
            message = body.get("message") or err
        else:
            message = body.get("message") or body.get("msg")
    if message:
        return f"{default}: {message}"
    return f"{default} (HTTP {response.status_code})"
