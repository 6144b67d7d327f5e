from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..errors import ConfigurationError, RecordMappingError, TodoNotFoundError
from ..models import Todo, TodoStatus, build_todo
from ..schemas import TodoCreate, TodoUpdate
from ..settings import SUPABASE_KEY_PLACEHOLDERS, SUPABASE_URL_PLACEHOLDERS, Settings
from .base import HttpDataProvider
from .capabilities import is_supabase_configured

TABLE = "todos"
COLUMNS = ("id", "title", "description", "status", "user_id", "created_at", "updated_at")
NOT_CONFIGURED = "Supabase is not configured. Please complete the setup wizard."


# PUBLIC_INTERFACE
def row_to_todo(row: Any) -> Todo:
    """Map a `todos` table row onto the canonical Todo; the columns already line up."""
    if not isinstance(row, dict):
        raise RecordMappingError(f"Malformed supabase record: expected an object, got {type(row).__name__}", "supabase")
    return build_todo({c: row[c] for c in COLUMNS if c in row}, "supabase")


def _rows(body: Any) -> List[Any]:
    if not isinstance(body, list):
        raise RecordMappingError("Malformed supabase response: expected a list of rows", "supabase")
    return body


# PUBLIC_INTERFACE
class SupabaseProvider(HttpDataProvider):
    """
    Relational backend: a `todos` table exposed through the hosted store's REST
    (PostgREST) interface. `id` and `created_at` are assigned by the server.
    """

    kind = "supabase"

    def __init__(
        self,
        url: Optional[str],
        key: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(client)
        self._url = url
        self._key = key

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "SupabaseProvider":
        """
        Build a provider from settings.

        Raises:
            ConfigurationError if the URL or key is missing or still a placeholder.
        """
        if not is_supabase_configured(settings):
            raise ConfigurationError(NOT_CONFIGURED, cls.kind)
        return cls(settings.supabase_url, settings.supabase_key, client=client)

    @property
    def table_url(self) -> str:
        if not self._url or self._url in SUPABASE_URL_PLACEHOLDERS:
            raise ConfigurationError(NOT_CONFIGURED, self.kind)
        return f"{self._url.rstrip('/')}/rest/v1/{TABLE}"

    def _headers(self) -> Dict[str, str]:
        if not self._key or self._key in SUPABASE_KEY_PLACEHOLDERS:
            raise ConfigurationError(NOT_CONFIGURED, self.kind)
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }

    async def _create(self, data: TodoCreate, user_id: str) -> Todo:
        payload: Dict[str, Any] = {
            "title": data.title,
            "status": (data.status or TodoStatus.PENDING).value,
            "user_id": user_id,
        }
        if data.description is not None:
            payload["description"] = data.description
        body = await self._send("POST", self.table_url, json=payload, failure="Create todo failed")
        rows = _rows(body)
        if not rows:
            raise RecordMappingError("Create todo failed: the server returned no row", self.kind)
        return row_to_todo(rows[0])

    async def _list(self, user_id: str) -> List[Todo]:
        params = {
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }
        body = await self._send("GET", self.table_url, params=params, failure="Get todos failed")
        return [row_to_todo(row) for row in _rows(body)]

    async def _update(self, todo_id: str, patch: TodoUpdate) -> Todo:
        changes = patch.changes()
        params = {"id": f"eq.{todo_id}"}
        if changes:
            body = await self._send(
                "PATCH", self.table_url, params=params, json=changes, failure="Update todo failed"
            )
        else:
            # Empty patch: nothing to write, return the current row.
            body = await self._send(
                "GET", self.table_url, params={**params, "select": "*"}, failure="Update todo failed"
            )
        rows = _rows(body)
        if not rows:
            raise TodoNotFoundError(f"Todo {todo_id} not found", self.kind, status_code=404)
        return row_to_todo(rows[0])

    async def _delete(self, todo_id: str) -> None:
        body = await self._send(
            "DELETE", self.table_url, params={"id": f"eq.{todo_id}"}, failure="Delete todo failed"
        )
        if not _rows(body):
            raise TodoNotFoundError(f"Todo {todo_id} not found", self.kind, status_code=404)

    async def _ping(self) -> None:
        await self._send(
            "GET",
            self.table_url,
            params={"select": "id", "limit": "1"},
            failure="Supabase connection failed",
        )
