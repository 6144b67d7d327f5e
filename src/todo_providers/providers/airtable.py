from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..errors import BackendOperationError, ConfigurationError, RecordMappingError
from ..models import Todo, TodoStatus, build_todo
from ..schemas import TodoCreate, TodoUpdate
from ..settings import (
    AIRTABLE_API_KEY_PLACEHOLDER,
    AIRTABLE_BASE_ID_PLACEHOLDER,
    AIRTABLE_TABLE_ID_PLACEHOLDER,
    Settings,
)
from ..utils import utc_now_iso
from .base import HttpDataProvider
from .capabilities import is_airtable_configured

API_URL = "https://api.airtable.com/v0"
PAGE_SIZE = 100
NOT_CONFIGURED = "Airtable is not configured. Please complete the setup wizard."
TABLE_NOT_CONFIGURED = "Airtable table ID is not configured."

# canonical field -> Airtable column
FIELD_NAMES: Dict[str, str] = {
    "title": "Title",
    "description": "Description",
    "status": "Status",
    "user_id": "UserId",
    "created_at": "CreatedAt",
    "updated_at": "UpdatedAt",
}


# PUBLIC_INTERFACE
def record_to_todo(record: Any) -> Todo:
    """
    Map an Airtable record ({"id", "createdTime", "fields"}) onto the canonical Todo.

    Airtable omits empty cells entirely, so every field but Title may be missing:
    Status falls back to pending, UserId to "", CreatedAt to the record's createdTime.
    """
    if not isinstance(record, dict) or not isinstance(record.get("fields", {}), dict):
        raise RecordMappingError("Malformed airtable record: expected an object with fields", "airtable")
    fields: Dict[str, Any] = record.get("fields") or {}
    return build_todo(
        {
            "id": record.get("id"),
            "title": fields.get("Title"),
            "description": fields.get("Description"),
            "status": fields.get("Status") or TodoStatus.PENDING.value,
            "user_id": fields.get("UserId") or "",
            "created_at": fields.get("CreatedAt") or record.get("createdTime"),
            "updated_at": fields.get("UpdatedAt"),
        },
        "airtable",
    )


# PUBLIC_INTERFACE
def fields_from_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Rename canonical field names to Airtable column names."""
    return {FIELD_NAMES[name]: value for name, value in changes.items() if name in FIELD_NAMES}


def user_formula(user_id: str) -> str:
    """Formula selecting rows owned by `user_id`, with the id quoted as a string literal."""
    escaped = user_id.replace("\\", "\\\\").replace('"', '\\"')
    return f'{{UserId}} = "{escaped}"'


def _records(body: Any) -> List[Any]:
    records = body.get("records") if isinstance(body, dict) else None
    if not isinstance(records, list):
        raise RecordMappingError("Malformed airtable response: missing records", "airtable")
    return records


# PUBLIC_INTERFACE
class AirtableProvider(HttpDataProvider):
    """
    Spreadsheet backend: one table inside one Airtable base.

    Reads are filtered server-side by owner and drained page by page into a single
    list. Timestamps are stamped by this client since the table has no server-side
    defaults for them. Nothing is retried; rate limiting comes back as an error.
    """

    kind = "airtable"

    def __init__(
        self,
        api_key: Optional[str],
        base_id: Optional[str],
        table_id: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        api_url: str = API_URL,
    ) -> None:
        super().__init__(client)
        self._api_key = api_key
        self._base_id = base_id
        self._table_id = table_id
        self._api_url = api_url.rstrip("/")

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "AirtableProvider":
        """
        Build a provider from settings.

        Raises:
            ConfigurationError if any of token, base id or table id is missing or a placeholder.
        """
        if not is_airtable_configured(settings):
            raise ConfigurationError(NOT_CONFIGURED, cls.kind)
        return cls(
            settings.airtable_api_key,
            settings.airtable_base_id,
            settings.airtable_table_id,
            client=client,
        )

    @property
    def table_url(self) -> str:
        if not self._base_id or self._base_id == AIRTABLE_BASE_ID_PLACEHOLDER:
            raise ConfigurationError(NOT_CONFIGURED, self.kind)
        if not self._table_id or self._table_id == AIRTABLE_TABLE_ID_PLACEHOLDER:
            raise ConfigurationError(TABLE_NOT_CONFIGURED, self.kind)
        return f"{self._api_url}/{quote(self._base_id, safe='')}/{quote(self._table_id, safe='')}"

    def _headers(self) -> Dict[str, str]:
        if not self._api_key or self._api_key == AIRTABLE_API_KEY_PLACEHOLDER:
            raise ConfigurationError(NOT_CONFIGURED, self.kind)
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _create(self, data: TodoCreate, user_id: str) -> Todo:
        now = utc_now_iso()
        fields = {
            "Title": data.title,
            "Description": data.description if data.description is not None else "",
            "Status": (data.status or TodoStatus.PENDING).value,
            "UserId": user_id,
            "CreatedAt": now,
            "UpdatedAt": now,
        }
        body = await self._send(
            "POST", self.table_url, json={"records": [{"fields": fields}]}, failure="Create todo failed"
        )
        records = _records(body)
        if not records:
            raise RecordMappingError("Create todo failed: Airtable returned no record", self.kind)
        return record_to_todo(records[0])

    async def _list(self, user_id: str) -> List[Todo]:
        base_params = {
            "filterByFormula": user_formula(user_id),
            "sort[0][field]": FIELD_NAMES["created_at"],
            "sort[0][direction]": "desc",
            "pageSize": str(PAGE_SIZE),
        }
        todos: List[Todo] = []
        seen_offsets = set()
        offset: Optional[str] = None
        while True:
            params = dict(base_params)
            if offset:
                params["offset"] = offset
            body = await self._send("GET", self.table_url, params=params, failure="Get todos failed")
            todos.extend(record_to_todo(r) for r in _records(body))

            offset = body.get("offset")
            if not offset:
                return todos
            if offset in seen_offsets:
                raise BackendOperationError("Get todos failed: Airtable repeated a page offset", self.kind)
            seen_offsets.add(offset)

    async def _update(self, todo_id: str, patch: TodoUpdate) -> Todo:
        changes = patch.changes()
        changes.pop("user_id", None)  # ownership is fixed at creation
        fields = fields_from_changes(changes)
        fields["UpdatedAt"] = utc_now_iso()
        body = await self._send(
            "PATCH",
            self.table_url,
            json={"records": [{"id": todo_id, "fields": fields}]},
            failure="Update todo failed",
            not_found=f"Todo {todo_id} not found",
        )
        records = _records(body)
        if not records:
            raise RecordMappingError("Update todo failed: Airtable returned no record", self.kind)
        return record_to_todo(records[0])

    async def _delete(self, todo_id: str) -> None:
        body = await self._send(
            "DELETE",
            self.table_url,
            params={"records[]": todo_id},
            failure="Delete todo failed",
            not_found=f"Todo {todo_id} not found",
        )
        deleted = [r for r in _records(body) if isinstance(r, dict) and r.get("deleted")]
        if not deleted:
            raise BackendOperationError(f"Delete todo failed: Airtable did not delete {todo_id}", self.kind)

    async def _ping(self) -> None:
        await self._send(
            "GET", self.table_url, params={"maxRecords": "1"}, failure="Airtable connection failed"
        )
