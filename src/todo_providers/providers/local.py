from __future__ import annotations

import json
import uuid
from threading import Lock
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool

from ..db import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from ..errors import RecordMappingError, TodoNotFoundError
from ..models import Todo, TodoStatus, build_todo
from ..schemas import TodoCreate, TodoUpdate
from ..settings import Settings
from ..utils import utc_now_iso
from .base import DataProvider

STORAGE_KEY = "todos"


# PUBLIC_INTERFACE
def entry_to_todo(entry: Any) -> Todo:
    """Validate one stored entry; entries already use the canonical field names."""
    if not isinstance(entry, dict):
        raise RecordMappingError("Malformed local record: expected an object", "local")
    return build_todo(entry, "local")


# PUBLIC_INTERFACE
class LocalStorageProvider(DataProvider):
    """
    Single-device provider: the whole collection lives as one JSON document under
    STORAGE_KEY in a KeyValueStore. Ids and timestamps are generated here because
    there is no server authority.

    Store calls block (sqlite3), so each operation runs in the threadpool FastAPI uses
    for sync routes. A lock keeps every load-modify-save sequence whole.

    Reads return every stored todo whatever its user_id; the store is single-tenant.
    """

    kind = "local"

    def __init__(self, store: Optional[KeyValueStore] = None) -> None:
        self._store: KeyValueStore = store if store is not None else InMemoryKeyValueStore()
        self._lock = Lock()

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalStorageProvider":
        """Build a provider on the store named by LOCAL_STORE_BACKEND."""
        if settings.local_store_backend == "memory":
            return cls(InMemoryKeyValueStore())
        return cls(SQLiteKeyValueStore(settings.local_store_path))

    def _load(self) -> List[Dict[str, Any]]:
        raw = self._store.get_item(STORAGE_KEY)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except ValueError as exc:
            raise RecordMappingError("Stored todos are not valid JSON", self.kind) from exc
        if not isinstance(entries, list):
            raise RecordMappingError("Stored todos are not a list", self.kind)
        return entries

    def _save(self, entries: List[Dict[str, Any]]) -> None:
        self._store.set_item(STORAGE_KEY, json.dumps(entries))

    async def _create(self, data: TodoCreate, user_id: str) -> Todo:
        return await run_in_threadpool(self._create_sync, data, user_id)

    async def _list(self, user_id: str) -> List[Todo]:
        return await run_in_threadpool(self._list_sync)

    async def _update(self, todo_id: str, patch: TodoUpdate) -> Todo:
        return await run_in_threadpool(self._update_sync, todo_id, patch)

    async def _delete(self, todo_id: str) -> None:
        await run_in_threadpool(self._delete_sync, todo_id)

    async def _ping(self) -> None:
        await run_in_threadpool(self._list_sync)

    def _create_sync(self, data: TodoCreate, user_id: str) -> Todo:
        now = utc_now_iso()
        todo = Todo(
            id=str(uuid.uuid4()),
            title=data.title,
            description=data.description,
            status=data.status or TodoStatus.PENDING,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            entries = self._load()
            entries.insert(0, todo.model_dump(mode="json"))
            self._save(entries)
        return todo

    def _list_sync(self) -> List[Todo]:
        with self._lock:
            entries = self._load()
        # Newest first: creates are prepended.
        return [entry_to_todo(e) for e in entries]

    def _update_sync(self, todo_id: str, patch: TodoUpdate) -> Todo:
        with self._lock:
            entries = self._load()
            for index, entry in enumerate(entries):
                if isinstance(entry, dict) and entry.get("id") == todo_id:
                    current = entry_to_todo(entry).model_dump(mode="json")
                    updated = entry_to_todo({**current, **patch.changes(), "updated_at": utc_now_iso()})
                    entries[index] = updated.model_dump(mode="json")
                    self._save(entries)
                    return updated
        raise TodoNotFoundError(f"Todo {todo_id} not found", self.kind)

    def _delete_sync(self, todo_id: str) -> None:
        with self._lock:
            entries = self._load()
            remaining = [e for e in entries if not (isinstance(e, dict) and e.get("id") == todo_id)]
            if len(remaining) == len(entries):
                raise TodoNotFoundError(f"Todo {todo_id} not found", self.kind)
            self._save(remaining)
