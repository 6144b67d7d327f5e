from __future__ import annotations

import logging
from typing import Optional

from .errors import as_provider_error
from .providers.base import DataProvider, DeleteResult, TodoListResult, TodoResult
from .schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TodoService:
    """
    The one CRUD entry point the application depends on.

    Wraps the provider chosen at startup and delegates every call to it. Nothing
    raises past this boundary: a provider that breaks its own contract and lets an
    exception escape still produces an envelope with `error` set. Inputs are taken
    as already validated.
    """

    def __init__(self, provider: DataProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> DataProvider:
        return self._provider

    @property
    def provider_kind(self) -> str:
        return self._provider.kind

    # PUBLIC_INTERFACE
    async def create_todo(self, data: TodoCreate, user_id: str) -> TodoResult:
        try:
            return await self._provider.create_todo(data, user_id)
        except Exception as exc:
            logger.exception("Unhandled error creating todo via %s provider", self.provider_kind)
            return TodoResult(error=as_provider_error(exc, "Create todo failed", self.provider_kind))

    # PUBLIC_INTERFACE
    async def get_todos(self, user_id: str) -> TodoListResult:
        try:
            return await self._provider.get_todos(user_id)
        except Exception as exc:
            logger.exception("Unhandled error listing todos via %s provider", self.provider_kind)
            return TodoListResult(error=as_provider_error(exc, "Get todos failed", self.provider_kind))

    # PUBLIC_INTERFACE
    async def update_todo(self, todo_id: str, patch: TodoUpdate) -> TodoResult:
        try:
            return await self._provider.update_todo(todo_id, patch)
        except Exception as exc:
            logger.exception("Unhandled error updating todo via %s provider", self.provider_kind)
            return TodoResult(error=as_provider_error(exc, "Update todo failed", self.provider_kind))

    # PUBLIC_INTERFACE
    async def delete_todo(self, todo_id: str) -> DeleteResult:
        try:
            return await self._provider.delete_todo(todo_id)
        except Exception as exc:
            logger.exception("Unhandled error deleting todo via %s provider", self.provider_kind)
            return DeleteResult(error=as_provider_error(exc, "Delete todo failed", self.provider_kind))

    # PUBLIC_INTERFACE
    async def test_connection(self) -> Optional[str]:
        """None when the active backend answers, else the failure message."""
        try:
            return await self._provider.test_connection()
        except Exception as exc:
            logger.exception("Unhandled error testing %s connection", self.provider_kind)
            return as_provider_error(exc, "Connection test failed", self.provider_kind).message

    async def aclose(self) -> None:
        await self._provider.aclose()
