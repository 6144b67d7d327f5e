from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..errors import BackendOperationError, ProviderError, TodoNotFoundError, as_provider_error
from ..models import Todo
from ..schemas import TodoCreate, TodoUpdate
from ..utils import response_error_message

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoResult:
    """
    Outcome of a create or update: exactly one of `todo` and `error` is set.
    """
    todo: Optional[Todo] = None
    error: Optional[ProviderError] = None

    def __post_init__(self) -> None:
        if (self.todo is None) == (self.error is None):
            raise ValueError("TodoResult requires exactly one of todo or error")

    @property
    def ok(self) -> bool:
        return self.error is None


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoListResult:
    """
    Outcome of a read. On failure `todos` is empty and `error` is set.
    """
    todos: List[Todo] = field(default_factory=list)
    error: Optional[ProviderError] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.todos:
            raise ValueError("A failed TodoListResult cannot carry todos")

    @property
    def ok(self) -> bool:
        return self.error is None


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete; `error` is None on success."""
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# PUBLIC_INTERFACE
class DataProvider(ABC):
    """
    Abstract CRUD contract over one concrete todo backend.

    The public coroutines never raise: whatever the backend-specific `_create`,
    `_list`, `_update`, `_delete` hooks raise is converted into the `error` field
    of the returned envelope.
    """

    kind: str = "abstract"

    # PUBLIC_INTERFACE
    async def create_todo(self, data: TodoCreate, user_id: str) -> TodoResult:
        """Create a todo owned by `user_id`; status defaults to pending."""
        try:
            todo = await self._create(data, user_id)
        except Exception as exc:
            return TodoResult(error=self._failure(exc, "Create todo failed"))
        return TodoResult(todo=todo)

    # PUBLIC_INTERFACE
    async def get_todos(self, user_id: str) -> TodoListResult:
        """Return every todo visible to `user_id`, newest first, as one list."""
        try:
            todos = await self._list(user_id)
        except Exception as exc:
            return TodoListResult(error=self._failure(exc, "Get todos failed"))
        return TodoListResult(todos=todos)

    # PUBLIC_INTERFACE
    async def update_todo(self, todo_id: str, patch: TodoUpdate) -> TodoResult:
        """Apply the fields present in `patch`; absent fields are left untouched."""
        try:
            todo = await self._update(todo_id, patch)
        except Exception as exc:
            return TodoResult(error=self._failure(exc, "Update todo failed"))
        return TodoResult(todo=todo)

    # PUBLIC_INTERFACE
    async def delete_todo(self, todo_id: str) -> DeleteResult:
        """Delete a todo by id."""
        try:
            await self._delete(todo_id)
        except Exception as exc:
            return DeleteResult(error=self._failure(exc, "Delete todo failed"))
        return DeleteResult()

    # PUBLIC_INTERFACE
    async def test_connection(self) -> Optional[str]:
        """Cheap round-trip to the backend. Returns None on success, else the error message."""
        try:
            await self._ping()
        except Exception as exc:
            return self._failure(exc, "Connection test failed").message
        return None

    # PUBLIC_INTERFACE
    async def aclose(self) -> None:
        """Release transport resources held by the provider."""
        return None

    def _failure(self, exc: Exception, fallback: str) -> ProviderError:
        err = as_provider_error(exc, fallback, self.kind)
        logger.warning("%s provider: %s", self.kind, err.message)
        return err

    @abstractmethod
    async def _create(self, data: TodoCreate, user_id: str) -> Todo:
        """Backend-specific create; may raise."""

    @abstractmethod
    async def _list(self, user_id: str) -> List[Todo]:
        """Backend-specific read; may raise."""

    @abstractmethod
    async def _update(self, todo_id: str, patch: TodoUpdate) -> Todo:
        """Backend-specific partial update; may raise."""

    @abstractmethod
    async def _delete(self, todo_id: str) -> None:
        """Backend-specific delete; may raise."""

    @abstractmethod
    async def _ping(self) -> None:
        """Backend-specific connection check; may raise."""


class HttpDataProvider(DataProvider):
    """
    Shared plumbing for providers that talk to a remote JSON API over httpx.

    A client may be injected (tests pass one built on httpx.MockTransport); otherwise
    one is created lazily on first use and closed by `aclose`. No timeout or retry
    policy is layered on top of httpx's own defaults.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client
        self._owns_client = client is None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    @abstractmethod
    def _headers(self) -> Dict[str, str]:
        """Auth and content headers for every request; raises ConfigurationError if unusable."""

    async def _send(
        self,
        method: str,
        url: str,
        *,
        failure: str,
        not_found: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Issue one request and return the decoded JSON body (None for empty bodies).

        Raises:
            TodoNotFoundError on 404 when `not_found` is given.
            BackendOperationError on transport errors and any other non-2xx status.
        """
        headers = self._headers()
        try:
            response = await self._http().request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise BackendOperationError(f"{failure}: {exc}", self.kind) from exc

        if response.status_code == 404 and not_found is not None:
            raise TodoNotFoundError(not_found, self.kind, status_code=404)
        if response.is_error:
            raise BackendOperationError(
                response_error_message(response, failure), self.kind, status_code=response.status_code
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendOperationError(f"{failure}: response was not valid JSON", self.kind) from exc

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
