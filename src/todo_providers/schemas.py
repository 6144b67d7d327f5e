from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Todo, TodoStatus

TITLE_MAX_LENGTH = 200


def _normalize_title(value: str) -> str:
    """
    Internal helper to strip whitespace and enforce the 1..200 length bound.
    """
    s = value.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    Status may be omitted; every provider then stores it as pending.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: Optional[TodoStatus] = Field(default=None, description="Initial status (defaults to pending)")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is None:
            raise ValueError("title is required")
        return _normalize_title(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Patch for an existing Todo item.

    Only fields present in the payload are applied:
    - an omitted field is left unchanged
    - description: null clears the description, "" sets it to the empty string
    - title and status cannot be cleared
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "completed",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Detailed description; null clears it")
    status: Optional[TodoStatus] = Field(default=None, description="Completion status")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("title cannot be cleared")
        return _normalize_title(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[TodoStatus]) -> TodoStatus:
        if v is None:
            raise ValueError("status cannot be cleared")
        return v

    # PUBLIC_INTERFACE
    def changes(self) -> Dict[str, Any]:
        """Return only the explicitly provided fields, statuses as plain strings."""
        out: Dict[str, Any] = {}
        for name in ("title", "description", "status"):
            if name not in self.model_fields_set:
                continue
            value = getattr(self, name)
            out[name] = value.value if isinstance(value, TodoStatus) else value
        return out


# PUBLIC_INTERFACE
class TodoListOut(BaseModel):
    """
    Envelope for list responses. The list is always complete; there is no paging.
    """

    items: List[Todo] = Field(..., description="Todo items, newest first")
    total: int = Field(..., description="Number of items returned")


class ConnectionCheckOut(BaseModel):
    ok: bool = Field(..., description="Whether the active backend answered")
    error: Optional[str] = Field(default=None, description="Failure message when ok is false")


# PUBLIC_INTERFACE
class ProviderStatusOut(BaseModel):
    """
    Describes which backend is serving requests and which ones are configured.
    """

    provider: str = Field(..., description="Kind of the active provider: supabase, airtable or local")
    configured: Dict[str, bool] = Field(..., description="Capability probe result per backend")
    connection: ConnectionCheckOut = Field(..., description="Result of a live connection check")
