from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import RecordMappingError


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Lifecycle state of a todo. No other value is ever produced or accepted."""

    PENDING = "pending"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
class Todo(BaseModel):
    """
    Canonical, backend-agnostic Todo entity every caller programs against.

    Fields:
    - id: opaque identifier assigned by the backend (or generated locally); never empty
    - title: short title
    - description: optional text; None (absent) is distinct from ""
    - status: pending or completed
    - user_id: owner; may be "" when running on local storage without a signed-in user
    - created_at / updated_at: optional ISO8601 timestamps
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "recA1b2C3d4E5f6G7",
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed",
                "status": "pending",
                "user_id": "u1",
                "created_at": "2025-01-25T10:15:30.123Z",
                "updated_at": "2025-01-25T10:15:30.123Z",
            }
        },
    )

    id: str = Field(..., min_length=1, description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: TodoStatus = Field(default=TodoStatus.PENDING, description="Completion status")
    user_id: str = Field(default="", description="Identifier of the owning user")
    created_at: Optional[str] = Field(default=None, description="Creation timestamp (ISO8601)")
    updated_at: Optional[str] = Field(default=None, description="Last update timestamp (ISO8601)")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """Relational backends hand out integer or uuid ids; the canonical form is a string."""
        if v is None or isinstance(v, (bool, dict, list)):
            return v
        return str(v)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        """Backends may hold blank titles; a canonical todo never has one."""
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v


# PUBLIC_INTERFACE
def build_todo(fields: Dict[str, Any], source: str) -> Todo:
    """
    Validate a dict already translated to canonical field names into a Todo.

    Raises:
        RecordMappingError if required fields are missing or have the wrong type,
        or if status is not one of the known values.
    """
    try:
        return Todo.model_validate(fields)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or 'record'}: {e['msg']}" for e in exc.errors()
        )
        raise RecordMappingError(f"Malformed {source} record ({problems})", source) from exc
