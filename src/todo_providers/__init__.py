"""
Todo data providers package.

A single CRUD service (TodoService) over whichever storage backend is configured:
Supabase, Airtable, or local storage as the fallback. The FastAPI app lives in
todo_providers.main and is not imported here, so importing the package has no side
effects.
"""

from .models import Todo, TodoStatus
from .schemas import TodoCreate, TodoUpdate
from .service import TodoService

__all__ = ["Todo", "TodoCreate", "TodoService", "TodoStatus", "TodoUpdate"]
