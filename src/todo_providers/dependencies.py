"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Request

from .service import TodoService


# PUBLIC_INTERFACE
def get_todo_service(request: Request) -> TodoService:
    """
    Return the service built once by create_app; the provider behind it never changes
    for the life of the app.
    """
    return request.app.state.todo_service
