from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..auth import get_current_user_id
from ..dependencies import get_todo_service
from ..errors import ConfigurationError, ProviderError, TodoNotFoundError
from ..models import Todo
from ..schemas import TodoCreate, TodoListOut, TodoUpdate
from ..service import TodoService

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)


def _raise_for_error(error: ProviderError) -> None:
    """
    Translate a provider error envelope into an HTTP error with the message as detail.
    """
    if isinstance(error, TodoNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ConfigurationError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    raise HTTPException(status_code=code, detail=error.message)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Todo,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item for the current user and return the stored resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
        502: {"description": "Backend operation failed"},
    },
)
async def create_todo(
    payload: TodoCreate,
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> Todo:
    """
    Create a new Todo. Status defaults to pending.
    """
    result = await service.create_todo(payload, user_id)
    if result.error is not None:
        _raise_for_error(result.error)
    return result.todo  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TodoListOut,
    summary="List Todos",
    description=(
        "List every todo of the current user, newest first.\n\n"
        "The list is complete; backends that page their results are drained before responding."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        502: {"description": "Backend operation failed"},
    },
)
async def list_todos(
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> TodoListOut:
    """
    List todos of the current user.
    """
    result = await service.get_todos(user_id)
    if result.error is not None:
        _raise_for_error(result.error)
    return TodoListOut(items=result.todos, total=len(result.todos))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=Todo,
    summary="Replace Todo",
    description=(
        "Replace the editable fields of a Todo item. An omitted description is cleared and an "
        "omitted status resets to pending."
    ),
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
async def put_todo(
    todo_id: str,
    payload: TodoCreate,
    service: TodoService = Depends(get_todo_service),
) -> Todo:
    """
    Full replace expressed as a patch with every field explicitly set.
    """
    patch = TodoUpdate(
        title=payload.title,
        description=payload.description,
        status=payload.status or "pending",
    )
    result = await service.update_todo(todo_id, patch)
    if result.error is not None:
        _raise_for_error(result.error)
    return result.todo  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=Todo,
    summary="Update Todo",
    description="Partially update fields of a Todo item; omitted fields are left unchanged.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
async def patch_todo(
    todo_id: str,
    payload: TodoUpdate,
    service: TodoService = Depends(get_todo_service),
) -> Todo:
    """
    Partial update of a Todo item.
    """
    result = await service.update_todo(todo_id, payload)
    if result.error is not None:
        _raise_for_error(result.error)
    return result.todo  # type: ignore[return-value]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        204: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
async def delete_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> Response:
    """
    Delete a Todo. Returns 204 on success, 404 if not found.
    """
    result = await service.delete_todo(todo_id)
    if result.error is not None:
        _raise_for_error(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
