from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_todo_service
from ..providers.capabilities import configured_backends
from ..schemas import ConnectionCheckOut, ProviderStatusOut
from ..service import TodoService

router = APIRouter(
    prefix="/api/v1/provider",
    tags=["provider"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=ProviderStatusOut,
    summary="Provider Status",
    description=(
        "Report the active data provider, the capability probe result for every backend, "
        "and whether the active backend currently answers."
    ),
)
async def provider_status(request: Request, service: TodoService = Depends(get_todo_service)) -> ProviderStatusOut:
    """
    Describe the backend serving todo requests.
    """
    error = await service.test_connection()
    return ProviderStatusOut(
        provider=service.provider_kind,
        configured=configured_backends(request.app.state.settings),
        connection=ConnectionCheckOut(ok=error is None, error=error),
    )
