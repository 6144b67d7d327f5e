from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import Settings

_security = HTTPBasic(auto_error=False)


def _settings(request: Request) -> Settings:
    return request.app.state.settings


# PUBLIC_INTERFACE
async def get_current_user_id(
    settings: Settings = Depends(_settings),
    creds: Optional[HTTPBasicCredentials] = Depends(_security),
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Resolve the id of the user owning the todos touched by this request.

    Behavior:
    - If settings.enable_basic_auth is False (default): the X-User-Id header, or ""
      when absent (anonymous, local-storage mode).
    - If True: validates the credentials against BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD
      and uses the username as the user id. Missing or invalid credentials raise 401
      with WWW-Authenticate: Basic.
    """
    if not settings.enable_basic_auth:
        return (x_user_id or "").strip()

    if creds is None or creds.username is None or creds.password is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    expected_user = settings.basic_auth_username
    expected_pass = settings.basic_auth_password
    if expected_user is None or expected_pass is None:
        # Misconfiguration: auth enabled but username/password not provided
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Server authentication not configured",
            headers={"WWW-Authenticate": "Basic"},
        )

    if not (creds.username == expected_user and creds.password == expected_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return creds.username
