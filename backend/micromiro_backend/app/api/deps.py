"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from micromiro_backend.app.core.errors import AuthError
from micromiro_backend.app.services.auth import AuthService, Identity, get_auth_service
from micromiro_backend.app.services.boards import BoardsService, get_boards_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth() -> AuthService:
    """Get auth service dependency."""
    return get_auth_service()


def get_service() -> BoardsService:
    """Get boards service dependency."""
    return get_boards_service()


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth),
) -> Identity:
    """Resolve the ``Authorization: Bearer`` header into an identity."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Authorization header required")
    return auth.authenticate(credentials.credentials)
