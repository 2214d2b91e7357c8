"""Auth service module: credential store and token handling."""

from .repository import User, UsersRepository, get_users_repository
from .service import AuthService, Identity, get_auth_service

__all__ = [
    "AuthService",
    "Identity",
    "User",
    "UsersRepository",
    "get_auth_service",
    "get_users_repository",
]
