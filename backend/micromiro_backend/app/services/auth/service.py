"""Authentication: registration, login and bearer-token validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from micromiro_backend.app.core.config import DEFAULT_JWT_SECRET, AuthSettings, get_settings
from micromiro_backend.app.core.errors import AuthError, ConflictError, ValidationError

from .repository import UsersRepository, get_users_repository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class Identity:
    """Claims carried by a validated bearer token."""

    user_id: int
    email: str
    role_id: Optional[int]


class AuthService:
    """Hashes passwords, issues and validates signed tokens."""

    def __init__(self, users: UsersRepository, settings: AuthSettings) -> None:
        self.users = users
        self.settings = settings
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )
        if settings.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning("JWT secret is the built-in default; set MICROMIRO_AUTH__JWT_SECRET")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def register(self, username: str, email: str, password: str) -> int:
        """Create a user and return its id.

        Raises:
            ValidationError: If a field is empty
            ConflictError: If the username or email is already taken
        """
        username = username.strip()
        email = email.strip()
        if not username or not email or not password:
            raise ValidationError("Username, email and password are required")

        if self.users.exists(username, email):
            raise ConflictError()

        user_id = self.users.create_user(
            username=username,
            email=email,
            password_hash=self.get_password_hash(password),
        )
        logger.info("User registered user_id=%s", user_id)
        return user_id

    def login(self, email: str, password: str) -> str:
        """Verify credentials and issue a token.

        Unknown email and wrong password raise the same error.
        """
        user = self.users.get_user_by_email(email.strip())
        if not user or not self.verify_password(password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        return self.create_access_token(
            {"user_id": user.id, "email": user.email, "role_id": user.role_id}
        )

    def create_access_token(
        self, data: Dict[str, Any], expires_delta: timedelta | None = None
    ) -> str:
        to_encode = data.copy()
        if expires_delta is None:
            expires_delta = timedelta(hours=self.settings.token_ttl_hours)
        expire = datetime.now(UTC) + expires_delta
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def authenticate(self, token: str) -> Identity:
        """Validate a token and extract its identity claims."""
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise AuthError(INVALID_TOKEN) from exc

        user_id = payload.get("user_id")
        email = payload.get("email")
        role_id = payload.get("role_id")
        if not isinstance(user_id, int) or not isinstance(email, str):
            raise AuthError(INVALID_TOKEN)
        if role_id is not None and not isinstance(role_id, int):
            raise AuthError(INVALID_TOKEN)

        return Identity(user_id=user_id, email=email, role_id=role_id)


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    """Get auth service singleton."""
    return AuthService(get_users_repository(), get_settings().auth)
