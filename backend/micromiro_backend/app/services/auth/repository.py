"""Credential store: user identity and password hashes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Optional

import duckdb

from micromiro_backend.app.core.errors import ConflictError
from micromiro_backend.app.services.duckdb_utils import (
    WarehousePool,
    ensure_utc,
    get_warehouse_pool,
    utcnow,
)
from micromiro_backend.app.services.schema import DEFAULT_ROLE_ID

_USER_COLUMNS = "id, username, email, password, role_id, created_at, updated_at"


@dataclass
class User:
    """User entity. ``password_hash`` is never compared in plaintext."""

    id: int
    username: str
    email: str
    password_hash: str
    role_id: Optional[int]
    created_at: datetime
    updated_at: datetime


class UsersRepository:
    """Repository for user records."""

    def __init__(self, pool: WarehousePool) -> None:
        self.pool = pool

    def _connect(self):
        return self.pool.connection()

    def _to_user(self, row) -> User:
        return User(
            id=row[0],
            username=row[1],
            email=row[2],
            password_hash=row[3],
            role_id=row[4],
            created_at=ensure_utc(row[5]),
            updated_at=ensure_utc(row[6]),
        )

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        role_id: int = DEFAULT_ROLE_ID,
    ) -> int:
        """Insert a user and return its id."""
        now = utcnow()
        try:
            with self._connect() as con:
                row = con.execute(
                    """
                    INSERT INTO users (username, email, password, role_id, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    RETURNING id
                    """,
                    [username, email, password_hash, role_id, now, now],
                ).fetchone()
        except duckdb.ConstraintException as exc:
            raise ConflictError() from exc
        return row[0]

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
                [user_id],
            ).fetchone()
        return self._to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?",
                [email],
            ).fetchone()
        return self._to_user(row) if row else None

    def exists(self, username: str, email: str) -> bool:
        """Whether either the username or the email is already taken."""
        with self._connect() as con:
            row = con.execute(
                "SELECT 1 FROM users WHERE username = ? OR email = ? LIMIT 1",
                [username, email],
            ).fetchone()
        return row is not None


@lru_cache(maxsize=1)
def get_users_repository() -> UsersRepository:
    """Get users repository singleton."""
    return UsersRepository(get_warehouse_pool())
