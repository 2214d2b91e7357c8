"""Shared fixtures: a temporary warehouse and services wired to it."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest

from micromiro_backend.app.core.config import AuthSettings
from micromiro_backend.app.services.auth import AuthService, UsersRepository
from micromiro_backend.app.services.boards import (
    BoardsRepository,
    BoardsService,
    ElementsRepository,
)
from micromiro_backend.app.services.duckdb_utils import WarehousePool
from micromiro_backend.app.services.schema import ensure_schema

TEST_JWT_SECRET = "test-secret"


@pytest.fixture
def warehouse_path(tmp_path: Path) -> Path:
    """Path of a temporary warehouse."""
    return tmp_path / "warehouse.duckdb"


@pytest.fixture
def pool(warehouse_path: Path) -> Iterator[WarehousePool]:
    """Warehouse pool with the schema applied."""
    pool = WarehousePool(warehouse_path, size=4, timeout=1.0)
    ensure_schema(pool)
    yield pool
    pool.close()


@pytest.fixture
def users_repo(pool: WarehousePool) -> UsersRepository:
    return UsersRepository(pool)


@pytest.fixture
def boards_repo(pool: WarehousePool) -> BoardsRepository:
    return BoardsRepository(pool)


@pytest.fixture
def elements_repo(pool: WarehousePool) -> ElementsRepository:
    return ElementsRepository(pool)


@pytest.fixture
def auth_service(users_repo: UsersRepository) -> AuthService:
    """Auth service with cheap hashing and a fixed secret."""
    return AuthService(users_repo, AuthSettings(jwt_secret=TEST_JWT_SECRET, bcrypt_rounds=4))


@pytest.fixture
def boards_service(
    boards_repo: BoardsRepository,
    elements_repo: ElementsRepository,
    users_repo: UsersRepository,
) -> BoardsService:
    return BoardsService(boards_repo, elements_repo, users_repo)


@pytest.fixture
def make_user(users_repo: UsersRepository) -> Callable[[str], int]:
    """Factory inserting a user directly; the hash is never checked here."""

    def _make(name: str) -> int:
        return users_repo.create_user(
            username=name,
            email=f"{name}@example.com",
            password_hash="not-a-real-hash",
        )

    return _make


@pytest.fixture
def owner(make_user) -> int:
    return make_user("alice")


@pytest.fixture
def other(make_user) -> int:
    return make_user("bob")
