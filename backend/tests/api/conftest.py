"""Fixtures running the full application against a temporary data directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from micromiro_backend.app.core.config import get_settings
from micromiro_backend.app.main import create_app
from micromiro_backend.app.services.auth import get_auth_service, get_users_repository
from micromiro_backend.app.services.boards import (
    get_boards_repository,
    get_boards_service,
    get_elements_repository,
)
from micromiro_backend.app.services.duckdb_utils import get_warehouse_pool

_CACHED_SINGLETONS = [
    get_boards_service,
    get_auth_service,
    get_boards_repository,
    get_elements_repository,
    get_users_repository,
    get_warehouse_pool,
    get_settings,
]


@dataclass
class Account:
    user_id: int
    headers: Dict[str, str]


def _reset_singletons() -> None:
    for getter in _CACHED_SINGLETONS:
        getter.cache_clear()


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setenv("MICROMIRO_DATA_DIR__ROOT", str(tmp_path))
    monkeypatch.setenv("MICROMIRO_AUTH__JWT_SECRET", "api-test-secret")
    monkeypatch.setenv("MICROMIRO_AUTH__BCRYPT_ROUNDS", "4")
    _reset_singletons()

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    get_warehouse_pool().close()
    _reset_singletons()


@pytest.fixture
def signup(client: TestClient) -> Callable[[str], Account]:
    """Register and log a user in."""

    def _signup(name: str) -> Account:
        email = f"{name}@example.com"
        response = client.post(
            "/api/v1/register",
            json={"username": name, "email": email, "password": "pw-" + name},
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["user_id"]

        response = client.post("/api/v1/login", json={"email": email, "password": "pw-" + name})
        assert response.status_code == 200, response.text
        token = response.json()["token"]
        return Account(user_id=user_id, headers={"Authorization": f"Bearer {token}"})

    return _signup
