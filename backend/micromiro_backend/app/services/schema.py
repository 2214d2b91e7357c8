"""Warehouse schema: five tables plus their id sequences.

Every statement is idempotent so the schema can be applied on each startup.
Relations are documented per column; they are not declared as FOREIGN KEY
constraints because DuckDB refuses to delete a referenced row inside the same
transaction that removed its referencing rows, which the board delete needs.
"""

from __future__ import annotations

import logging

from .duckdb_utils import WarehousePool

logger = logging.getLogger(__name__)

DEFAULT_ROLE_ID = 1
DEFAULT_ROLE_NAME = "user"

_DDL_STATEMENTS = [
    "CREATE SEQUENCE IF NOT EXISTS users_id_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS boards_id_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS board_permissions_id_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS board_elements_id_seq START 1",
    """
    CREATE TABLE IF NOT EXISTS roles (
        id INTEGER PRIMARY KEY,
        name VARCHAR NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY DEFAULT nextval('users_id_seq'),
        username VARCHAR NOT NULL UNIQUE,
        email VARCHAR NOT NULL UNIQUE,
        password VARCHAR NOT NULL,
        role_id INTEGER,                -- roles.id
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS boards (
        id INTEGER PRIMARY KEY DEFAULT nextval('boards_id_seq'),
        title VARCHAR NOT NULL,
        description VARCHAR,
        creator_id INTEGER NOT NULL,    -- users.id
        is_public BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS board_permissions (
        id INTEGER PRIMARY KEY DEFAULT nextval('board_permissions_id_seq'),
        board_id INTEGER NOT NULL,      -- boards.id
        user_id INTEGER NOT NULL,       -- users.id
        can_edit BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL,
        UNIQUE (board_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS board_elements (
        id INTEGER PRIMARY KEY DEFAULT nextval('board_elements_id_seq'),
        board_id INTEGER NOT NULL,      -- boards.id
        type VARCHAR NOT NULL,
        content VARCHAR,
        position_x INTEGER NOT NULL DEFAULT 0,
        position_y INTEGER NOT NULL DEFAULT 0,
        width INTEGER NOT NULL DEFAULT 0,
        height INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    )
    """,
]


def ensure_schema(pool: WarehousePool) -> None:
    """Create missing tables and seed the default role."""
    with pool.connection() as con:
        for statement in _DDL_STATEMENTS:
            con.execute(statement)
        con.execute(
            "INSERT INTO roles (id, name) VALUES (?, ?) ON CONFLICT DO NOTHING",
            [DEFAULT_ROLE_ID, DEFAULT_ROLE_NAME],
        )
    logger.info("Warehouse schema ready path=%s", pool.path)
