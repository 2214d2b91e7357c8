"""Repository for boards and their permission grants."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

import duckdb

from micromiro_backend.app.services.duckdb_utils import (
    WarehousePool,
    ensure_utc,
    get_warehouse_pool,
    utcnow,
)

_BOARD_COLUMNS = "id, title, description, creator_id, is_public, created_at, updated_at"
_PERMISSION_COLUMNS = "id, board_id, user_id, can_edit, created_at, updated_at"


@dataclass
class Board:
    """Board entity."""

    id: int
    title: str
    description: Optional[str]
    creator_id: int
    is_public: bool
    created_at: datetime
    updated_at: datetime


@dataclass
class BoardPermission:
    """Explicit grant of view (and optionally edit) rights on a board."""

    id: int
    board_id: int
    user_id: int
    can_edit: bool
    created_at: datetime
    updated_at: datetime


class BoardsRepository:
    """Repository for board operations.

    Methods that take ``con`` can join a transaction opened by the caller.
    """

    def __init__(self, pool: WarehousePool) -> None:
        self.pool = pool

    def _connect(self, con: Optional[duckdb.DuckDBPyConnection] = None):
        return self.pool.connection(reuse=con)

    def _to_board(self, row) -> Board:
        return Board(
            id=row[0],
            title=row[1],
            description=row[2],
            creator_id=row[3],
            is_public=bool(row[4]),
            created_at=ensure_utc(row[5]),
            updated_at=ensure_utc(row[6]),
        )

    def _to_permission(self, row) -> BoardPermission:
        return BoardPermission(
            id=row[0],
            board_id=row[1],
            user_id=row[2],
            can_edit=bool(row[3]),
            created_at=ensure_utc(row[4]),
            updated_at=ensure_utc(row[5]),
        )

    # ========== Board CRUD ==========

    def create_board(
        self,
        creator_id: int,
        title: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> int:
        """Create a new board and return its id."""
        now = utcnow()

        with self._connect() as con:
            row = con.execute(
                """
                INSERT INTO boards (title, description, creator_id, is_public, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                RETURNING id
                """,
                [title, description, creator_id, is_public, now, now],
            ).fetchone()

        return row[0]

    def get_board(self, board_id: int) -> Optional[Board]:
        """Get board by ID."""
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_BOARD_COLUMNS} FROM boards WHERE id = ?",
                [board_id],
            ).fetchone()

        if not row:
            return None
        return self._to_board(row)

    def list_owned_boards(self, user_id: int) -> List[Board]:
        """Boards created by the user."""
        with self._connect() as con:
            rows = con.execute(
                f"SELECT {_BOARD_COLUMNS} FROM boards WHERE creator_id = ? ORDER BY id",
                [user_id],
            ).fetchall()

        return [self._to_board(row) for row in rows]

    def list_shared_boards(self, user_id: int) -> List[Board]:
        """Boards the user holds a grant on but did not create."""
        with self._connect() as con:
            rows = con.execute(
                """
                SELECT b.id, b.title, b.description, b.creator_id, b.is_public, b.created_at, b.updated_at
                FROM boards b
                JOIN board_permissions bp ON b.id = bp.board_id
                WHERE bp.user_id = ? AND b.creator_id != ?
                ORDER BY b.id
                """,
                [user_id, user_id],
            ).fetchall()

        return [self._to_board(row) for row in rows]

    def update_board(
        self,
        board_id: int,
        title: str,
        description: Optional[str],
        is_public: bool,
    ) -> bool:
        """Overwrite every mutable board field. Returns False if the board is gone."""
        with self._connect() as con:
            row = con.execute(
                """
                UPDATE boards
                SET title = ?, description = ?, is_public = ?, updated_at = ?
                WHERE id = ?
                RETURNING id
                """,
                [title, description, is_public, utcnow(), board_id],
            ).fetchone()

        return row is not None

    def delete_board(self, board_id: int, con: Optional[duckdb.DuckDBPyConnection] = None) -> bool:
        """Delete the board row only. Elements and grants are the caller's job."""
        with self._connect(con) as c:
            row = c.execute(
                "DELETE FROM boards WHERE id = ? RETURNING id",
                [board_id],
            ).fetchone()

        return row is not None

    # ========== BoardPermission CRUD ==========

    def get_permission(self, board_id: int, user_id: int) -> Optional[BoardPermission]:
        """Get the grant row for (board, user), if any."""
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_PERMISSION_COLUMNS} FROM board_permissions WHERE board_id = ? AND user_id = ?",
                [board_id, user_id],
            ).fetchone()

        if not row:
            return None
        return self._to_permission(row)

    def list_permissions(self, board_id: int) -> List[BoardPermission]:
        with self._connect() as con:
            rows = con.execute(
                f"SELECT {_PERMISSION_COLUMNS} FROM board_permissions WHERE board_id = ? ORDER BY id",
                [board_id],
            ).fetchall()

        return [self._to_permission(row) for row in rows]

    def upsert_permission(self, board_id: int, user_id: int, can_edit: bool) -> BoardPermission:
        """Create the grant, or update ``can_edit`` if one already exists."""
        now = utcnow()

        with self._connect() as con:
            row = con.execute(
                f"""
                INSERT INTO board_permissions (board_id, user_id, can_edit, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (board_id, user_id)
                DO UPDATE SET can_edit = excluded.can_edit, updated_at = excluded.updated_at
                RETURNING {_PERMISSION_COLUMNS}
                """,
                [board_id, user_id, can_edit, now, now],
            ).fetchone()

        return self._to_permission(row)

    def delete_permission(self, board_id: int, user_id: int) -> bool:
        with self._connect() as con:
            row = con.execute(
                "DELETE FROM board_permissions WHERE board_id = ? AND user_id = ? RETURNING id",
                [board_id, user_id],
            ).fetchone()

        return row is not None

    def delete_permissions_for_board(
        self, board_id: int, con: Optional[duckdb.DuckDBPyConnection] = None
    ) -> int:
        """Delete every grant on a board. Returns the number of rows removed."""
        with self._connect(con) as c:
            rows = c.execute(
                "DELETE FROM board_permissions WHERE board_id = ? RETURNING id",
                [board_id],
            ).fetchall()

        return len(rows)


@lru_cache(maxsize=1)
def get_boards_repository() -> BoardsRepository:
    """Get boards repository singleton."""
    return BoardsRepository(get_warehouse_pool())
