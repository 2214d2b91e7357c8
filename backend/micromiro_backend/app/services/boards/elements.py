"""Repository for board elements (notes, shapes) placed on the canvas."""

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

_ELEMENT_COLUMNS = (
    "id, board_id, type, content, position_x, position_y, width, height, created_at, updated_at"
)


@dataclass
class BoardElement:
    """Element entity. Position and size are integer canvas units."""

    id: int
    board_id: int
    type: str
    content: Optional[str]
    position_x: int
    position_y: int
    width: int
    height: int
    created_at: datetime
    updated_at: datetime


class ElementsRepository:
    """Element CRUD. Every lookup by id is scoped to its board."""

    def __init__(self, pool: WarehousePool) -> None:
        self.pool = pool

    def _connect(self, con: Optional[duckdb.DuckDBPyConnection] = None):
        return self.pool.connection(reuse=con)

    def _to_element(self, row) -> BoardElement:
        return BoardElement(
            id=row[0],
            board_id=row[1],
            type=row[2],
            content=row[3],
            position_x=row[4],
            position_y=row[5],
            width=row[6],
            height=row[7],
            created_at=ensure_utc(row[8]),
            updated_at=ensure_utc(row[9]),
        )

    def create_element(
        self,
        board_id: int,
        element_type: str,
        content: Optional[str] = None,
        position_x: int = 0,
        position_y: int = 0,
        width: int = 0,
        height: int = 0,
    ) -> int:
        """Create an element and return its id."""
        now = utcnow()

        with self._connect() as con:
            row = con.execute(
                """
                INSERT INTO board_elements (
                    board_id, type, content, position_x, position_y, width, height,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING id
                """,
                [board_id, element_type, content, position_x, position_y, width, height, now, now],
            ).fetchone()

        return row[0]

    def get_element(self, board_id: int, element_id: int) -> Optional[BoardElement]:
        """Get an element, or None if it is absent or lives on another board."""
        with self._connect() as con:
            row = con.execute(
                f"SELECT {_ELEMENT_COLUMNS} FROM board_elements WHERE id = ? AND board_id = ?",
                [element_id, board_id],
            ).fetchone()

        if not row:
            return None
        return self._to_element(row)

    def list_elements(self, board_id: int) -> List[BoardElement]:
        """List all elements of a board in storage order."""
        with self._connect() as con:
            rows = con.execute(
                f"SELECT {_ELEMENT_COLUMNS} FROM board_elements WHERE board_id = ? ORDER BY id",
                [board_id],
            ).fetchall()

        return [self._to_element(row) for row in rows]

    def update_element(
        self,
        board_id: int,
        element_id: int,
        element_type: str,
        content: Optional[str],
        position_x: int,
        position_y: int,
        width: int,
        height: int,
    ) -> bool:
        """Overwrite every mutable field. Returns False if nothing matched."""
        with self._connect() as con:
            row = con.execute(
                """
                UPDATE board_elements
                SET type = ?, content = ?, position_x = ?, position_y = ?,
                    width = ?, height = ?, updated_at = ?
                WHERE id = ? AND board_id = ?
                RETURNING id
                """,
                [
                    element_type,
                    content,
                    position_x,
                    position_y,
                    width,
                    height,
                    utcnow(),
                    element_id,
                    board_id,
                ],
            ).fetchone()

        return row is not None

    def delete_element(self, board_id: int, element_id: int) -> bool:
        with self._connect() as con:
            row = con.execute(
                "DELETE FROM board_elements WHERE id = ? AND board_id = ? RETURNING id",
                [element_id, board_id],
            ).fetchone()

        return row is not None

    def delete_elements_for_board(
        self, board_id: int, con: Optional[duckdb.DuckDBPyConnection] = None
    ) -> int:
        """Delete every element on a board. Returns the number of rows removed."""
        with self._connect(con) as c:
            rows = c.execute(
                "DELETE FROM board_elements WHERE board_id = ? RETURNING id",
                [board_id],
            ).fetchall()

        return len(rows)


@lru_cache(maxsize=1)
def get_elements_repository() -> ElementsRepository:
    """Get elements repository singleton."""
    return ElementsRepository(get_warehouse_pool())
