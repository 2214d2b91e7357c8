from __future__ import annotations

import logging
import queue
from contextlib import contextmanager
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

import duckdb

from micromiro_backend.app.core.config import get_settings
from micromiro_backend.app.core.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time as a naive value, the form stored in TIMESTAMP columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def ensure_utc(value: datetime) -> datetime:
    """Ensure datetime has UTC timezone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class WarehousePool:
    """Bounded pool of DuckDB cursors sharing one database instance.

    DuckDB allows a single writer process per file, so the pool opens the
    database once and hands out ``cursor()`` connections, each usable from its
    own worker thread. A connection is checked out for one unit of work and
    always returned, including on error paths.
    """

    def __init__(self, path: Path | str, size: int = 8, timeout: float = 10.0) -> None:
        self.path = path
        self.size = size
        self.timeout = timeout

        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        self._root = duckdb.connect(str(path))
        self._idle: queue.LifoQueue[duckdb.DuckDBPyConnection] = queue.LifoQueue(maxsize=size)
        for _ in range(size):
            self._idle.put(self._root.cursor())
        self._closed = False

    @contextmanager
    def connection(
        self,
        reuse: Optional[duckdb.DuckDBPyConnection] = None,
        timeout: Optional[float] = None,
    ) -> Iterator[duckdb.DuckDBPyConnection]:
        """Check out a connection for the duration of the block.

        ``reuse`` lets a repository call join a caller's open transaction
        instead of taking a second connection.
        """
        if reuse is not None:
            yield reuse
            return

        if self._closed:
            raise StorageUnavailableError()

        wait = self.timeout if timeout is None else timeout
        try:
            con = self._idle.get(timeout=wait)
        except queue.Empty:
            logger.error("warehouse pool exhausted size=%s waited=%.2fs", self.size, wait)
            raise StorageUnavailableError() from None

        try:
            yield con
        finally:
            if self._closed:
                con.close()
            else:
                self._idle.put(con)

    @contextmanager
    def transaction(self, timeout: Optional[float] = None) -> Iterator[duckdb.DuckDBPyConnection]:
        """Run the block in one transaction; any exception rolls everything back."""
        with self.connection(timeout=timeout) as con:
            con.begin()
            try:
                yield con
            except BaseException:
                con.rollback()
                raise
            con.commit()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while True:
            try:
                self._idle.get_nowait().close()
            except queue.Empty:
                break
        self._root.close()


@lru_cache(maxsize=1)
def get_warehouse_pool() -> WarehousePool:
    """Get the process-wide warehouse pool."""
    settings = get_settings()
    return WarehousePool(
        settings.duckdb.path,
        size=settings.duckdb.pool_size,
        timeout=settings.duckdb.pool_timeout_seconds,
    )
