"""Tests for the warehouse connection pool and schema bootstrap."""

from __future__ import annotations

from pathlib import Path

import duckdb
import pytest

from micromiro_backend.app.core.errors import StorageUnavailableError
from micromiro_backend.app.services.duckdb_utils import WarehousePool
from micromiro_backend.app.services.schema import ensure_schema


@pytest.fixture
def small_pool(tmp_path: Path):
    pool = WarehousePool(tmp_path / "nested" / "small.duckdb", size=1, timeout=0.05)
    yield pool
    pool.close()


class TestCheckout:
    def test_creates_parent_directory(self, small_pool, tmp_path):
        assert (tmp_path / "nested").is_dir()

    def test_exhausted_pool_times_out(self, small_pool):
        with small_pool.connection():
            with pytest.raises(StorageUnavailableError):
                with small_pool.connection():
                    pass

    def test_connection_returned_after_error(self, small_pool):
        with pytest.raises(ValueError):
            with small_pool.connection():
                raise ValueError("boom")

        with small_pool.connection() as con:
            assert con.execute("SELECT 1").fetchone() == (1,)

    def test_reuse_does_not_take_another_connection(self, small_pool):
        with small_pool.connection() as con:
            with small_pool.connection(reuse=con) as joined:
                assert joined is con

    def test_closed_pool_refuses_checkout(self, tmp_path):
        pool = WarehousePool(tmp_path / "closed.duckdb", size=1)
        pool.close()

        with pytest.raises(StorageUnavailableError):
            with pool.connection():
                pass

    def test_checked_out_connection_closed_with_pool(self, tmp_path):
        pool = WarehousePool(tmp_path / "busy.duckdb", size=1)

        with pool.connection() as con:
            pool.close()

        assert pool._idle.empty()
        with pytest.raises(duckdb.Error):
            con.execute("SELECT 1")


class TestTransaction:
    def test_rollback_on_error(self, small_pool):
        with small_pool.connection() as con:
            con.execute("CREATE TABLE t (v INTEGER)")

        with pytest.raises(RuntimeError):
            with small_pool.transaction() as con:
                con.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("abort")

        with small_pool.connection() as con:
            assert con.execute("SELECT COUNT(*) FROM t").fetchone() == (0,)

    def test_commit_on_success(self, small_pool):
        with small_pool.connection() as con:
            con.execute("CREATE TABLE t (v INTEGER)")

        with small_pool.transaction() as con:
            con.execute("INSERT INTO t VALUES (1)")

        with small_pool.connection() as con:
            assert con.execute("SELECT COUNT(*) FROM t").fetchone() == (1,)


class TestSchema:
    def test_idempotent(self, small_pool):
        ensure_schema(small_pool)
        ensure_schema(small_pool)

        with small_pool.connection() as con:
            tables = {
                row[0]
                for row in con.execute(
                    "SELECT table_name FROM information_schema.tables"
                ).fetchall()
            }
            roles = con.execute("SELECT id, name FROM roles").fetchall()

        assert {"users", "roles", "boards", "board_permissions", "board_elements"} <= tables
        assert roles == [(1, "user")]
