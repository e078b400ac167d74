"""Unit tests for SQLite connection pool."""

from pathlib import Path

import aiosqlite
import pytest

from stockroom.core.exceptions import PersistenceError, ValidationError
from stockroom.infrastructure.storage.sqlite import connection as conn_module
from stockroom.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)


@pytest.fixture
async def pool(tmp_path: Path):
    pool = ConnectionPool(tmp_path / "pool.db", pool_size=2)
    await pool.initialize()
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v INTEGER NOT NULL)")
    try:
        yield pool
    finally:
        await pool.close()


async def _count(pool: ConnectionPool) -> int:
    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM t")
        return (await cursor.fetchone())[0]


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool.initialized is False

    async def test_initialize_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        try:
            assert db_path.parent.exists()
            assert pool.initialized is True
        finally:
            await pool.close()

        assert pool.initialized is False

    async def test_foreign_keys_enabled(self, pool):
        async with pool.acquire() as conn:
            cursor = await conn.execute("PRAGMA foreign_keys")
            assert (await cursor.fetchone())[0] == 1

    async def test_row_factory(self, pool):
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT 1 AS one")
            row = await cursor.fetchone()
        assert row["one"] == 1

    async def test_ping(self, pool):
        assert await pool.ping() >= 0
        assert pool.idle_connections == 2


class TestTransaction:
    async def test_connection_held_for_block(self, pool):
        async with pool.transaction():
            assert pool.idle_connections == 1
        assert pool.idle_connections == 2

    async def test_commit(self, pool):
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO t (v) VALUES (1)")

        assert await _count(pool) == 1

    async def test_database_error_rolls_back_whole_transaction(self, pool):
        with pytest.raises(PersistenceError) as exc_info:
            async with pool.transaction("two_inserts") as conn:
                await conn.execute("INSERT INTO t (v) VALUES (1)")
                await conn.execute("INSERT INTO t (v) VALUES (NULL)")

        assert exc_info.value.details["operation"] == "two_inserts"
        assert isinstance(exc_info.value.__cause__, aiosqlite.IntegrityError)
        assert await _count(pool) == 0

    async def test_domain_error_propagates_unchanged(self, pool):
        with pytest.raises(ValidationError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t (v) VALUES (1)")
                raise ValidationError("quantity", "must be greater than zero", 0)

        assert await _count(pool) == 0

    async def test_connection_returned_after_error(self, pool):
        for _ in range(3):
            with pytest.raises(PersistenceError):
                async with pool.transaction() as conn:
                    await conn.execute("INSERT INTO missing_table VALUES (1)")

        assert await _count(pool) == 0


class TestGlobalPool:
    async def test_get_pool_uses_settings(self, migrated_db: Path):
        pool = await get_pool()

        assert pool.db_path == migrated_db
        assert pool.pool_size == 2
        assert await get_pool() is pool

    async def test_helpers(self, migrated_db: Path):
        async with get_transaction("insert_category") as conn:
            await conn.execute(
                "INSERT INTO categories (name, created_at) VALUES ('Tools', '2024')"
            )
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT name FROM categories")
            assert (await cursor.fetchone())["name"] == "Tools"

    async def test_close_pool_resets_global(self, migrated_db: Path):
        await get_pool()
        await close_pool()
        assert conn_module._pool is None
