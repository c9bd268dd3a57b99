"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

import warehouse.infrastructure.storage.sqlite.connection as conn_module
from warehouse.core.exceptions import DatabaseError
from warehouse.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_immediate_transaction,
    get_pool,
)


@pytest.fixture
async def scratch_pool(temp_db_path: Path):
    """Pool over a database holding a single scratch table."""
    pool = ConnectionPool(temp_db_path, pool_size=2, busy_timeout=1000)
    await pool.initialize()
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE scratch (value TEXT NOT NULL)")
    yield pool
    await pool.close()


async def count_rows(pool: ConnectionPool) -> int:
    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM scratch")
        row = await cursor.fetchone()
        return row[0]


class TestConnectionPoolInit:
    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)

        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False

    async def test_initialize_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "dir" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()

        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        await pool.close()

    async def test_connection_pragmas(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)

        async with pool.acquire() as conn:
            cursor = await conn.execute("PRAGMA journal_mode")
            assert (await cursor.fetchone())[0] == "wal"
            cursor = await conn.execute("PRAGMA foreign_keys")
            assert (await cursor.fetchone())[0] == 1
            assert conn.row_factory is aiosqlite.Row

        await pool.close()


class TestConnectionPoolAcquire:
    async def test_acquire_blocks_when_pool_exhausted(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire():
            with pytest.raises(asyncio.TimeoutError):
                async with asyncio.timeout(0.1):
                    async with pool.acquire():
                        pass

        await pool.close()

    async def test_in_use_counts_borrowed_connections(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        assert pool.in_use == 0

        async with pool.acquire():
            assert pool.in_use == 1
            async with pool.acquire():
                assert pool.in_use == 2

        assert pool.in_use == 0
        await pool.close()

    async def test_connection_returned_after_exception(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        with pytest.raises(RuntimeError):
            async with pool.acquire():
                raise RuntimeError("boom")

        assert pool._pool.qsize() == 1
        await pool.close()


class TestTransactions:
    async def test_transaction_commits(self, scratch_pool: ConnectionPool):
        async with scratch_pool.transaction() as conn:
            await conn.execute("INSERT INTO scratch (value) VALUES ('a')")

        assert await count_rows(scratch_pool) == 1

    async def test_transaction_rolls_back(self, scratch_pool: ConnectionPool):
        with pytest.raises(ValueError):
            async with scratch_pool.transaction() as conn:
                await conn.execute("INSERT INTO scratch (value) VALUES ('a')")
                raise ValueError("force rollback")

        assert await count_rows(scratch_pool) == 0

    async def test_immediate_transaction_commits(self, scratch_pool: ConnectionPool):
        async with scratch_pool.immediate_transaction() as conn:
            assert conn.in_transaction
            await conn.execute("INSERT INTO scratch (value) VALUES ('a')")

        assert await count_rows(scratch_pool) == 1

    async def test_immediate_transaction_rolls_back(self, scratch_pool: ConnectionPool):
        with pytest.raises(ValueError):
            async with scratch_pool.immediate_transaction() as conn:
                await conn.execute("INSERT INTO scratch (value) VALUES ('a')")
                raise ValueError("force rollback")

        assert await count_rows(scratch_pool) == 0

    async def test_write_lock_timeout_raises_database_error(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2, busy_timeout=50)

        async with pool.immediate_transaction():
            with pytest.raises(DatabaseError) as exc_info:
                async with pool.immediate_transaction():
                    pass

        assert exc_info.value.details["operation"] == "begin immediate"
        assert pool.in_use == 0
        await pool.close()


class TestGlobalPool:
    async def test_get_pool_creates_and_reuses(self, mock_settings):
        conn_module._pool = None

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            pool1 = await get_pool()
            pool2 = await get_pool()

            assert pool1 is pool2
            assert pool1.db_path == mock_settings.storage.db_path
            assert pool1.pool_size == 2

            await close_pool()

        assert conn_module._pool is None

    async def test_close_pool_safe_when_none(self):
        conn_module._pool = None

        await close_pool()

    async def test_helpers_use_global_pool(self, mock_settings):
        conn_module._pool = None

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            async with get_connection() as conn:
                cursor = await conn.execute("SELECT 1")
                assert (await cursor.fetchone())[0] == 1

            async with get_immediate_transaction() as conn:
                await conn.execute("CREATE TABLE t (x INTEGER)")

            await close_pool()
