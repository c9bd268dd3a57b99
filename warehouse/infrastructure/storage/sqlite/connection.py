"""
Async SQLite connection pool for the ledger database.

Every connection runs in WAL mode with foreign keys on, so readers never block
the single writer. Ledger writes that must not interleave (FIFO exits) take
the write lock up front through ``immediate_transaction``.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from warehouse.config import get_logger, get_settings
from warehouse.core.exceptions import DatabaseError

if TYPE_CHECKING:
    from warehouse.config.settings import StorageSettings

logger = get_logger(__name__)

CONNECTION_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """
    Fixed-size pool of aiosqlite connections.

    Connections are opened lazily on first use and handed out through an
    asyncio queue; callers wait when all of them are busy.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, storage: "StorageSettings") -> "ConnectionPool":
        return cls(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )

    @property
    def in_use(self) -> int:
        """Connections currently checked out."""
        if not self._initialized:
            return 0
        return len(self._connections) - self._pool.qsize()

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                await self._pool.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=self.db_path,
                pool_size=self.pool_size,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool when the block exits."""
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            await self._pool.put(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Deferred transaction: commit on success, roll back on any exception."""
        async with self._transactional(immediate=False) as conn:
            yield conn

    @asynccontextmanager
    async def immediate_transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Transaction that holds SQLite's write lock from its first statement.

        Stock versions read inside the block stay valid until commit.

        Raises:
            DatabaseError: If the lock is still held by another writer once
                ``busy_timeout`` has elapsed
        """
        async with self._transactional(immediate=True) as conn:
            yield conn

    @asynccontextmanager
    async def _transactional(self, immediate: bool) -> AsyncIterator[aiosqlite.Connection]:
        async with self.acquire() as conn:
            if immediate:
                try:
                    await conn.execute("BEGIN IMMEDIATE")
                except aiosqlite.OperationalError as e:
                    logger.warning(
                        "write_lock_timeout",
                        db_path=self.db_path,
                        busy_timeout_ms=self.busy_timeout,
                    )
                    raise DatabaseError("begin immediate", str(e)) from e
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def close(self) -> None:
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._initialized = False
            logger.info("connection_pool_closed", db_path=self.db_path)


# Process-wide pool, created from StorageSettings on first use
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_settings(get_settings().storage)
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Read-only work against the global pool."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn


@asynccontextmanager
async def get_immediate_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.immediate_transaction() as conn:
        yield conn
