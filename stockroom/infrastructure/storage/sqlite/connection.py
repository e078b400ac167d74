"""
Async SQLite connection pool with aiosqlite.

Ledger writes run inside transaction(), which takes the database write
lock up front (BEGIN IMMEDIATE). The compare-and-set quantity update and
its movement insert therefore commit together or not at all.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockroom.config import get_logger, get_settings
from stockroom.core.exceptions import PersistenceError

logger = get_logger(__name__)

# Applied to every pooled connection, in order
CONNECTION_PRAGMAS: tuple[str, ...] = (
    "journal_mode=WAL",
    "synchronous=NORMAL",
    # ON DELETE SET NULL on stock_items.category_id depends on this
    "foreign_keys=ON",
)


class ConnectionPool:
    """
    Fixed-size pool of aiosqlite connections to one database file.

    Connections are opened on the first acquire and handed out through an
    asyncio queue, so at most pool_size operations touch the file at once.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._opened: list[aiosqlite.Connection] = []
        self._open_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return bool(self._opened)

    @property
    def idle_connections(self) -> int:
        return self._idle.qsize()

    async def initialize(self) -> None:
        async with self._open_lock:
            if self._opened:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open_connection()
                self._opened.append(conn)
                self._idle.put_nowait(conn)

        logger.info(
            "connection_pool_initialized",
            db_path=str(self.db_path),
            pool_size=self.pool_size,
            busy_timeout_ms=self.busy_timeout,
        )

    async def _open_connection(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(f"PRAGMA {pragma}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads; it goes back to the pool on exit."""
        if not self._opened:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(
        self, operation: str = "transaction"
    ) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a write transaction.

        Commits when the block exits normally and rolls back otherwise.
        aiosqlite errors (including a lock wait that outlasts busy_timeout)
        surface as PersistenceError; anything else raised in the block, such
        as StaleQuantityError, propagates unchanged after the rollback.
        """
        async with self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
                yield conn
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.error("transaction_rolled_back", operation=operation, error=str(e))
                raise PersistenceError(operation, str(e)) from e
            except BaseException:
                await conn.rollback()
                raise

    async def ping(self) -> float:
        """Run a trivial query and return its latency in milliseconds."""
        start = time.perf_counter()
        async with self.acquire() as conn:
            await conn.execute("SELECT 1")
        return (time.perf_counter() - start) * 1000

    async def close(self) -> None:
        async with self._open_lock:
            opened, self._opened = self._opened, []
            for conn in opened:
                await conn.close()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
        logger.info("connection_pool_closed", closed=len(opened))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global pool for the configured database."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(
    operation: str = "transaction",
) -> AsyncIterator[aiosqlite.Connection]:
    """Write transaction on the global pool; operation names it in errors and logs."""
    pool = await get_pool()
    async with pool.transaction(operation) as conn:
        yield conn
