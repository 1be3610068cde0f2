"""
aiosqlite connection pool.

Connections are opened on demand up to ``pool_size`` and reused afterwards.
Writes go through ``transaction()``, which starts with ``BEGIN IMMEDIATE`` so
concurrent senders queue on SQLite's write lock at the start of the
transaction rather than failing with SQLITE_BUSY at commit.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Bounded set of aiosqlite connections to one database file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = max(1, pool_size)
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._all: list[aiosqlite.Connection] = []
        self._opening = asyncio.Lock()

    @property
    def open_connections(self) -> int:
        return len(self._all)

    async def _open(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        for pragma in _PRAGMAS:
            await conn.execute(pragma)
        conn.row_factory = aiosqlite.Row
        self._all.append(conn)
        logger.debug("sqlite_connection_opened", db_path=str(self.db_path), open=len(self._all))
        return conn

    async def warm(self) -> None:
        """Open every connection now so startup surfaces path or lock problems."""
        async with self._opening:
            while len(self._all) < self.pool_size:
                self._idle.put_nowait(await self._open())
        logger.info("connection_pool_ready", db_path=str(self.db_path), size=self.pool_size)

    async def _checkout(self) -> aiosqlite.Connection:
        if self._idle.empty():
            async with self._opening:
                if len(self._all) < self.pool_size:
                    return await self._open()
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads or autocommit statements."""
        conn = await self._checkout()
        try:
            yield conn
        finally:
            if conn in self._all:
                self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection inside ``BEGIN IMMEDIATE``; commit or roll back on exit."""
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def close(self) -> None:
        async with self._opening:
            connections, self._all = self._all, []
            self._idle = asyncio.Queue()
            for conn in connections:
                await conn.close()
        if connections:
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool for the configured database, warmed on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await pool.warm()
        _pool = pool
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        pool, _pool = _pool, None
        await pool.close()


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
