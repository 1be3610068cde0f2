"""Tests for the aiosqlite connection pool."""

import asyncio
from pathlib import Path

import pytest

from src.infrastructure.storage.sqlite.connection import ConnectionPool


@pytest.fixture
async def pool(tmp_path: Path):
    pool = ConnectionPool(tmp_path / "nested" / "test.db", pool_size=2)
    yield pool
    await pool.close()


def test_pool_size_is_at_least_one(tmp_path: Path):
    assert ConnectionPool(tmp_path / "test.db", pool_size=0).pool_size == 1


async def test_connections_open_lazily(pool: ConnectionPool):
    """Nothing is opened until a caller needs it; the directory is created then."""
    assert pool.open_connections == 0

    async with pool.acquire():
        pass
    async with pool.acquire():
        pass

    assert pool.open_connections == 1
    assert pool.db_path.parent.exists()


async def test_warm_opens_every_connection(pool: ConnectionPool):
    await pool.warm()
    assert pool.open_connections == 2


async def test_never_exceeds_pool_size(pool: ConnectionPool):
    """A third concurrent borrower waits for a connection to come back."""
    entered = asyncio.Event()
    release = asyncio.Event()

    async def hold():
        async with pool.acquire():
            entered.set()
            await release.wait()

    holders = [asyncio.create_task(hold()) for _ in range(2)]
    await entered.wait()
    await asyncio.sleep(0)

    waiter = asyncio.create_task(pool._checkout())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    release.set()
    await asyncio.gather(*holders)
    conn = await asyncio.wait_for(waiter, timeout=1)
    pool._idle.put_nowait(conn)
    assert pool.open_connections == 2


async def test_pragmas_applied(pool: ConnectionPool):
    async with pool.acquire() as conn:
        cursor = await conn.execute("PRAGMA foreign_keys")
        assert (await cursor.fetchone())[0] == 1
        cursor = await conn.execute("PRAGMA journal_mode")
        assert (await cursor.fetchone())[0] == "wal"


async def test_transaction_commits(pool: ConnectionPool):
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE t (v INTEGER)")
        await conn.execute("INSERT INTO t VALUES (1)")

    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM t")
        assert (await cursor.fetchone())[0] == 1


async def test_transaction_rolls_back_on_error(pool: ConnectionPool):
    async with pool.transaction() as conn:
        await conn.execute("CREATE TABLE t (v INTEGER)")

    with pytest.raises(RuntimeError):
        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO t VALUES (1)")
            raise RuntimeError("boom")

    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM t")
        assert (await cursor.fetchone())[0] == 0


async def test_closed_pool_reopens_on_demand(pool: ConnectionPool):
    await pool.warm()
    await pool.close()
    assert pool.open_connections == 0

    async with pool.acquire() as conn:
        cursor = await conn.execute("SELECT 1")
        assert (await cursor.fetchone())[0] == 1
