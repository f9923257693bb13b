"""asyncpg connection pool for the health data store.

Every connection is handed out inside a READ ONLY transaction: nothing in
this service writes to the store.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import asyncpg

from src.config import Settings, get_settings

logger = logging.getLogger("datasources.db")

# Module-level connection pool, initialized once at app startup
_pool: asyncpg.Pool | None = None


async def init_pool(settings: Settings | None = None) -> asyncpg.Pool:
    """Create the asyncpg connection pool. Call once at app startup."""
    global _pool
    s = settings or get_settings()
    _pool = await asyncpg.create_pool(
        s.database_url,
        min_size=s.db_pool_min_size,
        max_size=s.db_pool_max_size,
        command_timeout=s.db_command_timeout_seconds,
    )
    logger.info(
        "Database pool initialized (min=%d, max=%d)",
        s.db_pool_min_size,
        s.db_pool_max_size,
    )
    return _pool


async def close_pool() -> None:
    """Drain the pool. Call at app shutdown."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized — call init_pool() first")
    return _pool


@asynccontextmanager
async def get_connection(
    pool: asyncpg.Pool | None = None,
) -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire a connection inside a read-only transaction.

    Usage::

        async with get_connection() as conn:
            rows = await conn.fetch("SELECT * FROM health_records WHERE metric_type = $1", "steps")
    """
    pool = pool or get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction(readonly=True):
            yield conn


async def fetch(query: str, *args: Any, pool: asyncpg.Pool | None = None) -> list[asyncpg.Record]:
    """Fetch rows in a read-only transaction."""
    async with get_connection(pool) as conn:
        return await conn.fetch(query, *args)


async def fetchval(query: str, *args: Any, pool: asyncpg.Pool | None = None) -> Any:
    """Fetch a single value in a read-only transaction."""
    async with get_connection(pool) as conn:
        return await conn.fetchval(query, *args)
