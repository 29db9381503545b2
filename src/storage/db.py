"""
PostgreSQL lifecycle for the subjects/materials record store.

One asyncpg pool per process, opened at startup (which also applies
schema.sql) and handed to PostgresRecordStore. Queries go through the store,
not through this module.
"""

import logging
import pathlib
from typing import Optional

import asyncpg

from study_schedule import config

logger = logging.getLogger(__name__)

SCHEMA_PATH = pathlib.Path(__file__).parent / "schema.sql"
TABLES = ("subjects", "materials")

_pool: Optional[asyncpg.Pool] = None


async def open_pool(dsn: Optional[str] = None, max_size: int = 5) -> asyncpg.Pool:
    """Connect and make sure both tables exist. Idempotent."""
    global _pool
    if _pool is not None:
        return _pool

    dsn = dsn or config.DATABASE_URL
    if not dsn:
        raise RuntimeError("DATABASE_URL is not configured")

    _pool = await asyncpg.create_pool(dsn, min_size=1, max_size=max_size, command_timeout=30.0)
    try:
        await apply_schema(_pool)
    except (OSError, asyncpg.PostgresError):
        await close_pool()
        raise

    logger.info(f"Record store pool ready (max_size={max_size})")
    return _pool


async def apply_schema(pool: asyncpg.Pool) -> None:
    # schema.sql only uses IF NOT EXISTS, so this is safe on every start
    sql = SCHEMA_PATH.read_text()
    async with pool.acquire() as conn:
        await conn.execute(sql)
    logger.info(f"Applied {SCHEMA_PATH.name}")


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("Record store pool closed")


async def health_check(pool: asyncpg.Pool) -> dict:
    """Row counts per table; any database error reports the store as unhealthy."""
    try:
        async with pool.acquire() as conn:
            counts = {t: await conn.fetchval(f"SELECT count(*) FROM {t}") for t in TABLES}
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Record store health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "records": counts}
