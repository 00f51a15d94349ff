from pathlib import Path

import asyncpg

from config import get_config
from utils.logging_ut import get_logger

## Set by init_database(), cleared by close_database()
POOL = None

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "install" / "schema.sql"

logger = get_logger("db")


async def init_database(apply_schema=None):
    global POOL
    cfg = get_config()
    POOL = await asyncpg.create_pool(
        dsn=cfg["DATABASE_URL"],
        min_size=cfg["DB_POOL_MIN_SIZE"],
        max_size=cfg["DB_POOL_MAX_SIZE"],
    )
    logger.info("Database pool ready (%d-%d connections)", cfg["DB_POOL_MIN_SIZE"], cfg["DB_POOL_MAX_SIZE"])
    if apply_schema is None:
        apply_schema = cfg["APPLY_SCHEMA_ON_START"]
    if apply_schema:
        await apply_schema_file(SCHEMA_PATH)


async def close_database():
    global POOL
    if POOL is None:
        return
    await POOL.close()
    POOL = None
    logger.info("Database pool closed")


async def apply_schema_file(path: Path):
    """Run an idempotent DDL script; a missing file is logged and skipped."""
    if not path.exists():
        logger.warning("Schema file %s not found, skipping", path)
        return
    sql = path.read_text(encoding="utf-8")
    if not sql.strip():
        return
    async with get_pool().acquire() as conn:
        await conn.execute(sql)
    logger.info("Schema applied from %s", path.name)


def get_pool():
    if POOL is None:
        raise RuntimeError("Database pool is not initialised")
    return POOL
