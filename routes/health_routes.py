from fastapi import APIRouter

import db
from config import get_config

router = APIRouter()


@router.get("/health")
async def health():
    cfg = get_config()
    status = {
        "status": "ok",
        "database": "not initialised" if db.POOL is None else "ok",
        "ai": "configured" if cfg["GEMINI_API_KEY"] else "not configured",
    }
    if db.POOL is not None:
        try:
            async with db.POOL.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except Exception as e:
            status["status"] = "degraded"
            status["database"] = f"error: {str(e)[:80]}"
    return status
