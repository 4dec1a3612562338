from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
import logging

from api.src.db.database import get_db
from api.src.services.queue import get_redis_client, get_queue_length

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

async def check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
        return "healthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return f"unhealthy: {e}"

async def check_redis() -> str:
    client = await get_redis_client()
    try:
        await client.ping()
        return "healthy"
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return f"unhealthy: {e}"
    finally:
        await client.close()

@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "pulse-api"}

@router.get("/health/db")
async def db_health_check(db: AsyncSession = Depends(get_db)):
    status = await check_database(db)
    return {"status": status.split(":")[0], "database": "connected" if status == "healthy" else status}

@router.get("/health/redis")
async def redis_health_check():
    status = await check_redis()
    return {"status": status.split(":")[0], "redis": "connected" if status == "healthy" else status}

@router.get("/health/queue")
async def queue_health_check():
    try:
        return {"status": "healthy", "queue_length": await get_queue_length()}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

@router.get("/health/all")
async def full_health_check(db: AsyncSession = Depends(get_db)):
    """Combined health check for the database, Redis and the job queue."""
    services = {
        "api": "healthy",
        "database": await check_database(db),
        "redis": await check_redis(),
    }

    queue_length = None
    if services["redis"] == "healthy":
        queue_length = await get_queue_length()

    overall = "healthy" if all(v == "healthy" for v in services.values()) else "degraded"

    return {"status": overall, "services": services, "queue_length": queue_length}
