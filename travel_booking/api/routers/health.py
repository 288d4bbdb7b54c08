"""
Health check endpoints for monitoring and orchestration.

- /health: liveness, always 200 while the process runs
- /health/db: database connectivity (503 when unreachable)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from travel_booking.api.deps import get_sessionmaker
from travel_booking.config import Settings, get_settings
from travel_booking.infrastructure.db.engine import session_scope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": "travel-booking-api"}


@router.get("/health/db")
async def health_check_db(settings: Settings = Depends(get_settings)):
    """
    Database connectivity check.

    Reports ``in_memory`` when the service runs without a database.
    """
    if settings.use_in_memory:
        return {"status": "healthy", "component": "database", "mode": "in_memory"}
    try:
        async with session_scope(get_sessionmaker()) as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
        return {"status": "healthy", "component": "database"}
    except Exception as e:
        logger.error("Database health check failed", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )
