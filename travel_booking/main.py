import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from travel_booking.api.dependencies import build_scheduler
from travel_booking.api.deps import get_engine
from travel_booking.api.routers.bookings import router as bookings_router
from travel_booking.api.routers.health import router as health_router
from travel_booking.api.routers.notifications import router as notifications_router
from travel_booking.api.routers.payments import router as payments_router
from travel_booking.api.routers.webhooks import router as webhooks_router
from travel_booking.config import get_settings
from travel_booking.domain.errors import DomainError
from travel_booking.infrastructure.db.tables import metadata

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = None
    if not settings.use_in_memory:
        engine = get_engine()
        # Initialize DB tables (for dev/demo purposes)
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = build_scheduler(settings)
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    if engine is not None:
        await engine.dispose()


app = FastAPI(
    title="Travel Booking API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(
            "Domain error",
            extra={"code": exc.code, "path": request.url.path, "detail": exc.message},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Unhandled exceptions are logged with an error_id and returned as a
    generic 500, without exposing internals to the client.
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        },
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(payments_router, tags=["Payments"])
app.include_router(webhooks_router, tags=["Webhooks"])
app.include_router(notifications_router, tags=["Notifications"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
