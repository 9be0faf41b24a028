import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fleet_booking.api.deps import get_engine
from fleet_booking.api.routers.bookings import router as bookings_router
from fleet_booking.application.use_cases.create_booking import drain_background_tasks
from fleet_booking.config import get_settings
from fleet_booking.domain.errors import (
    DomainError,
    PaymentAuthorizationError,
    PaymentIntentNotRecordedError,
)
from fleet_booking.infrastructure.db.tables import metadata

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if not settings.use_in_memory:
        # Initialize DB tables (for dev/demo purposes)
        async with get_engine().begin() as conn:
            await conn.run_sync(metadata.create_all)
    yield
    await drain_background_tasks()
    if not settings.use_in_memory:
        await get_engine().dispose()

app = FastAPI(
    title="Fleet Booking API",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.info(
        "Domain error returned to client",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )
    content = {
        "code": exc.code,
        "message": exc.message,
        "retryable": exc.retryable,
        "retry_hint": exc.retry_hint,
        "errors": [{"field": e.field, "message": e.message} for e in exc.errors],
    }
    # The booking is already committed; the caller retries payment against it
    if isinstance(exc, (PaymentAuthorizationError, PaymentIntentNotRecordedError)) and exc.booking_id:
        content["booking_id"] = exc.booking_id
        content["booking_reference"] = exc.booking_reference
    return JSONResponse(status_code=exc.status_code, content=content)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    Unhandled exceptions are logged with an error_id the client can report.
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
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
