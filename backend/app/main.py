"""FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.routes.bookings import router as bookings_router
from backend.app.api.routes.catalog import router as catalog_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.bookings.errors import AvailabilityConflict, BookingError
from backend.app.config import get_settings
from backend.app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

# HTTP status for each domain error code
STATUS_BY_CODE = {
    "validation_error": 400,
    "not_found": 404,
    "availability_conflict": 409,
    "invalid_transition": 409,
    "tier_limit_exceeded": 403,
    "transport_error": 502,
}

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(bookings_router)
app.include_router(catalog_router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render domain errors as {code, detail}."""
    body: dict[str, object] = {
        "code": exc.code,
        "detail": exc.detail,
        "recoverable": exc.recoverable,
    }
    if isinstance(exc, AvailabilityConflict):
        body["dates"] = exc.dates
    status_code = STATUS_BY_CODE.get(exc.code, 400)
    logger.info(
        "Request rejected",
        extra={"structured": {"path": request.url.path, "code": exc.code, "status": status_code}},
    )
    return JSONResponse(status_code=status_code, content=body)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": settings.app_name, "version": "0.1.0"}
