"""Health check endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_catalog
from backend.app.config import get_settings
from backend.app.db.inmemory import InMemoryCatalog

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz")
async def healthz(
    catalog: Annotated[InMemoryCatalog, Depends(get_catalog)],
) -> dict[str, Any]:
    """Health check with component status.

    Repositories are in-process, so reaching them is the whole check. The
    backend of record is reported as configured, not probed.
    """
    return {
        "status": "ok",
        "components": {
            "catalog": f"ok ({len(catalog.list_accommodations())} accommodations)",
            "bookings": "ok",
            "backend_api": get_settings().api_base_url,
        },
    }
