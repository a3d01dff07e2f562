"""Catalog endpoints - guides, destinations, tour packages, accommodations."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_catalog, get_lifecycle
from backend.app.availability.calendar import weekly_schedule
from backend.app.bookings.errors import NotFound
from backend.app.bookings.lifecycle import BookingLifecycle
from backend.app.db.context import RequestContext
from backend.app.db.inmemory import InMemoryCatalog
from backend.app.itinerary.timeline import relevant_accommodations
from backend.app.models.catalog import Accommodation, Destination, Guide, TourPackage

router = APIRouter(prefix="/api", tags=["catalog"])

Catalog = Annotated[InMemoryCatalog, Depends(get_catalog)]
Context = Annotated[RequestContext, Depends(get_current_context)]


@router.get("/guides/{guide_id}/", response_model=Guide)
def get_guide(guide_id: str, ctx: Context, catalog: Catalog) -> Guide:
    guide = catalog.get_guide(guide_id)
    if guide is None:
        raise NotFound(f"guide {guide_id} not found")
    return guide


@router.get("/guides/{guide_id}/calendar/")
def guide_calendar(
    guide_id: str,
    ctx: Context,
    catalog: Catalog,
    lifecycle: Annotated[BookingLifecycle, Depends(get_lifecycle)],
    year: Annotated[int, Query(ge=1, le=9999)],
    month: Annotated[int, Query(ge=1, le=12)],
) -> dict[str, Any]:
    """Month view of a guide's dates.

    Returns:
        ``dates`` maps each ISO date to available, blocked or unavailable;
        ``weekly_schedule`` lists the dates on the guide's standard weekdays
    """
    days = lifecycle.guide_calendar(guide_id, year, month)
    guide = catalog.get_guide(guide_id)
    weekly = weekly_schedule(guide.available_days, year, month) if guide else []
    return {
        "guide_id": guide_id,
        "year": year,
        "month": month,
        "dates": {day.isoformat(): status.value for day, status in days.items()},
        "weekly_schedule": [day.isoformat() for day in weekly],
    }


@router.get("/destinations/{destination_id}/", response_model=Destination)
def get_destination(destination_id: str, ctx: Context, catalog: Catalog) -> Destination:
    destination = catalog.get_destination(destination_id)
    if destination is None:
        raise NotFound(f"destination {destination_id} not found")
    return destination


@router.get("/destinations/{destination_id}/tours/", response_model=list[TourPackage])
def list_tours(
    destination_id: str,
    ctx: Context,
    catalog: Catalog,
    guide_id: Annotated[str | None, Query()] = None,
) -> list[TourPackage]:
    """Tour packages for a destination, optionally for one guide."""
    packages = catalog.list_tour_packages(destination_id)
    if guide_id is not None:
        packages = [p for p in packages if p.guide_id == guide_id]
    return packages


@router.get("/accommodations/", response_model=list[Accommodation])
def list_accommodations(
    ctx: Context,
    catalog: Catalog,
    host_id: Annotated[str | None, Query()] = None,
    destination_id: Annotated[str | None, Query()] = None,
) -> list[Accommodation]:
    """Accommodations, optionally narrowed to a host.

    With ``destination_id`` as well, only the host's accommodations named
    in that host's itineraries are returned, or all of them when no
    itinerary names one.
    """
    accommodations = catalog.list_accommodations(host_id)
    if host_id is not None and destination_id is not None:
        packages = [
            p for p in catalog.list_tour_packages(destination_id) if p.guide_id == host_id
        ]
        accommodations = relevant_accommodations(packages, accommodations)
    return accommodations


@router.post("/guides/{guide_id}/upgrade/", response_model=Guide)
def upgrade_guide(
    guide_id: str,
    ctx: Context,
    lifecycle: Annotated[BookingLifecycle, Depends(get_lifecycle)],
) -> Guide:
    """Activate the paid tier after the guide's yearly subscription is paid.

    The subscription payment itself is settled by the payment provider.
    """
    if ctx.user_id != guide_id:
        raise HTTPException(status_code=403, detail="Guides can only upgrade their own membership")
    return lifecycle.upgrade_tier(guide_id)
