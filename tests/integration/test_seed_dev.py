"""Integration tests for the demo catalog seed."""

from datetime import date, timedelta
from decimal import Decimal

from backend.app.bookings.lifecycle import BookingLifecycle
from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryBookingRepository, InMemoryCatalog
from backend.app.db.seed_dev import (
    DEV_DESTINATION_ID,
    DEV_GUIDE_ID,
    DEV_HOST_ID,
    DEV_TOURIST_ID,
    seed_catalog,
)
from backend.app.models.booking import BookingRequest, ProviderRef
from backend.app.models.common import ProviderKind

TODAY = date(2025, 11, 10)


def _seeded() -> InMemoryCatalog:
    catalog = InMemoryCatalog()
    seed_catalog(catalog, today=TODAY)
    return catalog


def test_seed_is_repeatable() -> None:
    catalog = _seeded()
    seed_catalog(catalog, today=TODAY)

    assert len(catalog.list_tour_packages(DEV_DESTINATION_ID)) == 2
    assert len(catalog.list_accommodations(DEV_HOST_ID)) == 1


def test_seeded_guide_is_bookable(settings: Settings) -> None:
    catalog = _seeded()
    lifecycle = BookingLifecycle(InMemoryBookingRepository(), catalog, settings=settings)

    booking = lifecycle.create(
        BookingRequest(
            provider=ProviderRef(kind=ProviderKind.guide, id=DEV_GUIDE_ID),
            destination_id=DEV_DESTINATION_ID,
            check_in=TODAY + timedelta(days=3),
            num_guests=2,
        ),
        tourist_id=DEV_TOURIST_ID,
    )

    # Summit trek: 1500 group + 300 per extra head + 800 cabin attached by the itinerary
    assert booking.tour_package_id == "pkg-1"
    assert booking.accommodation_id == "accom-1"
    assert booking.total_price == Decimal("2600")
