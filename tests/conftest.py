"""Shared pytest fixtures for all test suites."""

import itertools
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backend.app.bookings.lifecycle import BookingLifecycle
from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryBookingRepository, InMemoryCatalog
from backend.app.models.booking import BookingRequest, ProviderRef
from backend.app.models.catalog import (
    Accommodation,
    AccommodationHost,
    Agency,
    Destination,
    Guide,
    Stop,
    TourPackage,
)
from backend.app.models.common import GuideTier, ProviderKind

TOURIST_ID = "tourist-1"
GUIDE_ID = "guide-1"
PAID_GUIDE_ID = "guide-2"
AGENCY_ID = "agency-1"
HOST_ID = "host-1"
DESTINATION_ID = "dest-1"

# Dates guide-1 and guide-2 have opened on their calendars
OPEN_DATES = [date(2025, 11, 10) + timedelta(days=i) for i in range(7)]
TRIP_DAY = date(2025, 11, 13)


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, independent of any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Catalog with two guides, an agency, a host and their listings.

    guide-1's first package for dest-1 is ``pkg-day`` (500 group price, 50
    per head, no accommodation); ``pkg-overnight`` attaches ``accom-1``.
    """
    catalog = InMemoryCatalog()
    catalog.add_destination(
        Destination(id=DESTINATION_ID, name="Mount Apo", images=["a.jpg", "b.jpg"])
    )
    catalog.add_provider(
        Guide(
            id=GUIDE_ID,
            display_name="Rosa",
            price_per_day=Decimal("700"),
            solo_price_per_day=Decimal("600"),
            additional_fee_per_head=Decimal("80"),
            available_days=["Mon", "Fri"],
            specific_available_dates=OPEN_DATES,
            guide_tier=GuideTier.free,
        )
    )
    catalog.add_provider(
        Guide(
            id=PAID_GUIDE_ID,
            display_name="Ben",
            price_per_day=Decimal("2000"),
            specific_available_dates=OPEN_DATES,
            guide_tier=GuideTier.paid,
            booking_count=5,
        )
    )
    catalog.add_provider(Agency(id=AGENCY_ID, display_name="Southern Trails"))
    catalog.add_provider(AccommodationHost(id=HOST_ID, display_name="Agco Lodge"))
    catalog.add_accommodation(
        Accommodation(
            id="accom-1",
            host_id=HOST_ID,
            title="Hot Spring Cabin",
            price=Decimal("800"),
            photo="cabin.jpg",
        )
    )
    catalog.add_tour_package(
        TourPackage(
            id="pkg-day",
            guide_id=GUIDE_ID,
            destination_id=DESTINATION_ID,
            name="Day Hike",
            price_per_day=Decimal("500"),
            additional_fee_per_head=Decimal("50"),
            max_group_size=6,
        )
    )
    catalog.add_tour_package(
        TourPackage(
            id="pkg-overnight",
            guide_id=GUIDE_ID,
            destination_id=DESTINATION_ID,
            name="Summit Overnight",
            price_per_day=Decimal("1000"),
            solo_price_per_day=Decimal("900"),
            additional_fee_per_head=Decimal("100"),
            stops=[Stop(id="stop-1", name="Lake Venado", image="venado.jpg")],
            itinerary_timeline=[
                {"startTime": "06:00", "endTime": "12:00", "type": "stop",
                 "activityName": "Lake Venado", "refId": "stop-1"},
                {"startTime": "18:00", "endTime": "06:00", "type": "accom",
                 "activityName": "Hot Spring Cabin", "refId": "accom-1"},
            ],
        )
    )
    catalog.add_tour_package(
        TourPackage(
            id="pkg-ben",
            guide_id=PAID_GUIDE_ID,
            destination_id=DESTINATION_ID,
            price_per_day=Decimal("2000"),
            solo_price_per_day=Decimal("1800"),
            additional_fee_per_head=Decimal("250"),
        )
    )
    return catalog


@pytest.fixture
def bookings() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Strictly increasing clock, one minute per call."""
    start = datetime(2025, 11, 1, 9, 0, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def lifecycle(
    bookings: InMemoryBookingRepository,
    catalog: InMemoryCatalog,
    settings: Settings,
    clock: Callable[[], datetime],
) -> BookingLifecycle:
    return BookingLifecycle(bookings, catalog, settings=settings, clock=clock)


@pytest.fixture
def guide_request() -> Callable[..., BookingRequest]:
    """Factory for tour bookings with guide-1 on TRIP_DAY."""

    def make(
        guide_id: str = GUIDE_ID,
        check_in: date = TRIP_DAY,
        check_out: date | None = None,
        num_guests: int = 1,
        tour_package_id: str | None = None,
    ) -> BookingRequest:
        return BookingRequest(
            provider=ProviderRef(kind=ProviderKind.guide, id=guide_id),
            destination_id=DESTINATION_ID,
            tour_package_id=tour_package_id,
            check_in=check_in,
            check_out=check_out,
            num_guests=num_guests,
        )

    return make
