"""Dev seeding helper - demo catalog for the in-memory repositories."""

import logging
from datetime import date, timedelta
from decimal import Decimal

from backend.app.db.inmemory import InMemoryCatalog
from backend.app.models.catalog import (
    ALL_DAYS,
    Accommodation,
    AccommodationHost,
    Agency,
    Destination,
    Guide,
    Stop,
    TourPackage,
    Transportation,
)
from backend.app.models.common import GuideTier

logger = logging.getLogger(__name__)

# Fixed IDs so stub auth ("Bearer <user_id>") can act as these providers
DEV_TOURIST_ID = "tourist-1"
DEV_GUIDE_ID = "guide-1"
DEV_PAID_GUIDE_ID = "guide-2"
DEV_AGENCY_ID = "agency-1"
DEV_HOST_ID = "host-1"
DEV_DESTINATION_ID = "dest-1"


def seed_catalog(catalog: InMemoryCatalog, today: date | None = None) -> None:
    """Load the demo catalog.

    Guides open the next 30 days. Safe to call more than once; records are
    replaced by id.

    Args:
        catalog: Catalog to populate
        today: First open date (default: today)
    """
    start = today or date.today()
    open_dates = [start + timedelta(days=i) for i in range(30)]

    catalog.add_destination(
        Destination(
            id=DEV_DESTINATION_ID,
            name="Mount Apo",
            location="Davao del Sur",
            images=["https://example.com/apo-1.jpg", "https://example.com/apo-2.jpg"],
            attractions=["Lake Venado", "Summit crater"],
        )
    )

    catalog.add_provider(
        Guide(
            id=DEV_GUIDE_ID,
            display_name="Rosa Dalisay",
            location="Kidapawan",
            rating=4.8,
            price_per_day=Decimal("1500"),
            solo_price_per_day=Decimal("1200"),
            additional_fee_per_head=Decimal("300"),
            available_days=["Mon", "Wed", "Fri", "Sat"],
            specific_available_dates=open_dates,
            guide_tier=GuideTier.free,
        )
    )
    catalog.add_provider(
        Guide(
            id=DEV_PAID_GUIDE_ID,
            display_name="Ben Lumad",
            location="Digos",
            rating=4.6,
            price_per_day=Decimal("2000"),
            solo_price_per_day=Decimal("1800"),
            additional_fee_per_head=Decimal("250"),
            available_days=[ALL_DAYS],
            specific_available_dates=open_dates,
            guide_tier=GuideTier.paid,
        )
    )
    catalog.add_provider(
        Agency(id=DEV_AGENCY_ID, display_name="Southern Trails Travel", location="Davao City")
    )
    catalog.add_provider(
        AccommodationHost(id=DEV_HOST_ID, display_name="Lake Agco Lodge", location="Kidapawan")
    )

    catalog.add_accommodation(
        Accommodation(
            id="accom-1",
            host_id=DEV_HOST_ID,
            title="Agco Hot Spring Cabin",
            location="Kidapawan",
            price=Decimal("800"),
            accommodation_type="Cabin",
            amenities={"wifi": True, "breakfast": True},
            room_type="Family",
            transportation=Transportation(vehicle_type="Van", capacity=8),
            photo="https://example.com/agco-cabin.jpg",
        )
    )

    catalog.add_tour_package(
        TourPackage(
            id="pkg-1",
            guide_id=DEV_GUIDE_ID,
            destination_id=DEV_DESTINATION_ID,
            name="Apo Summit Trek",
            description="Two-day trek with an overnight stay at Lake Agco.",
            duration_label="2 days",
            max_group_size=10,
            price_per_day=Decimal("1500"),
            solo_price_per_day=Decimal("1200"),
            additional_fee_per_head=Decimal("300"),
            what_to_bring=["Rain jacket", "Headlamp"],
            stops=[
                Stop(id="stop-1", name="Lake Venado", image="https://example.com/venado.jpg"),
                Stop(id="stop-2", name="Summit crater"),
            ],
            itinerary_timeline=[
                {"startTime": "06:00", "endTime": "12:00", "type": "stop",
                 "activityName": "Lake Venado", "refId": "stop-1"},
                {"startTime": "18:00", "endTime": "06:00", "type": "accom",
                 "activityName": "Agco Hot Spring Cabin", "refId": "accom-1"},
                {"startTime": "07:00", "endTime": "11:00", "type": "stop",
                 "activityName": "Summit crater", "refId": "stop-2"},
            ],
        )
    )
    catalog.add_tour_package(
        TourPackage(
            id="pkg-2",
            guide_id=DEV_PAID_GUIDE_ID,
            destination_id=DEV_DESTINATION_ID,
            name="Apo Day Hike",
            duration_label="1 day",
            price_per_day=Decimal("2000"),
            solo_price_per_day=Decimal("1800"),
            additional_fee_per_head=Decimal("250"),
        )
    )

    logger.info(
        "Seeded demo catalog",
        extra={"structured": {"destination_id": DEV_DESTINATION_ID, "open_days": len(open_dates)}},
    )
