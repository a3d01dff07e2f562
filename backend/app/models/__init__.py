"""Models package - re-exports for convenience."""

from backend.app.models.booking import Booking, BookingRequest, PriceBreakdown, ProviderRef
from backend.app.models.catalog import (
    ALL_DAYS,
    Accommodation,
    AccommodationHost,
    Agency,
    Destination,
    Guide,
    Provider,
    Stop,
    TourPackage,
    Transportation,
)
from backend.app.models.common import (
    ActorRole,
    Amenities,
    BookingOperation,
    BookingStatus,
    BookingView,
    DateStatus,
    GuideTier,
    ProviderKind,
    TimelineEntryKind,
)
from backend.app.models.timeline import TimelineEntry, TimelineRef

__all__ = [
    # Common
    "ActorRole",
    "Amenities",
    "BookingOperation",
    "BookingStatus",
    "BookingView",
    "DateStatus",
    "GuideTier",
    "ProviderKind",
    "TimelineEntryKind",
    # Catalog
    "ALL_DAYS",
    "Provider",
    "Guide",
    "Agency",
    "AccommodationHost",
    "Destination",
    "Stop",
    "Transportation",
    "Accommodation",
    "TourPackage",
    # Timeline
    "TimelineEntry",
    "TimelineRef",
    # Booking
    "Booking",
    "BookingRequest",
    "PriceBreakdown",
    "ProviderRef",
]
