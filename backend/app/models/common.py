"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel


class BookingStatus(str, Enum):
    """Booking status."""

    pending = "pending"
    accepted = "accepted"
    confirmed = "confirmed"
    pending_payment = "pending_payment"
    completed = "completed"
    cancelled = "cancelled"
    declined = "declined"

    @classmethod
    def _missing_(cls, value: object) -> "BookingStatus | None":
        # Legacy payloads send "Pending", "PendingPayment" or "paid"
        if not isinstance(value, str):
            return None
        normalized = value.strip().replace("-", "_").replace(" ", "_")
        if normalized.lower() == "paid":
            return cls.completed
        snake = "".join(
            f"_{c.lower()}" if c.isupper() and i > 0 else c.lower()
            for i, c in enumerate(normalized)
        ).replace("__", "_")
        for member in cls:
            if member.value in (normalized.lower(), snake):
                return member
        return None

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition can leave this status."""
        return self in (BookingStatus.completed, BookingStatus.cancelled, BookingStatus.declined)


class ActorRole(str, Enum):
    """Role an actor plays on a specific booking."""

    tourist = "tourist"
    provider = "provider"


class ProviderKind(str, Enum):
    """Kind of counterparty fulfilling a booking."""

    guide = "guide"
    agency = "agency"
    accommodation_host = "accommodation_host"


class GuideTier(str, Enum):
    """Guide membership tier."""

    free = "free"
    paid = "paid"


class DateStatus(str, Enum):
    """Calendar classification of a date for a provider."""

    available = "available"
    blocked = "blocked"
    unavailable = "unavailable"


class TimelineEntryKind(str, Enum):
    """Type of itinerary timeline entry."""

    stop = "stop"
    accommodation = "accommodation"


class BookingOperation(str, Enum):
    """Operations that drive the booking state machine."""

    create = "create"
    accept = "accept"
    decline = "decline"
    cancel = "cancel"
    request_payment = "request_payment"
    mark_paid = "mark_paid"
    confirm_payment = "confirm_payment"


class BookingView(str, Enum):
    """How a booking is listed for the current user."""

    my_trip = "my_trip"
    client_booking = "client_booking"


class Amenities(BaseModel):
    """Accommodation amenity flags."""

    wifi: bool = False
    breakfast: bool = False
    ac: bool = False
    parking: bool = False
    pool: bool = False
