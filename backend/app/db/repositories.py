"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from backend.app.models.booking import Booking, ProviderRef
from backend.app.models.catalog import Accommodation, Destination, Guide, Provider, TourPackage


class BookingRepository(Protocol):
    """Repository for booking records."""

    def add(self, booking: Booking) -> None:
        """Persist a new booking.

        Args:
            booking: Booking to store
        """
        ...

    def get(self, booking_id: str) -> Booking | None:
        """Get booking by ID.

        Args:
            booking_id: Booking ID

        Returns:
            Booking or None if not found
        """
        ...

    def save(self, booking: Booking) -> None:
        """Replace a stored booking with its updated version.

        Args:
            booking: Updated booking (same id)
        """
        ...

    def list_for_provider(self, provider: ProviderRef) -> list[Booking]:
        """List all bookings of a provider, any status.

        Args:
            provider: Provider reference

        Returns:
            Bookings ordered by creation time
        """
        ...

    def list_for_user(self, user_id: str) -> list[Booking]:
        """List bookings where the user is the tourist or the provider.

        Args:
            user_id: User ID

        Returns:
            Bookings ordered by creation time, newest first
        """
        ...


class CatalogRepository(Protocol):
    """Read access to providers, destinations, packages and accommodations."""

    def get_provider(self, provider: ProviderRef) -> Provider | None:
        """Get a provider of any kind by reference."""
        ...

    def get_guide(self, guide_id: str) -> Guide | None:
        """Get a guide by ID."""
        ...

    def save_guide(self, guide: Guide) -> None:
        """Replace a stored guide (booking counter updates)."""
        ...

    def get_destination(self, destination_id: str) -> Destination | None:
        """Get a destination by ID."""
        ...

    def get_tour_package(self, package_id: str) -> TourPackage | None:
        """Get a tour package by ID."""
        ...

    def list_tour_packages(self, destination_id: str) -> list[TourPackage]:
        """List tour packages published for a destination."""
        ...

    def get_accommodation(self, accommodation_id: str) -> Accommodation | None:
        """Get an accommodation by ID."""
        ...

    def list_accommodations(self, host_id: str | None = None) -> list[Accommodation]:
        """List accommodations, optionally for one host."""
        ...


class IdempotencyStatus(str, Enum):
    """Idempotency record status."""

    pending = "pending"
    completed = "completed"
    error = "error"


@dataclass
class StoredResponse:
    """Stored HTTP response envelope for idempotency replay."""

    status_code: int
    headers: dict[str, str]
    body: bytes


@dataclass
class IdempotencyRecord:
    """Idempotency record."""

    key: str
    user_id: str
    ttl_until: datetime
    status: IdempotencyStatus
    response: StoredResponse | None


class IdempotencyStore(Protocol):
    """Store for HTTP idempotency records."""

    def get(self, key: str, user_id: str) -> IdempotencyRecord | None:
        """Get idempotency record.

        Args:
            key: Idempotency key
            user_id: User ID

        Returns:
            Record or None if not found
        """
        ...

    def set_pending(self, key: str, user_id: str, ttl_until: datetime) -> bool:
        """Claim a key as pending.

        Args:
            key: Idempotency key
            user_id: User ID
            ttl_until: TTL timestamp

        Returns:
            True if the key was claimed, False if a live record already exists
        """
        ...

    def set_completed(
        self, key: str, user_id: str, ttl_until: datetime, response: StoredResponse
    ) -> None:
        """Set idempotency record to completed with full response envelope.

        Args:
            key: Idempotency key
            user_id: User ID
            ttl_until: TTL timestamp
            response: Complete response envelope for replay
        """
        ...

    def set_error(self, key: str, user_id: str, ttl_until: datetime) -> None:
        """Set idempotency record to error.

        Args:
            key: Idempotency key
            user_id: User ID
            ttl_until: TTL timestamp
        """
        ...

    def release(self, key: str, user_id: str) -> None:
        """Forget a key so the request may be retried.

        Args:
            key: Idempotency key
            user_id: User ID
        """
        ...
