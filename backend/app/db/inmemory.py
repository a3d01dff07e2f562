"""In-memory implementations of repository interfaces."""

import threading
from datetime import datetime

from backend.app.db.repositories import IdempotencyRecord, IdempotencyStatus, StoredResponse
from backend.app.models.booking import Booking, ProviderRef
from backend.app.models.catalog import (
    Accommodation,
    AccommodationHost,
    Agency,
    Destination,
    Guide,
    Provider,
    TourPackage,
)
from backend.app.models.common import ProviderKind


class InMemoryBookingRepository:
    """In-memory implementation of BookingRepository."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}

    def add(self, booking: Booking) -> None:
        """Persist a new booking."""
        if booking.id in self._bookings:
            raise ValueError(f"booking {booking.id} already exists")
        self._bookings[booking.id] = booking

    def get(self, booking_id: str) -> Booking | None:
        """Get booking by ID."""
        return self._bookings.get(booking_id)

    def save(self, booking: Booking) -> None:
        """Replace a stored booking."""
        if booking.id not in self._bookings:
            raise KeyError(booking.id)
        self._bookings[booking.id] = booking

    def list_for_provider(self, provider: ProviderRef) -> list[Booking]:
        """List all bookings of a provider."""
        results = [b for b in self._bookings.values() if b.provider == provider]
        results.sort(key=lambda b: b.created_at)
        return results

    def list_for_user(self, user_id: str) -> list[Booking]:
        """List bookings where the user is the tourist or the provider."""
        results = [
            b for b in self._bookings.values() if user_id in (b.tourist_id, b.provider.id)
        ]
        # Sort by created_at descending
        results.sort(key=lambda b: b.created_at, reverse=True)
        return results


class InMemoryCatalog:
    """In-memory implementation of CatalogRepository."""

    def __init__(self) -> None:
        self._providers: dict[tuple[ProviderKind, str], Provider] = {}
        self._destinations: dict[str, Destination] = {}
        self._packages: dict[str, TourPackage] = {}
        self._accommodations: dict[str, Accommodation] = {}

    # Loading

    def add_provider(self, provider: Guide | Agency | AccommodationHost) -> None:
        self._providers[(provider.kind, provider.id)] = provider

    def add_destination(self, destination: Destination) -> None:
        self._destinations[destination.id] = destination

    def add_tour_package(self, package: TourPackage) -> None:
        self._packages[package.id] = package

    def add_accommodation(self, accommodation: Accommodation) -> None:
        self._accommodations[accommodation.id] = accommodation

    # CatalogRepository

    def get_provider(self, provider: ProviderRef) -> Provider | None:
        """Get a provider of any kind by reference."""
        return self._providers.get((provider.kind, provider.id))

    def get_guide(self, guide_id: str) -> Guide | None:
        """Get a guide by ID."""
        provider = self._providers.get((ProviderKind.guide, guide_id))
        return provider if isinstance(provider, Guide) else None

    def save_guide(self, guide: Guide) -> None:
        """Replace a stored guide."""
        self._providers[(ProviderKind.guide, guide.id)] = guide

    def get_destination(self, destination_id: str) -> Destination | None:
        """Get a destination by ID."""
        return self._destinations.get(destination_id)

    def get_tour_package(self, package_id: str) -> TourPackage | None:
        """Get a tour package by ID."""
        return self._packages.get(package_id)

    def list_tour_packages(self, destination_id: str) -> list[TourPackage]:
        """List tour packages published for a destination."""
        return [p for p in self._packages.values() if p.destination_id == destination_id]

    def get_accommodation(self, accommodation_id: str) -> Accommodation | None:
        """Get an accommodation by ID."""
        return self._accommodations.get(accommodation_id)

    def list_accommodations(self, host_id: str | None = None) -> list[Accommodation]:
        """List accommodations, optionally for one host."""
        return [
            a for a in self._accommodations.values() if host_id is None or a.host_id == host_id
        ]


class InMemoryIdempotencyStore:
    """In-memory implementation of IdempotencyStore."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], IdempotencyRecord] = {}
        self._lock = threading.Lock()

    def get(self, key: str, user_id: str) -> IdempotencyRecord | None:
        """Get idempotency record."""
        with self._lock:
            return self._get_live(key, user_id)

    def _get_live(self, key: str, user_id: str) -> IdempotencyRecord | None:
        record = self._records.get((key, user_id))

        if record is None:
            return None

        # Check if expired
        if datetime.now() > record.ttl_until:
            del self._records[(key, user_id)]
            return None

        return record

    def set_pending(self, key: str, user_id: str, ttl_until: datetime) -> bool:
        """Claim a key as pending; False if a live record already exists."""
        with self._lock:
            if self._get_live(key, user_id) is not None:
                return False
            self._records[(key, user_id)] = IdempotencyRecord(
                key=key,
                user_id=user_id,
                ttl_until=ttl_until,
                status=IdempotencyStatus.pending,
                response=None,
            )
            return True

    def set_completed(
        self, key: str, user_id: str, ttl_until: datetime, response: StoredResponse
    ) -> None:
        """Set idempotency record to completed with full response envelope."""
        with self._lock:
            self._records[(key, user_id)] = IdempotencyRecord(
                key=key,
                user_id=user_id,
                ttl_until=ttl_until,
                status=IdempotencyStatus.completed,
                response=response,
            )

    def set_error(self, key: str, user_id: str, ttl_until: datetime) -> None:
        """Set idempotency record to error."""
        with self._lock:
            self._records[(key, user_id)] = IdempotencyRecord(
                key=key,
                user_id=user_id,
                ttl_until=ttl_until,
                status=IdempotencyStatus.error,
                response=None,
            )

    def release(self, key: str, user_id: str) -> None:
        """Forget a key so the request may be retried."""
        with self._lock:
            self._records.pop((key, user_id), None)
