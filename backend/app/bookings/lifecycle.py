"""Booking lifecycle service.

Owns booking creation and every status transition. Each operation takes
the actor's role explicitly; nothing is inferred from session state.

Concurrency: all writes for a provider are serialized under that
provider's lock. A create therefore sees a consistent set of blocked
dates, and two racing transitions on the same booking run one after the
other, the loser observing the winner's status and failing with
InvalidTransition.
"""

import logging
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone

from backend.app.availability.calendar import GuideAvailability, blocked_dates
from backend.app.bookings.errors import (
    AvailabilityConflict,
    BookingError,
    InvalidTransition,
    NotFound,
    TierLimitExceeded,
    ValidationError,
)
from backend.app.bookings.state_machine import BLOCKING_STATUSES, next_status
from backend.app.config import Settings, get_settings
from backend.app.db.repositories import BookingRepository, CatalogRepository
from backend.app.models.booking import Booking, BookingRequest, PriceBreakdown, ProviderRef
from backend.app.models.catalog import Accommodation, Guide, Provider, TourPackage
from backend.app.models.common import (
    ActorRole,
    BookingOperation,
    BookingStatus,
    DateStatus,
    GuideTier,
    ProviderKind,
)
from backend.app.pricing import engine as pricing

logger = logging.getLogger(__name__)


# Metrics interface (to be implemented by actual metrics system)
class BookingMetrics:
    """Interface for booking metrics."""

    def inc_transition(self, operation: str, outcome: str) -> None:
        """Count a lifecycle operation attempt."""
        pass

    def inc_quote(self, provider_kind: str) -> None:
        """Count a computed quote."""
        pass


# Logging interface
class BookingEventLogger:
    """Interface for structured lifecycle logging."""

    def log_transition(
        self,
        operation: BookingOperation,
        actor: ActorRole,
        outcome: str,
        booking: Booking | None = None,
        booking_id: str | None = None,
        error_code: str | None = None,
    ) -> None:
        """Log a lifecycle operation."""
        pass


@dataclass(frozen=True)
class PricedRequest:
    """A validated booking request with its resolved references and quote."""

    provider: Provider
    package: TourPackage | None
    accommodation: Accommodation | None
    breakdown: PriceBreakdown


class KeyedLocks:
    """Lazily created lock per key."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


def _provider_key(provider: ProviderRef) -> str:
    return f"{provider.kind.value}:{provider.id}"


class BookingLifecycle:
    """Booking creation, transitions and availability for one backend of record."""

    def __init__(
        self,
        bookings: BookingRepository,
        catalog: CatalogRepository,
        settings: Settings | None = None,
        metrics: BookingMetrics | None = None,
        event_logger: BookingEventLogger | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize lifecycle.

        Args:
            bookings: Booking repository
            catalog: Catalog repository
            settings: Rates and tier configuration (defaults to application settings)
            metrics: Metrics recorder (optional, defaults to no-op)
            event_logger: Structured logger (optional, defaults to no-op)
            clock: Injectable clock (default: timezone-aware now)
            id_factory: Injectable booking id generator (default: uuid4)
        """
        self._bookings = bookings
        self._catalog = catalog
        self._settings = settings or get_settings()
        self._metrics = metrics or BookingMetrics()
        self._events = event_logger or BookingEventLogger()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._locks = KeyedLocks()

    # Pricing

    def price_request(self, request: BookingRequest) -> PricedRequest:
        """Validate a request, resolve its references and compute its quote.

        Raises:
            ValidationError: Missing or inconsistent fields
            NotFound: Provider, destination, package or accommodation missing
        """
        if request.provider is None:
            raise ValidationError("Select a guide, agency or accommodation to book")
        if request.check_in is None:
            raise ValidationError("Select the date of your trip")
        if request.check_out is not None and request.check_out < request.check_in:
            raise ValidationError("Check-out must not be before check-in")
        if request.num_guests < 1:
            raise ValidationError("Number of guests must be at least 1")

        provider = self._catalog.get_provider(request.provider)
        if provider is None:
            raise NotFound(f"{request.provider.kind.value} {request.provider.id} not found")

        if provider.kind == ProviderKind.accommodation_host:
            priced = self._price_stay(request, provider)
        else:
            priced = self._price_tour(request, provider)

        self._metrics.inc_quote(provider.kind.value)
        return priced

    def _price_tour(self, request: BookingRequest, provider: Provider) -> PricedRequest:
        if not request.destination_id:
            raise ValidationError("Select a destination for this tour")
        if self._catalog.get_destination(request.destination_id) is None:
            raise NotFound(f"destination {request.destination_id} not found")

        guide = provider if isinstance(provider, Guide) else None
        package = self._resolve_package(request, guide)
        if guide is None and package is None:
            raise ValidationError("Select a tour package to book with an agency")
        if package is not None and package.max_group_size and request.num_guests > package.max_group_size:
            raise ValidationError(
                f"This tour accepts at most {package.max_group_size} guests"
            )

        if request.accommodation_id:
            accommodation = self._catalog.get_accommodation(request.accommodation_id)
            if accommodation is None:
                raise NotFound(f"accommodation {request.accommodation_id} not found")
        else:
            accommodation = pricing.attached_accommodation(
                package, self._catalog.list_accommodations()
            )

        breakdown = pricing.quote(
            guide, request.num_guests, package, accommodation, settings=self._settings
        )
        return PricedRequest(provider, package, accommodation, breakdown)

    def _resolve_package(self, request: BookingRequest, guide: Guide | None) -> TourPackage | None:
        if request.tour_package_id:
            package = self._catalog.get_tour_package(request.tour_package_id)
            if package is None:
                raise NotFound(f"tour package {request.tour_package_id} not found")
            if guide is not None and package.guide_id != guide.id:
                raise ValidationError("The selected tour package belongs to another guide")
            return package
        if guide is None:
            return None
        # The guide's first package for the destination is the default offer
        return next(
            (
                p
                for p in self._catalog.list_tour_packages(request.destination_id or "")
                if p.guide_id == guide.id
            ),
            None,
        )

    def _price_stay(self, request: BookingRequest, provider: Provider) -> PricedRequest:
        if not request.accommodation_id:
            raise ValidationError("Select an accommodation to book")
        accommodation = self._catalog.get_accommodation(request.accommodation_id)
        if accommodation is None:
            raise NotFound(f"accommodation {request.accommodation_id} not found")
        if accommodation.host_id != provider.id:
            raise ValidationError("The selected accommodation belongs to another host")
        breakdown = pricing.quote_accommodation(
            accommodation, request.num_guests, settings=self._settings
        )
        return PricedRequest(provider, None, accommodation, breakdown)

    # Availability

    def availability(self, provider: ProviderRef) -> GuideAvailability:
        """Snapshot of the provider's open and blocked dates.

        Guides only accept dates they explicitly opened; agencies and hosts
        accept any date not already blocked.
        """
        blocked = frozenset(blocked_dates(self._bookings.list_for_provider(provider), provider))
        if provider.kind == ProviderKind.guide:
            guide = self._catalog.get_guide(provider.id)
            if guide is None:
                raise NotFound(f"guide {provider.id} not found")
            return GuideAvailability(
                specific_available_dates=frozenset(guide.specific_available_dates),
                blocked=blocked,
            )
        return GuideAvailability(blocked=blocked, open_by_default=True)

    def guide_blocked_dates(self, guide_id: str) -> list[date]:
        """Sorted dates held by the guide's non-terminal bookings."""
        provider = ProviderRef(kind=ProviderKind.guide, id=guide_id)
        with self._locks.hold(_provider_key(provider)):
            return sorted(self.availability(provider).blocked)

    def guide_calendar(self, guide_id: str, year: int, month: int) -> dict[date, DateStatus]:
        """Classify every date of a month for a guide."""
        provider = ProviderRef(kind=ProviderKind.guide, id=guide_id)
        with self._locks.hold(_provider_key(provider)):
            return self.availability(provider).month(year, month)

    # Creation

    def create(
        self, request: BookingRequest, tourist_id: str, actor_role: ActorRole = ActorRole.tourist
    ) -> Booking:
        """Create a pending booking, blocking its dates for the provider.

        Raises:
            InvalidTransition: Actor is not the tourist
            ValidationError: Missing fields or tourist booking themselves
            NotFound: Referenced records missing
            AvailabilityConflict: A requested date is not Available
        """
        operation = BookingOperation.create
        try:
            if actor_role != ActorRole.tourist:
                raise InvalidTransition("Only the tourist can create a booking")
            priced = self.price_request(request)
            provider_ref = ProviderRef(kind=priced.provider.kind, id=priced.provider.id)
            if provider_ref.id == tourist_id:
                raise ValidationError("You cannot book your own services")

            assert request.check_in is not None
            with self._locks.hold(_provider_key(provider_ref)):
                conflicts = self.availability(provider_ref).unbookable(
                    request.check_in, request.check_out
                )
                if conflicts:
                    raise AvailabilityConflict(
                        "Requested dates are not available: "
                        + ", ".join(d.isoformat() for d in conflicts),
                        dates=[d.isoformat() for d in conflicts],
                    )

                breakdown = priced.breakdown
                booking = Booking(
                    id=self._new_id(),
                    tourist_id=tourist_id,
                    provider=provider_ref,
                    destination_id=request.destination_id,
                    tour_package_id=priced.package.id if priced.package else None,
                    accommodation_id=priced.accommodation.id if priced.accommodation else None,
                    check_in=request.check_in,
                    check_out=request.check_out,
                    num_guests=request.num_guests,
                    status=BookingStatus.pending,
                    total_price=breakdown.total_price,
                    down_payment=breakdown.down_payment,
                    commission=breakdown.commission,
                    created_at=self._clock(),
                )
                self._bookings.add(booking)
        except BookingError as e:
            self._record_failure(operation, actor_role, e)
            raise

        self._metrics.inc_transition(operation.value, "success")
        self._events.log_transition(operation, actor_role, "success", booking=booking)
        return booking

    # Transitions

    def accept(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.accept, actor_role)

    def decline(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.decline, actor_role)

    def cancel(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.cancel, actor_role)

    def request_payment(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.request_payment, actor_role)

    def mark_paid(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.mark_paid, actor_role)

    def confirm_payment(self, booking_id: str, actor_role: ActorRole) -> Booking:
        return self.transition(booking_id, BookingOperation.confirm_payment, actor_role)

    def transition(
        self, booking_id: str, operation: BookingOperation, actor_role: ActorRole
    ) -> Booking:
        """Apply a status operation to a booking.

        Dates are released implicitly: blocked dates derive from bookings in
        a blocking status, so a terminal booking stops holding its dates.

        Raises:
            NotFound: Unknown booking
            InvalidTransition: Operation not legal for status or actor
            TierLimitExceeded: Free-tier guide over the accepted-booking cap
        """
        try:
            if operation == BookingOperation.create:
                raise InvalidTransition("Use create to open a new booking")
            current = self.get_booking(booking_id)
            with self._locks.hold(_provider_key(current.provider)):
                # Re-read under the lock; a racing transition may have committed
                booking = self.get_booking(booking_id)
                target = next_status(booking.status, operation, actor_role)

                guide: Guide | None = None
                if operation == BookingOperation.accept and booking.provider.kind == ProviderKind.guide:
                    guide = self._catalog.get_guide(booking.provider.id)
                    if guide is None:
                        raise NotFound(f"guide {booking.provider.id} not found")
                    self._check_tier(guide)

                update: dict[str, object] = {"status": target, "updated_at": self._clock()}
                if operation == BookingOperation.mark_paid:
                    update["settled_offline"] = booking.balance_due
                updated = booking.model_copy(update=update)
                self._bookings.save(updated)

                if guide is not None:
                    self._catalog.save_guide(
                        guide.model_copy(update={"booking_count": guide.booking_count + 1})
                    )
        except BookingError as e:
            self._record_failure(operation, actor_role, e, booking_id=booking_id)
            raise

        self._metrics.inc_transition(operation.value, "success")
        self._events.log_transition(operation, actor_role, "success", booking=updated)
        return updated

    def _check_tier(self, guide: Guide) -> None:
        if (
            guide.guide_tier == GuideTier.free
            and guide.booking_count >= self._settings.free_tier_booking_cap
        ):
            raise TierLimitExceeded(
                "Free guides can accept one booking. Upgrade your membership to accept more."
            )

    def _record_failure(
        self,
        operation: BookingOperation,
        actor_role: ActorRole,
        error: BookingError,
        booking_id: str | None = None,
    ) -> None:
        self._metrics.inc_transition(operation.value, error.code)
        self._events.log_transition(
            operation, actor_role, "rejected", booking_id=booking_id, error_code=error.code
        )

    # Membership

    def upgrade_tier(self, guide_id: str) -> Guide:
        """Move a guide to the paid tier once their subscription payment succeeded.

        Paid guides accept bookings without the free-tier cap. Upgrading a
        paid guide is a no-op.

        Raises:
            NotFound: Unknown guide
        """
        provider = ProviderRef(kind=ProviderKind.guide, id=guide_id)
        with self._locks.hold(_provider_key(provider)):
            guide = self._catalog.get_guide(guide_id)
            if guide is None:
                raise NotFound(f"guide {guide_id} not found")
            if guide.guide_tier != GuideTier.paid:
                guide = guide.model_copy(update={"guide_tier": GuideTier.paid})
                self._catalog.save_guide(guide)
        logger.info(
            "Guide upgraded",
            extra={"structured": {"guide_id": guide_id, "guide_tier": guide.guide_tier.value}},
        )
        return guide

    # Agency assignments

    def assign_guides(
        self, booking_id: str, guide_ids: list[str], actor_role: ActorRole
    ) -> Booking:
        """Record the guides an agency assigned to one of its bookings.

        Replaces any earlier assignment. Allowed while the booking still
        holds its dates.

        Raises:
            NotFound: Unknown booking or guide
            ValidationError: Booking is not with an agency
            InvalidTransition: Actor is not the agency, or the booking is closed
        """
        current = self.get_booking(booking_id)
        with self._locks.hold(_provider_key(current.provider)):
            booking = self.get_booking(booking_id)
            if booking.provider.kind != ProviderKind.agency:
                raise ValidationError("Only agency bookings have assigned guides")
            if actor_role != ActorRole.provider:
                raise InvalidTransition("Only the agency can assign guides")
            if booking.status not in BLOCKING_STATUSES:
                raise InvalidTransition(
                    f"Cannot assign guides to a {booking.status.value} booking"
                )
            for guide_id in guide_ids:
                if self._catalog.get_guide(guide_id) is None:
                    raise NotFound(f"guide {guide_id} not found")

            updated = booking.model_copy(
                update={
                    "assigned_guide_ids": list(dict.fromkeys(guide_ids)),
                    "updated_at": self._clock(),
                }
            )
            self._bookings.save(updated)
        logger.info(
            "Guides assigned",
            extra={
                "structured": {"booking_id": booking_id, "guide_ids": updated.assigned_guide_ids}
            },
        )
        return updated

    # Queries

    def get_booking(self, booking_id: str) -> Booking:
        """Get a booking or raise NotFound."""
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFound(f"booking {booking_id} not found")
        return booking

    def bookings_for_user(self, user_id: str) -> list[Booking]:
        """Bookings where the user is the tourist or the provider, newest first."""
        return self._bookings.list_for_user(user_id)


