"""Role-based booking visibility.

A user sees a booking as "My Trip" when they are its tourist and as a
"Client Booking" when they are its provider. The two sets are disjoint;
users who are neither see nothing.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from backend.app.bookings.errors import NotFound
from backend.app.models.booking import Booking
from backend.app.models.common import ActorRole, BookingView


def role_for(booking: Booking, user_id: str) -> ActorRole:
    """Role the user plays on a booking.

    Raises:
        NotFound: User is not a party to the booking
    """
    if booking.tourist_id == user_id:
        return ActorRole.tourist
    if booking.provider.id == user_id:
        return ActorRole.provider
    raise NotFound(f"booking {booking.id} not found")


def view_for(booking: Booking, user_id: str) -> BookingView | None:
    """View under which the user sees a booking, or None."""
    if booking.tourist_id == user_id:
        return BookingView.my_trip
    if booking.provider.id == user_id:
        return BookingView.client_booking
    return None


@dataclass
class BookingViews:
    """A user's bookings split by view."""

    my_trips: list[Booking] = field(default_factory=list)
    client_bookings: list[Booking] = field(default_factory=list)


def split_bookings(bookings: Iterable[Booking], user_id: str) -> BookingViews:
    """Partition bookings into the user's trips and client bookings, order preserved."""
    views = BookingViews()
    for booking in bookings:
        view = view_for(booking, user_id)
        if view == BookingView.my_trip:
            views.my_trips.append(booking)
        elif view == BookingView.client_booking:
            views.client_bookings.append(booking)
    return views
