"""Booking status state machine.

The table below is the complete set of legal transitions. Any
(status, operation, actor) triple absent from it is rejected with
InvalidTransition; nothing is silently ignored. ``confirmed`` behaves as
an alias of ``accepted``.
"""

from typing import NamedTuple

from backend.app.bookings.errors import InvalidTransition
from backend.app.models.common import ActorRole, BookingOperation, BookingStatus


class Transition(NamedTuple):
    """Allowed actor and resulting status for a (status, operation) pair."""

    actor: ActorRole
    target: BookingStatus


TRANSITIONS: dict[tuple[BookingStatus, BookingOperation], Transition] = {
    (BookingStatus.pending, BookingOperation.accept): Transition(
        ActorRole.provider, BookingStatus.accepted
    ),
    (BookingStatus.pending, BookingOperation.decline): Transition(
        ActorRole.provider, BookingStatus.declined
    ),
    (BookingStatus.accepted, BookingOperation.cancel): Transition(
        ActorRole.tourist, BookingStatus.cancelled
    ),
    (BookingStatus.confirmed, BookingOperation.cancel): Transition(
        ActorRole.tourist, BookingStatus.cancelled
    ),
    (BookingStatus.pending_payment, BookingOperation.cancel): Transition(
        ActorRole.tourist, BookingStatus.cancelled
    ),
    (BookingStatus.accepted, BookingOperation.request_payment): Transition(
        ActorRole.tourist, BookingStatus.pending_payment
    ),
    (BookingStatus.confirmed, BookingOperation.request_payment): Transition(
        ActorRole.tourist, BookingStatus.pending_payment
    ),
    (BookingStatus.accepted, BookingOperation.mark_paid): Transition(
        ActorRole.provider, BookingStatus.completed
    ),
    (BookingStatus.confirmed, BookingOperation.mark_paid): Transition(
        ActorRole.provider, BookingStatus.completed
    ),
    (BookingStatus.pending_payment, BookingOperation.confirm_payment): Transition(
        ActorRole.tourist, BookingStatus.completed
    ),
}

# Statuses whose bookings hold their dates on the provider's calendar
BLOCKING_STATUSES = frozenset(
    {
        BookingStatus.pending,
        BookingStatus.accepted,
        BookingStatus.confirmed,
        BookingStatus.pending_payment,
    }
)


def next_status(
    current: BookingStatus, operation: BookingOperation, actor: ActorRole
) -> BookingStatus:
    """Resolve the status reached by applying an operation.

    Args:
        current: Booking's current status
        operation: Requested operation
        actor: Role of the actor on this booking

    Returns:
        Target status

    Raises:
        InvalidTransition: If the operation is not legal for the status or actor
    """
    transition = TRANSITIONS.get((current, operation))
    if transition is None:
        raise InvalidTransition(
            f"Cannot {operation.value} a booking in status {current.value}"
        )
    if transition.actor != actor:
        raise InvalidTransition(
            f"Only the {transition.actor.value} can {operation.value} this booking"
        )
    return transition.target


def allowed_operations(current: BookingStatus, actor: ActorRole) -> list[BookingOperation]:
    """List operations the actor may perform on a booking in this status."""
    return [
        operation
        for (status, operation), transition in TRANSITIONS.items()
        if status == current and transition.actor == actor
    ]
