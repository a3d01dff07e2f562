"""Booking domain errors."""


class BookingError(Exception):
    """Base class for booking core errors.

    ``code`` is a stable machine-readable identifier carried over the wire;
    ``recoverable`` marks errors the initiating user can act on directly
    without refreshing state.
    """

    code = "booking_error"
    recoverable = False

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(BookingError):
    """Required booking fields are missing or malformed."""

    code = "validation_error"
    recoverable = True


class AvailabilityConflict(BookingError):
    """Requested date is not available for the provider."""

    code = "availability_conflict"

    def __init__(self, detail: str, dates: list[str] | None = None) -> None:
        super().__init__(detail)
        self.dates = dates or []


class InvalidTransition(BookingError):
    """Operation is not legal for the booking's status or the actor's role."""

    code = "invalid_transition"


class TierLimitExceeded(BookingError):
    """Free-tier guide has reached the accepted-booking cap."""

    code = "tier_limit_exceeded"
    recoverable = True


class NotFound(BookingError):
    """Referenced booking, provider, package or accommodation does not exist."""

    code = "not_found"


class TransportError(BookingError):
    """Network or authentication failure surfaced by the transport."""

    code = "transport_error"

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code


ERRORS_BY_CODE: dict[str, type[BookingError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        AvailabilityConflict,
        InvalidTransition,
        TierLimitExceeded,
        NotFound,
        TransportError,
    )
}
