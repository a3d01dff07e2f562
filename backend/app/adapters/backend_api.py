"""Client for the booking backend of record.

Every call goes through AuthTransport. Error payloads ``{code, detail}``
are mapped back onto the booking domain errors so callers handle remote
and local failures the same way.
"""

import logging
import uuid
from datetime import date
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from backend.app.adapters.transport import AuthTransport, TokenStore, TransportResponse
from backend.app.bookings.errors import (
    ERRORS_BY_CODE,
    AvailabilityConflict,
    BookingError,
    NotFound,
    TransportError,
    ValidationError,
)
from backend.app.bookings.state_machine import TRANSITIONS
from backend.app.config import Settings, get_settings
from backend.app.models.booking import Booking, BookingRequest, PriceBreakdown
from backend.app.models.catalog import Accommodation, Destination, Guide, TourPackage
from backend.app.models.common import BookingOperation
from backend.app.utils.metrics import PrometheusTransportMetrics

logger = logging.getLogger(__name__)


def error_from_response(response: TransportResponse) -> BookingError:
    """Map a failed backend response to a domain error."""
    data = response.data if isinstance(response.data, dict) else {}
    detail = str(data.get("detail") or data.get("error") or f"HTTP {response.status}")
    error_cls = ERRORS_BY_CODE.get(str(data.get("code", "")))

    if error_cls is AvailabilityConflict:
        return AvailabilityConflict(detail, dates=list(data.get("dates") or []))
    if error_cls is TransportError:
        return TransportError(detail, status_code=response.status)
    if error_cls is not None:
        return error_cls(detail)
    if response.status == 404:
        return NotFound(detail)
    if response.status in (400, 422):
        return ValidationError(detail)
    return TransportError(detail, status_code=response.status)


def _results(data: Any) -> list[Any]:
    # List endpoints may be paginated ({"results": [...]}) or bare lists
    if isinstance(data, dict):
        return list(data.get("results") or [])
    return list(data or [])


def _applied(operation: BookingOperation, before: Booking, after: Booking) -> bool:
    """Whether ``after`` shows the effect of ``operation`` applied to ``before``."""
    transition = TRANSITIONS.get((before.status, operation))
    if transition is None or after.status != transition.target:
        return False
    if operation == BookingOperation.mark_paid:
        # confirm_payment also ends in completed; only mark_paid settles offline
        return after.settled_offline > before.settled_offline
    return True


class BookingBackendClient:
    """Typed operations against the booking backend."""

    def __init__(self, transport: AuthTransport) -> None:
        self._transport = transport

    async def _call(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._transport.request(method, path, body, params, headers)
        if not response.ok:
            raise error_from_response(response)
        return response.data

    def _parse(self, model: type[Any], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise TransportError(f"Malformed {model.__name__} from backend: {e}") from e

    # Bookings

    async def create_booking(self, request: BookingRequest) -> Booking:
        data = await self._call(
            "POST", "/api/bookings/", body=request.model_dump(mode="json", exclude_none=True)
        )
        return self._parse(Booking, data)

    async def quote(self, request: BookingRequest) -> PriceBreakdown:
        data = await self._call(
            "POST", "/api/bookings/quote/", body=request.model_dump(mode="json", exclude_none=True)
        )
        return self._parse(PriceBreakdown, data)

    async def get_booking(self, booking_id: str) -> Booking:
        data = await self._call("GET", f"/api/bookings/{booking_id}/")
        return self._parse(Booking, data)

    async def get_bookings(self) -> list[Booking]:
        """Bookings visible to the signed-in user, newest first."""
        data = await self._call("GET", "/api/bookings/")
        return [self._parse(Booking, item) for item in _results(data)]

    async def set_booking_status(self, booking_id: str, operation: BookingOperation) -> Booking:
        """Apply a status operation to a booking.

        Args:
            booking_id: Booking ID
            operation: Operation to apply

        Returns:
            Updated booking

        Raises:
            TransportError: Delivery failed and the operation is not visible
                on the backend
        """
        if operation == BookingOperation.mark_paid:
            path = f"/api/bookings/{booking_id}/mark_paid/"
            body = None
        else:
            path = f"/api/bookings/{booking_id}/status/"
            body = {"operation": operation.value}
        return await self._transition(booking_id, operation, path, body)

    async def mark_paid(self, booking_id: str) -> Booking:
        return await self.set_booking_status(booking_id, BookingOperation.mark_paid)

    async def assign_guides(self, booking_id: str, guide_ids: list[str]) -> Booking:
        """Agency assigns the guides leading a booking; replaces any earlier assignment."""
        data = await self._call(
            "POST",
            f"/api/bookings/{booking_id}/assign_guides/",
            body={"guide_ids": guide_ids},
            headers={"Idempotency-Key": str(uuid.uuid4())},
        )
        return self._parse(Booking, data)

    async def _transition(
        self, booking_id: str, operation: BookingOperation, path: str, body: Any
    ) -> Booking:
        # Snapshot before the write; a lost response is judged against it
        before = await self.get_booking(booking_id)
        headers = {"Idempotency-Key": str(uuid.uuid4())}
        try:
            data = await self._call("POST", path, body=body, headers=headers)
        except TransportError as e:
            # The write may have landed before the connection failed
            try:
                current = await self.get_booking(booking_id)
            except BookingError:
                raise e from None
            if _applied(operation, before, current):
                logger.info(
                    "Transition confirmed by status re-check",
                    extra={
                        "structured": {
                            "booking_id": booking_id,
                            "operation": operation.value,
                            "status": current.status.value,
                        }
                    },
                )
                return current
            raise
        return self._parse(Booking, data)

    async def get_guide_blocked_dates(self, guide_id: str) -> list[date]:
        data = await self._call(
            "GET", "/api/bookings/guide_blocked_dates/", params={"guide_id": guide_id}
        )
        try:
            return sorted(date.fromisoformat(str(d)) for d in _results(data))
        except ValueError as e:
            raise TransportError(f"Malformed blocked dates from backend: {e}") from e

    # Catalog

    async def get_guide(self, guide_id: str) -> Guide:
        data = await self._call("GET", f"/api/guides/{guide_id}/")
        return self._parse(Guide, data)

    async def upgrade_tier(self, guide_id: str) -> Guide:
        data = await self._call("POST", f"/api/guides/{guide_id}/upgrade/")
        return self._parse(Guide, data)

    async def get_destination(self, destination_id: str) -> Destination:
        data = await self._call("GET", f"/api/destinations/{destination_id}/")
        return self._parse(Destination, data)

    async def get_tour_packages_for_destination(self, destination_id: str) -> list[TourPackage]:
        data = await self._call("GET", f"/api/destinations/{destination_id}/tours/")
        return [self._parse(TourPackage, item) for item in _results(data)]

    async def get_accommodations(self, host_id: str | None = None) -> list[Accommodation]:
        params = {"host_id": host_id} if host_id else None
        data = await self._call("GET", "/api/accommodations/", params=params)
        return [self._parse(Accommodation, item) for item in _results(data)]


def connect(tokens: TokenStore, settings: Settings | None = None) -> BookingBackendClient:
    """Client for the configured backend, counting credential retries in Prometheus."""
    settings = settings or get_settings()
    transport = AuthTransport(tokens, settings=settings, metrics=PrometheusTransportMetrics())
    return BookingBackendClient(transport)
