"""Booking endpoints - creation, quotes, listing and status transitions.

Handlers are sync so the lifecycle's per-provider locks run on the
threadpool rather than the event loop.
"""

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_idempotency, get_lifecycle
from backend.app.bookings.lifecycle import BookingLifecycle
from backend.app.bookings.state_machine import allowed_operations
from backend.app.bookings.visibility import role_for, view_for
from backend.app.db.context import RequestContext
from backend.app.middleware.idempotency import IdempotencyMiddleware
from backend.app.models.booking import Booking, BookingRequest, PriceBreakdown
from backend.app.models.common import BookingOperation, BookingView

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

Lifecycle = Annotated[BookingLifecycle, Depends(get_lifecycle)]
Context = Annotated[RequestContext, Depends(get_current_context)]
Idempotency = Annotated[IdempotencyMiddleware, Depends(get_idempotency)]
IdempotencyKey = Annotated[str | None, Header(alias="Idempotency-Key")]


class StatusChangeRequest(BaseModel):
    """Request body for POST /api/bookings/{id}/status/."""

    operation: BookingOperation


class AssignGuidesRequest(BaseModel):
    """Request body for POST /api/bookings/{id}/assign_guides/."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    guide_ids: list[str] = Field(..., min_length=1)


def _booking_body(booking: Booking, user_id: str) -> dict[str, Any]:
    """Serialize a booking with the caller's view and available actions."""
    body = booking.model_dump(mode="json")
    view = view_for(booking, user_id)
    body["view"] = view.value if view else None
    if view is not None:
        role = role_for(booking, user_id)
        body["allowed_operations"] = [
            op.value for op in allowed_operations(booking.status, role)
        ]
    return body


def _respond(result: tuple[int, dict[str, Any], dict[str, str]]) -> JSONResponse:
    status_code, body, headers = result
    return JSONResponse(content=body, status_code=status_code, headers=headers)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingRequest,
    ctx: Context,
    lifecycle: Lifecycle,
    idempotency: Idempotency,
    idempotency_key: IdempotencyKey = None,
) -> JSONResponse:
    """Create a pending booking as the tourist.

    Args:
        request: Booking request
        ctx: Request context (user_id)
        lifecycle: Booking lifecycle service
        idempotency: Idempotency middleware
        idempotency_key: Optional Idempotency-Key header

    Returns:
        Created booking (201), or the replayed response for a repeated key
    """

    def handler(_: dict[str, Any]) -> dict[str, Any]:
        return _booking_body(lifecycle.create(request, tourist_id=ctx.user_id), ctx.user_id)

    wrapped = idempotency.wrap_handler(handler, ctx.user_id, status_code=status.HTTP_201_CREATED)
    return _respond(wrapped(request.model_dump(mode="json"), idempotency_key))


@router.post("/quote/", response_model=PriceBreakdown)
def quote_booking(request: BookingRequest, ctx: Context, lifecycle: Lifecycle) -> PriceBreakdown:
    """Price a booking request without creating it."""
    return lifecycle.price_request(request).breakdown


@router.get("/")
def list_bookings(
    ctx: Context,
    lifecycle: Lifecycle,
    view: Annotated[BookingView | None, Query()] = None,
) -> list[dict[str, Any]]:
    """List the caller's bookings, newest first, optionally for one view."""
    bookings = lifecycle.bookings_for_user(ctx.user_id)
    if view is not None:
        bookings = [b for b in bookings if view_for(b, ctx.user_id) == view]
    return [_booking_body(b, ctx.user_id) for b in bookings]


@router.get("/guide_blocked_dates/")
def guide_blocked_dates(
    ctx: Context,
    lifecycle: Lifecycle,
    guide_id: Annotated[str, Query(min_length=1)],
) -> list[date]:
    """Dates the guide cannot take because a non-terminal booking holds them."""
    return lifecycle.guide_blocked_dates(guide_id)


@router.get("/{booking_id}/")
def get_booking(booking_id: str, ctx: Context, lifecycle: Lifecycle) -> dict[str, Any]:
    """Get a booking the caller is a party to."""
    booking = lifecycle.get_booking(booking_id)
    # Raises NotFound for users who are neither tourist nor provider
    role_for(booking, ctx.user_id)
    return _booking_body(booking, ctx.user_id)


def _transition(
    booking_id: str,
    operation: BookingOperation,
    ctx: RequestContext,
    lifecycle: BookingLifecycle,
    idempotency: IdempotencyMiddleware,
    idempotency_key: str | None,
) -> JSONResponse:
    def handler(_: dict[str, Any]) -> dict[str, Any]:
        booking = lifecycle.get_booking(booking_id)
        role = role_for(booking, ctx.user_id)
        updated = lifecycle.transition(booking_id, operation, role)
        return _booking_body(updated, ctx.user_id)

    wrapped = idempotency.wrap_handler(handler, ctx.user_id)
    return _respond(
        wrapped({"booking_id": booking_id, "operation": operation.value}, idempotency_key)
    )


@router.post("/{booking_id}/status/")
def set_booking_status(
    booking_id: str,
    body: StatusChangeRequest,
    ctx: Context,
    lifecycle: Lifecycle,
    idempotency: Idempotency,
    idempotency_key: IdempotencyKey = None,
) -> JSONResponse:
    """Apply a status operation; the caller's role is derived from the booking."""
    return _transition(booking_id, body.operation, ctx, lifecycle, idempotency, idempotency_key)


@router.post("/{booking_id}/mark_paid/")
def mark_paid(
    booking_id: str,
    ctx: Context,
    lifecycle: Lifecycle,
    idempotency: Idempotency,
    idempotency_key: IdempotencyKey = None,
) -> JSONResponse:
    """Provider records the balance as collected directly."""
    return _transition(
        booking_id, BookingOperation.mark_paid, ctx, lifecycle, idempotency, idempotency_key
    )


@router.post("/{booking_id}/assign_guides/")
def assign_guides(
    booking_id: str,
    body: AssignGuidesRequest,
    ctx: Context,
    lifecycle: Lifecycle,
    idempotency: Idempotency,
    idempotency_key: IdempotencyKey = None,
) -> JSONResponse:
    """Agency assigns the guides who will lead a booked trip."""

    def handler(_: dict[str, Any]) -> dict[str, Any]:
        booking = lifecycle.get_booking(booking_id)
        role = role_for(booking, ctx.user_id)
        updated = lifecycle.assign_guides(booking_id, body.guide_ids, role)
        return _booking_body(updated, ctx.user_id)

    wrapped = idempotency.wrap_handler(handler, ctx.user_id)
    return _respond(wrapped({"booking_id": booking_id, **body.model_dump()}, idempotency_key))
