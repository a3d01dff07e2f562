"""Tests for booking models, status parsing and role visibility."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from backend.app.bookings.errors import ERRORS_BY_CODE, NotFound, TierLimitExceeded, ValidationError
from backend.app.bookings.visibility import role_for, split_bookings, view_for
from backend.app.models.booking import Booking, BookingRequest, ProviderRef
from backend.app.models.common import ActorRole, BookingStatus, BookingView, ProviderKind


def _booking(booking_id: str, tourist_id: str, provider_id: str) -> Booking:
    return Booking(
        id=booking_id,
        tourist_id=tourist_id,
        provider=ProviderRef(kind=ProviderKind.guide, id=provider_id),
        check_in=date(2025, 11, 13),
        num_guests=2,
        total_price=Decimal("600"),
        down_payment=Decimal("180"),
        commission=Decimal("12"),
        created_at=datetime(2025, 11, 1, tzinfo=timezone.utc),
    )


class TestBookingStatusParsing:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("pending", BookingStatus.pending),
            ("Pending", BookingStatus.pending),
            ("ACCEPTED", BookingStatus.accepted),
            ("PendingPayment", BookingStatus.pending_payment),
            ("pending-payment", BookingStatus.pending_payment),
            ("paid", BookingStatus.completed),
            ("Cancelled", BookingStatus.cancelled),
        ],
    )
    def test_tolerant_values(self, raw: str, expected: BookingStatus) -> None:
        assert BookingStatus(raw) == expected

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            BookingStatus("teleported")

    def test_booking_accepts_legacy_status(self) -> None:
        data = _booking("b1", "t1", "g1").model_dump(mode="json")
        data["status"] = "PendingPayment"
        assert Booking.model_validate(data).status == BookingStatus.pending_payment


class TestBookingModel:
    def test_derived_amounts(self) -> None:
        booking = _booking("b1", "t1", "g1")
        assert booking.balance_due == Decimal("420")
        assert booking.net_payout == Decimal("168")

    def test_derived_amounts_are_serialized(self) -> None:
        data = _booking("b1", "t1", "g1").model_dump(mode="json")
        assert Decimal(data["balance_due"]) == Decimal("420")
        assert Decimal(data["net_payout"]) == Decimal("168")

    def test_serialized_booking_loads_back(self) -> None:
        booking = _booking("b1", "t1", "g1")
        assert Booking.model_validate(booking.model_dump(mode="json")) == booking

    def test_guest_count_must_be_positive(self) -> None:
        data = _booking("b1", "t1", "g1").model_dump()
        data["num_guests"] = 0
        with pytest.raises(PydanticValidationError):
            Booking.model_validate(data)

    def test_numeric_ids_are_coerced(self) -> None:
        request = BookingRequest.model_validate(
            {"provider": {"kind": "guide", "id": 12}, "destination_id": 3, "check_in": "2025-11-13"}
        )
        assert request.provider == ProviderRef(kind=ProviderKind.guide, id="12")
        assert request.destination_id == "3"


class TestVisibility:
    def test_roles(self) -> None:
        booking = _booking("b1", "alice", "bob")
        assert role_for(booking, "alice") == ActorRole.tourist
        assert role_for(booking, "bob") == ActorRole.provider
        with pytest.raises(NotFound):
            role_for(booking, "carol")

    def test_views(self) -> None:
        booking = _booking("b1", "alice", "bob")
        assert view_for(booking, "alice") == BookingView.my_trip
        assert view_for(booking, "bob") == BookingView.client_booking
        assert view_for(booking, "carol") is None

    def test_split_is_disjoint_and_ordered(self) -> None:
        bookings = [
            _booking("b1", "alice", "bob"),
            _booking("b2", "bob", "dan"),
            _booking("b3", "carol", "dan"),
            _booking("b4", "eve", "bob"),
        ]
        views = split_bookings(bookings, "bob")

        assert [b.id for b in views.my_trips] == ["b2"]
        assert [b.id for b in views.client_bookings] == ["b1", "b4"]


class TestErrors:
    def test_codes_are_unique_and_complete(self) -> None:
        assert set(ERRORS_BY_CODE) == {
            "validation_error",
            "availability_conflict",
            "invalid_transition",
            "tier_limit_exceeded",
            "not_found",
            "transport_error",
        }

    def test_recoverable_errors(self) -> None:
        assert ValidationError("x").recoverable is True
        assert TierLimitExceeded("x").recoverable is True
        assert NotFound("x").recoverable is False
