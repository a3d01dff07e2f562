"""Booking models - request, price breakdown and the booking record."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from backend.app.models.common import BookingStatus, ProviderKind


class ProviderRef(BaseModel):
    """Tagged reference to the booking's single provider."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    kind: ProviderKind
    id: str


class PriceBreakdown(BaseModel):
    """Deterministic price breakdown for a quote or booking."""

    model_config = ConfigDict(frozen=True)

    num_guests: int
    base_price: Decimal
    additional_fee_per_head: Decimal
    billable_extra_guests: int
    extra_guest_fee: Decimal
    accommodation_inclusion: Decimal
    total_price: Decimal
    down_payment: Decimal
    balance_due: Decimal
    commission: Decimal
    net_payout: Decimal


class BookingRequest(BaseModel):
    """Tourist-submitted booking request.

    Required fields are checked by the lifecycle so that a missing
    provider or date surfaces as an actionable ValidationError.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    provider: ProviderRef | None = None
    destination_id: str | None = None
    tour_package_id: str | None = None
    accommodation_id: str | None = None
    check_in: date | None = None
    check_out: date | None = None
    num_guests: int = 1


class Booking(BaseModel):
    """Booking record.

    Mutated only through lifecycle transitions. ``balance_due`` and
    ``net_payout`` are derived on every read.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    tourist_id: str
    provider: ProviderRef
    destination_id: str | None = None
    tour_package_id: str | None = None
    accommodation_id: str | None = None
    check_in: date
    check_out: date | None = None
    num_guests: int = Field(..., ge=1)
    status: BookingStatus = BookingStatus.pending
    total_price: Decimal
    down_payment: Decimal
    commission: Decimal
    # Balance collected directly by the provider (cash/offline) via mark_paid
    settled_offline: Decimal = Decimal("0")
    # Guides an agency assigned to lead the trip
    assigned_guide_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance_due(self) -> Decimal:
        return self.total_price - self.down_payment - self.settled_offline

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net_payout(self) -> Decimal:
        return self.down_payment - self.commission
