"""Price breakdown computation for tour, guide and accommodation bookings.

The breakdown is a pure function of (base price, fee per head, guest
count, accommodation inclusion) plus the configured rates. Quotes are
always recomputed in full when the guest count changes, never adjusted
incrementally.

Known behaviour kept as-is:
- The per-head fee applies to every guest beyond the first even when the
  group base price is selected.
- An attached accommodation's nightly price is added once, regardless of
  the number of nights.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from backend.app.bookings.errors import ValidationError
from backend.app.config import Settings, get_settings
from backend.app.itinerary.timeline import first_accommodation_id
from backend.app.models.booking import PriceBreakdown
from backend.app.models.catalog import Accommodation, Guide, TourPackage

_WHOLE_UNIT = Decimal("1")


def _money(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, float):
        # Avoid binary float artefacts (0.1 -> 0.1000000000000000055...)
        return Decimal(str(value))
    return Decimal(value)


def select_base_price(group_price: Decimal, solo_price: Decimal, num_guests: int) -> Decimal:
    """Solo price for a single guest, group price otherwise.

    An unset (zero) solo price falls back to the group price.
    """
    solo = _money(solo_price)
    if num_guests == 1 and solo > 0:
        return solo
    return _money(group_price)


def resolve_rates(
    guide: Guide | None, package: TourPackage | None
) -> tuple[Decimal, Decimal, Decimal]:
    """Return (group price, solo price, fee per head), package first, guide as fallback."""
    source: Guide | TourPackage | None = package if package is not None else guide
    if source is None:
        raise ValidationError("A tour package or guide is required to price this booking")
    return (
        _money(source.price_per_day),
        _money(source.solo_price_per_day),
        _money(source.additional_fee_per_head),
    )


def attached_accommodation(
    package: TourPackage | None, accommodations: Sequence[Accommodation]
) -> Accommodation | None:
    """First accommodation referenced by the package itinerary, if any is known."""
    if package is None:
        return None
    accommodation_id = first_accommodation_id(package.itinerary_timeline)
    if accommodation_id is None:
        return None
    return next((a for a in accommodations if a.id == accommodation_id), None)


def compute_breakdown(
    base_price: Decimal,
    additional_fee_per_head: Decimal,
    num_guests: int,
    accommodation_inclusion: Decimal = Decimal("0"),
    *,
    settings: Settings | None = None,
) -> PriceBreakdown:
    """Compute the full price breakdown.

    Args:
        base_price: Selected base price (solo or group)
        additional_fee_per_head: Fee per guest beyond the included count
        num_guests: Number of guests (>= 1)
        accommodation_inclusion: Nightly price of an attached accommodation, added once
        settings: Rate configuration (defaults to application settings)

    Returns:
        PriceBreakdown

    Raises:
        ValidationError: If num_guests < 1 or any amount is negative
    """
    settings = settings or get_settings()

    if num_guests < 1:
        raise ValidationError("Number of guests must be at least 1")

    base = _money(base_price)
    fee = _money(additional_fee_per_head)
    inclusion = _money(accommodation_inclusion)
    if base < 0 or fee < 0 or inclusion < 0:
        raise ValidationError("Prices must not be negative")

    billable_extra = max(0, num_guests - settings.base_included_guests)
    extra_guest_fee = fee * billable_extra
    total = base + extra_guest_fee + inclusion

    down_payment = (total * settings.down_payment_rate).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)
    commission = total * settings.commission_rate

    return PriceBreakdown(
        num_guests=num_guests,
        base_price=base,
        additional_fee_per_head=fee,
        billable_extra_guests=billable_extra,
        extra_guest_fee=extra_guest_fee,
        accommodation_inclusion=inclusion,
        total_price=total,
        down_payment=down_payment,
        balance_due=total - down_payment,
        commission=commission,
        net_payout=down_payment - commission,
    )


def quote(
    guide: Guide | None,
    num_guests: int,
    package: TourPackage | None = None,
    accommodation: Accommodation | None = None,
    *,
    settings: Settings | None = None,
) -> PriceBreakdown:
    """Quote a guided booking from the guide, optional package and accommodation."""
    group_price, solo_price, fee = resolve_rates(guide, package)
    base = select_base_price(group_price, solo_price, num_guests)
    inclusion = accommodation.price if accommodation is not None else Decimal("0")
    return compute_breakdown(base, fee, num_guests, inclusion, settings=settings)


def quote_accommodation(
    accommodation: Accommodation, num_guests: int, *, settings: Settings | None = None
) -> PriceBreakdown:
    """Quote a pure accommodation booking: the nightly price, no per-head fee."""
    return compute_breakdown(
        accommodation.price, Decimal("0"), num_guests, Decimal("0"), settings=settings
    )
