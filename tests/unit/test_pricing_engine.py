"""Unit tests for the pricing engine."""

from decimal import Decimal

import pytest

from backend.app.bookings.errors import ValidationError
from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryCatalog
from backend.app.models.catalog import Guide, TourPackage
from backend.app.pricing.engine import (
    attached_accommodation,
    compute_breakdown,
    quote,
    quote_accommodation,
    resolve_rates,
    select_base_price,
)


def _package(**overrides: object) -> TourPackage:
    fields: dict[str, object] = {
        "id": "pkg",
        "guide_id": "guide-1",
        "destination_id": "dest-1",
        "price_per_day": Decimal("500"),
        "additional_fee_per_head": Decimal("50"),
    }
    fields.update(overrides)
    return TourPackage(**fields)


class TestScenarios:
    """Reference quotes for a 500/50 package."""

    def test_single_guest(self, settings: Settings) -> None:
        breakdown = quote(None, 1, _package(), settings=settings)

        assert breakdown.extra_guest_fee == Decimal("0")
        assert breakdown.total_price == Decimal("500")
        assert breakdown.down_payment == Decimal("150")
        assert breakdown.balance_due == Decimal("350")
        assert breakdown.commission == Decimal("10")
        assert breakdown.net_payout == Decimal("140")

    def test_three_guests(self, settings: Settings) -> None:
        breakdown = quote(None, 3, _package(), settings=settings)

        assert breakdown.billable_extra_guests == 2
        assert breakdown.extra_guest_fee == Decimal("100")
        assert breakdown.total_price == Decimal("600")
        assert breakdown.down_payment == Decimal("180")
        assert breakdown.balance_due == Decimal("420")


class TestComputeBreakdown:
    def test_is_idempotent(self, settings: Settings) -> None:
        first = compute_breakdown(Decimal("1234"), Decimal("75"), 4, Decimal("300"), settings=settings)
        second = compute_breakdown(Decimal("1234"), Decimal("75"), 4, Decimal("300"), settings=settings)
        assert first == second

    def test_recomputed_in_full_when_guests_change(self, settings: Settings) -> None:
        """Going 3 -> 2 -> 3 guests lands on the same quote, not an accumulated one."""
        three = compute_breakdown(Decimal("500"), Decimal("50"), 3, settings=settings)
        compute_breakdown(Decimal("500"), Decimal("50"), 2, settings=settings)
        again = compute_breakdown(Decimal("500"), Decimal("50"), 3, settings=settings)
        assert again == three

    @pytest.mark.parametrize(
        ("total", "expected_down"),
        [
            (Decimal("505"), Decimal("152")),  # 151.5 rounds half up
            (Decimal("501"), Decimal("150")),  # 150.3 rounds down
            (Decimal("1005"), Decimal("302")),  # 301.5 rounds half up
        ],
    )
    def test_down_payment_rounds_half_up_to_whole_units(
        self, settings: Settings, total: Decimal, expected_down: Decimal
    ) -> None:
        breakdown = compute_breakdown(total, Decimal("0"), 1, settings=settings)
        assert breakdown.down_payment == expected_down
        assert breakdown.balance_due == total - expected_down

    def test_commission_is_exact(self, settings: Settings) -> None:
        breakdown = compute_breakdown(Decimal("505"), Decimal("0"), 1, settings=settings)
        assert breakdown.commission == Decimal("10.10")
        assert breakdown.net_payout == Decimal("152") - Decimal("10.10")

    def test_commission_is_not_added_to_total(self, settings: Settings) -> None:
        breakdown = compute_breakdown(Decimal("500"), Decimal("0"), 1, settings=settings)
        assert breakdown.total_price == Decimal("500")

    def test_balance_plus_down_payment_is_total(self, settings: Settings) -> None:
        for guests in range(1, 8):
            b = compute_breakdown(Decimal("333"), Decimal("17"), guests, Decimal("91"), settings=settings)
            assert b.down_payment + b.balance_due == b.total_price

    def test_zero_guests_rejected(self, settings: Settings) -> None:
        with pytest.raises(ValidationError):
            compute_breakdown(Decimal("500"), Decimal("50"), 0, settings=settings)

    def test_negative_price_rejected(self, settings: Settings) -> None:
        with pytest.raises(ValidationError):
            compute_breakdown(Decimal("-1"), Decimal("50"), 1, settings=settings)

    def test_float_inputs_do_not_leak_binary_artefacts(self, settings: Settings) -> None:
        breakdown = compute_breakdown(0.1, 0.2, 2, settings=settings)  # type: ignore[arg-type]
        assert breakdown.total_price == Decimal("0.3")

    def test_rates_come_from_settings(self) -> None:
        custom = Settings(_env_file=None, down_payment_rate=Decimal("0.5"), commission_rate=Decimal("0.1"))
        breakdown = compute_breakdown(Decimal("1000"), Decimal("0"), 1, settings=custom)
        assert breakdown.down_payment == Decimal("500")
        assert breakdown.commission == Decimal("100")


class TestBasePrice:
    def test_solo_price_for_one_guest(self) -> None:
        assert select_base_price(Decimal("1000"), Decimal("900"), 1) == Decimal("900")

    def test_group_price_for_several_guests(self) -> None:
        assert select_base_price(Decimal("1000"), Decimal("900"), 2) == Decimal("1000")

    def test_unset_solo_price_falls_back_to_group(self) -> None:
        assert select_base_price(Decimal("500"), Decimal("0"), 1) == Decimal("500")

    def test_per_head_fee_applies_on_top_of_group_price(self, settings: Settings) -> None:
        """Group price still bills every guest beyond the first."""
        breakdown = quote(
            None, 2, _package(solo_price_per_day=Decimal("400")), settings=settings
        )
        assert breakdown.base_price == Decimal("500")
        assert breakdown.extra_guest_fee == Decimal("50")


class TestRates:
    def test_package_rates_win_over_guide(self) -> None:
        guide = Guide(id="g", display_name="G", price_per_day=Decimal("9999"))
        assert resolve_rates(guide, _package()) == (Decimal("500"), Decimal("0"), Decimal("50"))

    def test_guide_rates_used_without_package(self, settings: Settings) -> None:
        guide = Guide(
            id="g",
            display_name="G",
            price_per_day=Decimal("700"),
            solo_price_per_day=Decimal("600"),
            additional_fee_per_head=Decimal("80"),
        )
        assert quote(guide, 1, settings=settings).total_price == Decimal("600")
        assert quote(guide, 3, settings=settings).total_price == Decimal("860")

    def test_neither_guide_nor_package(self) -> None:
        with pytest.raises(ValidationError):
            resolve_rates(None, None)


class TestAccommodationInclusion:
    def test_first_itinerary_accommodation_attached(self, catalog: InMemoryCatalog) -> None:
        package = catalog.get_tour_package("pkg-overnight")
        accommodation = attached_accommodation(package, catalog.list_accommodations())
        assert accommodation is not None
        assert accommodation.id == "accom-1"

    def test_package_without_accommodation(self, catalog: InMemoryCatalog) -> None:
        package = catalog.get_tour_package("pkg-day")
        assert attached_accommodation(package, catalog.list_accommodations()) is None
        assert attached_accommodation(None, catalog.list_accommodations()) is None

    def test_nightly_price_added_once(self, catalog: InMemoryCatalog, settings: Settings) -> None:
        package = catalog.get_tour_package("pkg-overnight")
        accommodation = catalog.get_accommodation("accom-1")

        breakdown = quote(None, 2, package, accommodation, settings=settings)

        # 1000 group + 100 per extra head + 800 once
        assert breakdown.accommodation_inclusion == Decimal("800")
        assert breakdown.total_price == Decimal("1900")
        assert breakdown.down_payment == Decimal("570")

    def test_accommodation_only_quote(self, catalog: InMemoryCatalog, settings: Settings) -> None:
        accommodation = catalog.get_accommodation("accom-1")
        assert accommodation is not None

        breakdown = quote_accommodation(accommodation, 3, settings=settings)

        assert breakdown.total_price == Decimal("800")
        assert breakdown.extra_guest_fee == Decimal("0")
        assert breakdown.down_payment == Decimal("240")
