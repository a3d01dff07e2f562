"""Catalog reference data - providers, destinations, packages, accommodations."""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.models.common import Amenities, GuideTier, ProviderKind
from backend.app.models.parsing import parse_amenities, parse_text_list, parse_timeline
from backend.app.models.timeline import TimelineEntry

# Sentinel weekday value meaning "every day"
ALL_DAYS = "All"


class CatalogModel(BaseModel):
    """Base for catalog records; backend ids may arrive as integers."""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class Provider(CatalogModel):
    """Counterparty fulfilling a booking."""

    kind: ProviderKind
    id: str
    display_name: str
    location: str = ""
    rating: float | None = Field(None, ge=0, le=5)


class Guide(Provider):
    """Individual tour guide."""

    kind: ProviderKind = ProviderKind.guide
    price_per_day: Decimal = Decimal("0")
    solo_price_per_day: Decimal = Decimal("0")
    additional_fee_per_head: Decimal = Decimal("0")
    available_days: list[str] = Field(default_factory=list)
    specific_available_dates: list[date] = Field(default_factory=list)
    guide_tier: GuideTier = GuideTier.free
    booking_count: int = Field(0, ge=0)


class Agency(Provider):
    """Tour agency."""

    kind: ProviderKind = ProviderKind.agency


class AccommodationHost(Provider):
    """Host offering accommodations."""

    kind: ProviderKind = ProviderKind.accommodation_host


class Destination(CatalogModel):
    """Destination reference data."""

    id: str
    name: str
    location: str = ""
    images: list[str] = Field(default_factory=list)
    attractions: list[str] = Field(default_factory=list)


class Stop(CatalogModel):
    """Featured place visited during a tour."""

    id: str
    name: str = ""
    image: str | None = None


class Transportation(BaseModel):
    """Transportation bundled with an accommodation."""

    vehicle_type: str
    capacity: int = Field(..., ge=1)


class Accommodation(CatalogModel):
    """Accommodation listing; price is per night."""

    id: str
    host_id: str
    title: str
    location: str = ""
    price: Decimal = Field(Decimal("0"), ge=0)
    accommodation_type: str = ""
    amenities: Amenities = Field(default_factory=Amenities)
    room_type: str | None = None
    transportation: Transportation | None = None
    photo: str | None = None

    @field_validator("amenities", mode="before")
    @classmethod
    def _parse_amenities(cls, v: Any) -> Amenities:
        return parse_amenities(v)


class TourPackage(CatalogModel):
    """Tour package published by a guide; immutable to tourists."""

    id: str
    guide_id: str
    destination_id: str
    name: str = ""
    description: str = ""
    duration_label: str = ""
    max_group_size: int | None = Field(None, ge=1)
    price_per_day: Decimal = Decimal("0")
    solo_price_per_day: Decimal = Decimal("0")
    additional_fee_per_head: Decimal = Decimal("0")
    what_to_bring: list[str] = Field(default_factory=list)
    stops: list[Stop] = Field(default_factory=list)
    itinerary_timeline: list[TimelineEntry] = Field(default_factory=list)

    @field_validator("itinerary_timeline", mode="before")
    @classmethod
    def _parse_timeline(cls, v: Any) -> list[TimelineEntry]:
        return parse_timeline(v)

    @field_validator("what_to_bring", mode="before")
    @classmethod
    def _parse_what_to_bring(cls, v: Any) -> list[str]:
        return parse_text_list(v)
