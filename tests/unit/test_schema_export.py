"""Test JSON schema export for the booking wire shapes."""

import json
from pathlib import Path
from typing import Any

import pytest

from backend.app.models import Booking, BookingRequest
from scripts.export_schemas import main


@pytest.fixture
def schemas_dir(tmp_path: Path) -> Path:
    """Export schemas into a temporary directory."""
    main(tmp_path)
    return tmp_path


def _load(schemas_dir: Path, name: str) -> dict[str, Any]:
    with open(schemas_dir / f"{name}.schema.json") as f:
        return json.load(f)


def test_one_file_per_model(schemas_dir: Path) -> None:
    assert sorted(p.name for p in schemas_dir.iterdir()) == [
        "Booking.schema.json",
        "BookingRequest.schema.json",
        "PriceBreakdown.schema.json",
        "TourPackage.schema.json",
    ]


def test_booking_schema_includes_derived_amounts(schemas_dir: Path) -> None:
    schema = _load(schemas_dir, "Booking")
    assert schema["title"] == "Booking"
    assert "balance_due" in schema["properties"]
    assert "net_payout" in schema["properties"]


def test_exported_request_schema_matches_model(schemas_dir: Path) -> None:
    schema = _load(schemas_dir, "BookingRequest")
    assert schema == BookingRequest.model_json_schema(mode="serialization")


def test_example_booking_validates(schemas_dir: Path) -> None:
    """A wire payload using every required field loads into the model."""
    schema = _load(schemas_dir, "Booking")
    payload = {
        "id": "b1",
        "tourist_id": "t1",
        "provider": {"kind": "guide", "id": "g1"},
        "check_in": "2025-11-13",
        "num_guests": 2,
        "total_price": "600",
        "down_payment": "180",
        "commission": "12",
        "created_at": "2025-11-01T09:00:00Z",
    }
    booking = Booking.model_validate(payload)
    dumped = booking.model_dump(mode="json")
    assert set(schema["properties"]) <= set(dumped)
