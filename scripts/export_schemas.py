"""Export JSON schemas for the booking wire shapes."""

import json
from pathlib import Path

from pydantic import BaseModel

from backend.app.models import Booking, BookingRequest, PriceBreakdown, TourPackage

SCHEMA_MODELS: tuple[type[BaseModel], ...] = (TourPackage, BookingRequest, Booking, PriceBreakdown)


def main(schemas_dir: Path = Path("docs/schemas")) -> list[Path]:
    """Export schemas to docs/schemas/."""
    schemas_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for model in SCHEMA_MODELS:
        # Serialization mode so computed fields (balance_due, net_payout) appear
        schema = model.model_json_schema(mode="serialization")
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")
        written.append(path)
    return written


if __name__ == "__main__":
    main()
