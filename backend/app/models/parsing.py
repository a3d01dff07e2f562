"""Deserialization boundary for serialized structured text fields.

Itinerary timelines, amenity flags and free-text lists arrive from the
backend either already parsed or as JSON text. These helpers are the only
place that tolerance lives: every caller receives a typed value, and a
parse failure degrades to an empty default instead of raising.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from backend.app.models.common import Amenities, TimelineEntryKind
from backend.app.models.timeline import TimelineEntry, TimelineRef

logger = logging.getLogger(__name__)

# Wire spellings of the timeline entry type
_KIND_ALIASES = {
    "stop": TimelineEntryKind.stop,
    "accom": TimelineEntryKind.accommodation,
    "accommodation": TimelineEntryKind.accommodation,
}

_WIRE_KIND = {
    TimelineEntryKind.stop: "stop",
    TimelineEntryKind.accommodation: "accom",
}


def _load_json(raw: Any, field: str) -> Any:
    """Decode JSON text; pass through anything already structured."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Unparseable {field} payload, using empty default")
            return None
    return raw


def _entry_from_wire(item: Any) -> TimelineEntry:
    """Build a TimelineEntry from a legacy camelCase or snake_case dict."""
    if isinstance(item, TimelineEntry):
        return item
    if not isinstance(item, dict):
        raise ValueError(f"timeline item must be an object, got {type(item).__name__}")

    raw_kind = item.get("type", item.get("kind"))
    if isinstance(raw_kind, TimelineEntryKind):
        kind: TimelineEntryKind | None = raw_kind
    else:
        kind = _KIND_ALIASES.get(str(raw_kind).lower()) if raw_kind is not None else None
    if kind is None:
        raise ValueError(f"unknown timeline entry type: {raw_kind!r}")

    ref: TimelineRef | None = None
    raw_ref = item.get("ref")
    if isinstance(raw_ref, dict):
        ref = TimelineRef.model_validate(raw_ref)
    else:
        ref_id = item.get("refId", item.get("ref_id"))
        if ref_id not in (None, ""):
            ref = TimelineRef(kind=kind, id=str(ref_id))

    return TimelineEntry(
        start_time=str(item.get("startTime", item.get("start_time", "")) or ""),
        end_time=str(item.get("endTime", item.get("end_time", "")) or ""),
        kind=kind,
        activity_name=str(item.get("activityName", item.get("activity_name", "")) or ""),
        ref=ref,
    )


def parse_timeline(raw: Any) -> list[TimelineEntry]:
    """Parse an itinerary timeline from any tolerated shape.

    Args:
        raw: None, JSON text, or a sequence of dicts / TimelineEntry

    Returns:
        Entries in stored order; empty list on any failure
    """
    data = _load_json(raw, "itinerary_timeline")
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(
            "itinerary_timeline is not a list, using empty default",
            extra={"structured": {"type": type(data).__name__}},
        )
        return []

    try:
        return [_entry_from_wire(item) for item in data]
    except (ValueError, TypeError, PydanticValidationError) as e:
        logger.warning(f"Invalid itinerary_timeline entry ({e}), using empty default")
        return []


def dump_timeline(entries: list[TimelineEntry]) -> list[dict[str, Any]]:
    """Serialize entries to the legacy camelCase wire form."""
    return [
        {
            "startTime": entry.start_time,
            "endTime": entry.end_time,
            "type": _WIRE_KIND[entry.kind],
            "activityName": entry.activity_name,
            "refId": entry.ref.id if entry.ref else None,
        }
        for entry in entries
    ]


def parse_amenities(raw: Any) -> Amenities:
    """Parse amenity flags; unknown keys are dropped, invalid input yields no flags."""
    data = _load_json(raw, "amenities")
    if isinstance(data, Amenities):
        return data
    if isinstance(data, list):
        # Some hosts send the enabled flags as a list of names
        data = {str(name).lower(): True for name in data}
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("amenities is not an object, using empty default")
        return Amenities()

    return Amenities(**{name: bool(data.get(name, False)) for name in Amenities.model_fields})


def parse_text_list(raw: Any) -> list[str]:
    """Parse a list of display strings (what to bring, inclusions).

    A list is taken as-is, JSON text holding a list is decoded, and any
    other non-empty string becomes a single item.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw if str(item).strip()]
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                return [text]
            if isinstance(decoded, list):
                return [str(item) for item in decoded if str(item).strip()]
        return [text]
    return []
