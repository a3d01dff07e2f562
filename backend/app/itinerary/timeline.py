"""Tour package itinerary timeline.

A timeline is an ordered list of entries, presented in insertion order.
Entries are not sorted by start time and overlap is not checked.
"""

import json
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from backend.app.bookings.errors import ValidationError
from backend.app.models.catalog import Accommodation, Stop, TourPackage
from backend.app.models.common import TimelineEntryKind
from backend.app.models.parsing import dump_timeline, parse_timeline
from backend.app.models.timeline import TimelineEntry, TimelineRef


def build_entry(
    start_time: str,
    end_time: str,
    kind: TimelineEntryKind,
    target: Stop | Accommodation | None,
    index: int = 0,
) -> TimelineEntry:
    """Build a timeline entry for a stop or an accommodation.

    Args:
        start_time: Display start time
        end_time: Display end time
        kind: Entry kind
        target: Selected Stop or Accommodation
        index: Position of the stop in the package, used for the fallback name

    Returns:
        TimelineEntry with activity name and reference resolved

    Raises:
        ValidationError: If the target does not match the entry kind
    """
    if kind == TimelineEntryKind.stop:
        if target is not None and not isinstance(target, Stop):
            raise ValidationError("Stop entries must reference a stop")
        name = target.name.strip() if target is not None and target.name else ""
        return TimelineEntry(
            start_time=start_time,
            end_time=end_time,
            kind=kind,
            activity_name=name or f"Stop {index + 1}",
            ref=TimelineRef(kind=kind, id=target.id) if target is not None else None,
        )

    if not isinstance(target, Accommodation):
        raise ValidationError("Accommodation entries must reference an accommodation")
    return TimelineEntry(
        start_time=start_time,
        end_time=end_time,
        kind=kind,
        activity_name=target.title,
        ref=TimelineRef(kind=kind, id=target.id),
    )


class Timeline:
    """Ordered itinerary for a tour package."""

    def __init__(self, entries: Iterable[TimelineEntry] = ()) -> None:
        self._entries: list[TimelineEntry] = list(entries)

    @classmethod
    def from_raw(cls, raw: Any) -> "Timeline":
        """Build from any stored shape; unparseable input gives an empty timeline."""
        return cls(parse_timeline(raw))

    def append(self, entry: TimelineEntry) -> None:
        """Add an entry at the end."""
        self._entries.append(entry)

    def __iter__(self) -> Iterator[TimelineEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> TimelineEntry:
        return self._entries[index]

    @property
    def entries(self) -> list[TimelineEntry]:
        return list(self._entries)

    def to_wire(self) -> list[dict[str, Any]]:
        return dump_timeline(self._entries)

    def dumps(self) -> str:
        return json.dumps(self.to_wire())


def resolve_image(
    entry: TimelineEntry,
    stops: Sequence[Stop],
    accommodations: Sequence[Accommodation],
) -> str | None:
    """Find a display thumbnail for an entry.

    Both kinds resolve by reference id. Legacy stop entries that only carry
    a name are matched by name equality. No match yields None.
    """
    if entry.kind == TimelineEntryKind.accommodation:
        if entry.ref is None:
            return None
        accommodation = next((a for a in accommodations if a.id == entry.ref.id), None)
        return accommodation.photo if accommodation else None

    if entry.ref is not None:
        stop = next((s for s in stops if s.id == entry.ref.id), None)
    else:
        stop = next((s for s in stops if s.name and s.name == entry.activity_name), None)
    return stop.image if stop else None


def first_accommodation_id(entries: Iterable[TimelineEntry]) -> str | None:
    """Id of the first accommodation referenced by the timeline."""
    for entry in entries:
        if entry.kind == TimelineEntryKind.accommodation and entry.ref is not None:
            return entry.ref.id
    return None


def accommodation_ids(packages: Iterable[TourPackage]) -> set[str]:
    """All accommodation ids referenced by the packages' itineraries."""
    return {
        entry.ref.id
        for package in packages
        for entry in package.itinerary_timeline
        if entry.kind == TimelineEntryKind.accommodation and entry.ref is not None
    }


def relevant_accommodations(
    packages: Sequence[TourPackage], accommodations: Sequence[Accommodation]
) -> list[Accommodation]:
    """Accommodations referenced by the itineraries, or all of them when none are."""
    referenced = accommodation_ids(packages)
    if not referenced:
        return list(accommodations)
    return [a for a in accommodations if a.id in referenced]
