"""Itinerary timeline models."""

from pydantic import BaseModel, ConfigDict, model_validator

from backend.app.models.common import TimelineEntryKind


class TimelineRef(BaseModel):
    """Reference from a timeline entry to a Stop or Accommodation record."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    kind: TimelineEntryKind
    id: str


class TimelineEntry(BaseModel):
    """One scheduled activity within a tour package itinerary.

    Times are free-form display strings ("08:00 AM", "Day 1 noon"); they
    are never parsed to a clock. Legacy entries may have no ``ref``: stops
    are then matched by ``activity_name`` and accommodations show no image.
    """

    model_config = ConfigDict(frozen=True)

    start_time: str
    end_time: str
    kind: TimelineEntryKind
    activity_name: str
    ref: TimelineRef | None = None

    @model_validator(mode="after")
    def _ref_matches_kind(self) -> "TimelineEntry":
        if self.ref is not None and self.ref.kind != self.kind:
            raise ValueError(f"ref kind {self.ref.kind.value} does not match entry kind {self.kind.value}")
        return self
