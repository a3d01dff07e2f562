"""Provider availability calendar.

A date is Blocked when a non-terminal booking holds it, Available when the
guide explicitly opened it, and Unavailable otherwise. Blocked wins over
Available.
"""

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from backend.app.bookings.state_machine import BLOCKING_STATUSES
from backend.app.models.booking import Booking, ProviderRef
from backend.app.models.catalog import ALL_DAYS
from backend.app.models.common import DateStatus

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def stay_dates(check_in: date, check_out: date | None = None) -> list[date]:
    """Dates covered by a booking, inclusive of both ends.

    A missing or earlier check-out covers the check-in date only.
    """
    if check_out is None or check_out <= check_in:
        return [check_in]
    return [check_in + timedelta(days=i) for i in range((check_out - check_in).days + 1)]


def blocked_dates(bookings: Iterable[Booking], provider: ProviderRef) -> set[date]:
    """Dates held by the provider's bookings in a blocking status."""
    blocked: set[date] = set()
    for booking in bookings:
        if booking.provider != provider or booking.status not in BLOCKING_STATUSES:
            continue
        blocked.update(stay_dates(booking.check_in, booking.check_out))
    return blocked


@dataclass(frozen=True)
class GuideAvailability:
    """Snapshot of a provider's open and blocked dates."""

    specific_available_dates: frozenset[date] = field(default_factory=frozenset)
    blocked: frozenset[date] = field(default_factory=frozenset)
    # Providers without an explicit calendar accept any date that is not blocked
    open_by_default: bool = False

    def classify(self, day: date) -> DateStatus:
        """Classify a single date."""
        if day in self.blocked:
            return DateStatus.blocked
        if self.open_by_default or day in self.specific_available_dates:
            return DateStatus.available
        return DateStatus.unavailable

    def classify_range(self, check_in: date, check_out: date | None = None) -> dict[date, DateStatus]:
        """Classify every date a stay would cover."""
        return {day: self.classify(day) for day in stay_dates(check_in, check_out)}

    def unbookable(self, check_in: date, check_out: date | None = None) -> list[date]:
        """Dates of the stay that are not Available."""
        return [
            day
            for day, status in self.classify_range(check_in, check_out).items()
            if status != DateStatus.available
        ]

    def is_bookable(self, check_in: date, check_out: date | None = None) -> bool:
        return not self.unbookable(check_in, check_out)

    def month(self, year: int, month: int) -> dict[date, DateStatus]:
        """Classify every date of a calendar month."""
        _, days_in_month = calendar.monthrange(year, month)
        return {
            date(year, month, day): self.classify(date(year, month, day))
            for day in range(1, days_in_month + 1)
        }


def weekly_schedule(available_days: Iterable[str], year: int, month: int) -> list[date]:
    """Dates of a month that fall on the guide's standard weekdays.

    Weekday names are matched on their first three letters, case-insensitively;
    the "All" sentinel selects every day. Display only: booking checks use
    the explicit calendar.
    """
    names = {str(d).strip()[:3].lower() for d in available_days}
    every_day = ALL_DAYS.lower()[:3] in names
    _, days_in_month = calendar.monthrange(year, month)
    result = []
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        if every_day or WEEKDAY_NAMES[current.weekday()].lower() in names:
            result.append(current)
    return result
