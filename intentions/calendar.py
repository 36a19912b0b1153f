"""Calendar ranges for day, week and month scopes.

Every range is half-open, ``[start, end)``, and ``start <= reference < end``
holds for the reference it was computed from. Week boundaries depend on the
configured first weekday rather than on the host locale.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from intentions.models import Scope

SUNDAY = 0


def sunday_based_weekday(value: date) -> int:
    """Weekday index with 0=Sunday..6=Saturday."""
    return (value.weekday() + 1) % 7


@dataclass(frozen=True)
class CalendarConfig:
    """first_weekday uses 0=Sunday..6=Saturday; timezone is an IANA name."""

    first_weekday: int = SUNDAY
    timezone: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.first_weekday <= 6:
            raise ValueError(f"first_weekday must be 0..6, got {self.first_weekday}")

    @property
    def tzinfo(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


class ScopeCalendar:
    """Stateless range arithmetic bound to one calendar configuration."""

    def __init__(self, config: CalendarConfig | None = None) -> None:
        self.config = config or CalendarConfig()
        self._tz = self.config.tzinfo

    def normalize(self, value: date | datetime) -> datetime:
        """Bring a date or datetime into the configured zone.

        Plain dates become midnight; naive datetimes are read as wall time in
        the configured zone.
        """
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        if self._tz is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tz)
        return value.astimezone(self._tz)

    def compute_range(self, scope: Scope, reference: date | datetime) -> tuple[datetime, datetime]:
        ref = self.normalize(reference)
        day_start = ref.replace(hour=0, minute=0, second=0, microsecond=0)
        if scope is Scope.DAY:
            return day_start, day_start + timedelta(days=1)
        if scope is Scope.WEEK:
            offset = (sunday_based_weekday(day_start) - self.config.first_weekday) % 7
            start = day_start - timedelta(days=offset)
            return start, start + timedelta(days=7)
        if scope is Scope.MONTH:
            start = day_start.replace(day=1)
            if start.month == 12:
                end = start.replace(year=start.year + 1, month=1)
            else:
                end = start.replace(month=start.month + 1)
            return start, end
        raise ValueError(f"unknown scope: {scope!r}")

    def scope_start(self, scope: Scope, reference: date | datetime) -> datetime:
        return self.compute_range(scope, reference)[0]

    def contains(self, scope: Scope, reference: date | datetime, candidate: date | datetime) -> bool:
        """True if candidate falls inside the scope range around reference."""
        start, end = self.compute_range(scope, reference)
        return start <= self.normalize(candidate) < end

    def same_slot(self, scope: Scope, a: date | datetime, b: date | datetime) -> bool:
        return self.compute_range(scope, a) == self.compute_range(scope, b)


def compute_range(
    scope: Scope,
    reference: date | datetime,
    config: CalendarConfig | None = None,
) -> tuple[datetime, datetime]:
    """Module-level shortcut for ScopeCalendar(config).compute_range."""
    return ScopeCalendar(config).compute_range(scope, reference)
