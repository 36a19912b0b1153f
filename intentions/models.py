"""Core data models: intentions, reminder settings and trigger specs."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Literal

from intentions.errors import ValidationError

MAX_TEXT_LENGTH = 100


class Scope(Enum):
    """Time horizon an intention applies to."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# Fixed display precedence: finer scopes win.
SCOPE_PRECEDENCE: tuple[Scope, ...] = (Scope.DAY, Scope.WEEK, Scope.MONTH)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Intention:
    """A single commitment for one day, week or month.

    anchor_date identifies the range the intention belongs to; it need not
    be "today". Text is trimmed on construction.
    """

    text: str
    scope: Scope
    anchor_date: datetime
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    ai_generated: bool = False
    ai_rephrased: bool = False
    theme_id: str | None = None
    quote: str | None = None
    font_name: str | None = None

    def __post_init__(self) -> None:
        self.text = validate_text(self.text)
        if not isinstance(self.scope, Scope):
            self.scope = Scope(self.scope)


def validate_text(text: str | None, min_length: int = 1) -> str:
    """Return trimmed text; raise ValidationError if too short or too long."""
    trimmed = (text or "").strip()
    if not trimmed:
        raise ValidationError("intention text is empty")
    if len(trimmed) < min_length:
        raise ValidationError(f"intention text must be at least {min_length} characters")
    if len(trimmed) > MAX_TEXT_LENGTH:
        raise ValidationError(f"intention text exceeds {MAX_TEXT_LENGTH} characters ({len(trimmed)})")
    return trimmed


class Frequency(Enum):
    ONCE_PER_MONTH = "once_per_month"
    TWICE_PER_MONTH = "twice_per_month"
    ONCE_PER_WEEK = "once_per_week"
    TWICE_PER_WEEK = "twice_per_week"
    EVERY_OTHER_DAY = "every_other_day"
    DAILY = "daily"
    TWICE_DAILY = "twice_daily"


class ReminderType(Enum):
    """Kinds of reminder content a user can opt into."""

    REMINDER_TO_ADD = "reminder_to_add"
    REMINDER_OF_INTENTION = "reminder_of_intention"
    ENCOURAGEMENT = "encouragement"
    TIME_OF_DAY = "time_of_day"


@dataclass(frozen=True)
class BlackoutWindow:
    """Quiet hours; start > end means the window wraps past midnight."""

    start_hour: int = 22
    start_minute: int = 0
    end_hour: int = 8
    end_minute: int = 0

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute


@dataclass(frozen=True)
class LegacyReminder:
    """Single-purpose daily/weekly/monthly preference kept for old settings.

    day is a weekday (0=Sunday) for the weekly reminder and a day of month
    for the monthly one; it is ignored for the daily reminder.
    """

    enabled: bool = False
    time_of_day: time | None = None
    day: int = 0


@dataclass(frozen=True)
class ReminderSettings:
    frequency: Frequency = Frequency.DAILY
    enabled_types: frozenset[ReminderType] = frozenset({ReminderType.REMINDER_TO_ADD})
    morning_time: time = time(8, 0)
    evening_time: time = time(20, 0)
    blackout_enabled: bool = True
    blackout_window: BlackoutWindow = field(default_factory=BlackoutWindow)
    blackout_days: frozenset[int] = frozenset()
    legacy_daily: LegacyReminder = field(default_factory=LegacyReminder)
    legacy_weekly: LegacyReminder = field(default_factory=LegacyReminder)
    legacy_monthly: LegacyReminder = field(default_factory=lambda: LegacyReminder(day=1))


@dataclass(frozen=True)
class CalendarMatch:
    """Date part of a trigger. Both fields None means every day."""

    day_of_month: int | None = None
    weekday: int | None = None  # 0=Sunday..6=Saturday

    def __post_init__(self) -> None:
        if self.day_of_month is not None and self.weekday is not None:
            raise ValueError("CalendarMatch takes day_of_month or weekday, not both")


EVERY_DAY = CalendarMatch()


@dataclass(frozen=True)
class TriggerSpec:
    """A computed reminder for the dispatcher; never persisted by the core."""

    id: str
    match: CalendarMatch
    hour: int
    minute: int
    repeating: bool
    title: str
    body: str
    category_id: str

    def cron_expression(self) -> str:
        """Five-field cron expression; weekday uses cron's 0=Sunday."""
        dom = "*" if self.match.day_of_month is None else str(self.match.day_of_month)
        dow = "*" if self.match.weekday is None else str(self.match.weekday)
        return f"{self.minute} {self.hour} {dom} * {dow}"


@dataclass(frozen=True)
class ThemeSnapshot:
    background_color: str
    text_color: str
    accent_color: str | None = None
    font_name: str | None = None


@dataclass(frozen=True)
class WidgetSnapshot:
    """Simplified view of the active intention handed to the widget."""

    id: str
    text: str
    scope: str
    scope_date: datetime
    quote: str | None
    ai_generated: bool

    @classmethod
    def from_intention(cls, intention: Intention) -> WidgetSnapshot:
        return cls(
            id=intention.id,
            text=intention.text,
            scope=intention.scope.value,
            scope_date=intention.anchor_date,
            quote=intention.quote,
            ai_generated=intention.ai_generated,
        )


RoutingOutcome = Literal["created", "failed", "ignored", "skipped", "navigate"]


@dataclass
class RoutingResult:
    """What handling one reminder response produced."""

    outcome: RoutingOutcome
    intention: Intention | None = None
    triggers: list[TriggerSpec] = field(default_factory=list)
    navigate_to: str | None = None
