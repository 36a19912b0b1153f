"""Turn reminder settings into a full set of trigger specs.

build_schedule always returns the complete replacement schedule; callers
cancel everything previously installed before applying it. Frequency-derived
triggers pass through the blackout filter. Legacy single-purpose reminders
are appended as-is, so the two sources may overlap; find_overlaps reports
that instead of silently merging.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import time

from intentions import wire
from intentions.blackout import is_suppressed
from intentions.models import (
    EVERY_DAY,
    CalendarMatch,
    Frequency,
    ReminderSettings,
    ReminderType,
    TriggerSpec,
)

logger = logging.getLogger(__name__)

SUNDAY = 0
WEDNESDAY = 3
# Even days only; resets every month (day 28 -> day 2 can be a 5-day gap).
EVERY_OTHER_DAY_DAYS: tuple[int, ...] = tuple(range(2, 29, 2))
LEGACY_MONTHLY_MAX_DAY = 28

TITLE_ADD_MORNING = "Time to set your intention"
TITLE_ADD_EVENING = "Evening check-in"
TITLE_REMINDER_OF_INTENTION = "Your intention for today"
TITLE_ENCOURAGEMENT = "A little encouragement"
TITLE_FALLBACK = "Daily reminder"

BODY_ADD = "What do you want to focus on?"
BODY_ADD_MORNING = "What's your intention for today?"
BODY_ADD_EVENING = "How did today go?"
BODY_REMINDER_OF_INTENTION = "Remember your intention for today"
ENCOURAGEMENTS: tuple[str, ...] = (
    "You've got this!",
    "Keep going!",
    "You're doing great!",
    "Stay focused on what matters",
)
BODY_SEPARATOR = " • "

Selector = Callable[[Sequence[str]], str]


@dataclass(frozen=True)
class _Slot:
    """One frequency-derived firing before content is attached."""

    id: str
    match: CalendarMatch
    at: time
    evening: bool = False


class ReminderPolicy:
    """Maps ReminderSettings to TriggerSpecs.

    selector picks the encouragement line; pass a deterministic one in tests.
    """

    def __init__(self, selector: Selector = random.choice) -> None:
        self.selector = selector

    def build_schedule(self, settings: ReminderSettings) -> list[TriggerSpec]:
        if not settings.enabled_types:
            logger.info("no reminder types enabled; schedule is empty")
            return []

        triggers: list[TriggerSpec] = []
        for slot in self._slots(settings):
            if is_suppressed(
                slot.at,
                slot.match.weekday,
                settings.blackout_window,
                settings.blackout_enabled,
                settings.blackout_days,
            ):
                logger.debug("trigger %s at %s suppressed by blackout", slot.id, slot.at.strftime("%H:%M"))
                continue
            triggers.append(self._trigger(slot, settings))

        triggers.extend(self._legacy_triggers(settings))
        logger.info(
            "built %s trigger(s) for frequency=%s: %s",
            len(triggers),
            settings.frequency.value,
            [t.id for t in triggers],
        )
        return triggers

    def _slots(self, settings: ReminderSettings) -> list[_Slot]:
        morning = settings.morning_time
        freq = settings.frequency
        if freq is Frequency.ONCE_PER_MONTH:
            return [_Slot(wire.MONTHLY_REMINDER_ID, CalendarMatch(day_of_month=1), morning)]
        if freq is Frequency.TWICE_PER_MONTH:
            return [
                _Slot(f"{wire.BI_MONTHLY_REMINDER_PREFIX}{day}", CalendarMatch(day_of_month=day), morning)
                for day in (1, 15)
            ]
        if freq is Frequency.ONCE_PER_WEEK:
            return [_Slot(wire.WEEKLY_REMINDER_ID, CalendarMatch(weekday=SUNDAY), morning)]
        if freq is Frequency.TWICE_PER_WEEK:
            return [
                _Slot(f"{wire.BI_WEEKLY_REMINDER_PREFIX}{weekday}", CalendarMatch(weekday=weekday), morning)
                for weekday in (SUNDAY, WEDNESDAY)
            ]
        if freq is Frequency.EVERY_OTHER_DAY:
            return [
                _Slot(f"{wire.EVERY_OTHER_DAY_PREFIX}{day}", CalendarMatch(day_of_month=day), morning)
                for day in EVERY_OTHER_DAY_DAYS
            ]
        if freq is Frequency.DAILY:
            return [_Slot(wire.DAILY_REMINDER_ID, EVERY_DAY, morning)]
        if freq is Frequency.TWICE_DAILY:
            return [
                _Slot(wire.TWICE_DAILY_MORNING_ID, EVERY_DAY, morning),
                _Slot(wire.TWICE_DAILY_EVENING_ID, EVERY_DAY, settings.evening_time, evening=True),
            ]
        raise ValueError(f"unknown frequency: {freq!r}")

    def _trigger(self, slot: _Slot, settings: ReminderSettings) -> TriggerSpec:
        types = settings.enabled_types
        if ReminderType.REMINDER_TO_ADD in types:
            category = wire.DAILY_INTENTION
        else:
            category = wire.GENERAL_REMINDER
        return TriggerSpec(
            id=slot.id,
            match=slot.match,
            hour=slot.at.hour,
            minute=slot.at.minute,
            repeating=True,
            title=title_for(types, evening=slot.evening),
            body=self.body_for(types, settings.frequency, evening=slot.evening),
            category_id=category,
        )

    def body_for(self, types: Iterable[ReminderType], frequency: Frequency, evening: bool = False) -> str:
        """One fragment per enabled type, in title priority order."""
        types = set(types)
        fragments: list[str] = []
        if ReminderType.REMINDER_TO_ADD in types:
            if frequency is Frequency.TWICE_DAILY:
                fragments.append(BODY_ADD_EVENING if evening else BODY_ADD_MORNING)
            else:
                fragments.append(BODY_ADD)
        if ReminderType.REMINDER_OF_INTENTION in types:
            fragments.append(BODY_REMINDER_OF_INTENTION)
        if ReminderType.ENCOURAGEMENT in types:
            fragments.append(self.selector(ENCOURAGEMENTS))
        return BODY_SEPARATOR.join(fragments)

    def _legacy_triggers(self, settings: ReminderSettings) -> list[TriggerSpec]:
        out: list[TriggerSpec] = []
        daily = settings.legacy_daily
        if daily.enabled and daily.time_of_day is not None:
            out.append(
                _legacy(
                    wire.LEGACY_DAILY_ID,
                    EVERY_DAY,
                    daily.time_of_day,
                    "Set Your Daily Intention",
                    "What's your intention for today?",
                    wire.DAILY_INTENTION,
                )
            )
        weekly = settings.legacy_weekly
        if weekly.enabled and weekly.time_of_day is not None:
            out.append(
                _legacy(
                    wire.LEGACY_WEEKLY_ID,
                    CalendarMatch(weekday=weekly.day),
                    weekly.time_of_day,
                    "Set Your Weekly Intention",
                    "What's your intention for this week?",
                    wire.WEEKLY_INTENTION,
                )
            )
        monthly = settings.legacy_monthly
        if monthly.enabled and monthly.time_of_day is not None:
            out.append(
                _legacy(
                    wire.LEGACY_MONTHLY_ID,
                    CalendarMatch(day_of_month=min(monthly.day, LEGACY_MONTHLY_MAX_DAY)),
                    monthly.time_of_day,
                    "Set Your Monthly Intention",
                    "What's your intention for this month?",
                    wire.MONTHLY_INTENTION,
                )
            )
        return out


def title_for(types: Iterable[ReminderType], evening: bool = False) -> str:
    types = set(types)
    if ReminderType.REMINDER_TO_ADD in types:
        return TITLE_ADD_EVENING if evening else TITLE_ADD_MORNING
    if ReminderType.REMINDER_OF_INTENTION in types:
        return TITLE_REMINDER_OF_INTENTION
    if ReminderType.ENCOURAGEMENT in types:
        return TITLE_ENCOURAGEMENT
    return TITLE_FALLBACK


def _legacy(trigger_id: str, match: CalendarMatch, at: time, title: str, body: str, category: str) -> TriggerSpec:
    return TriggerSpec(
        id=trigger_id,
        match=match,
        hour=at.hour,
        minute=at.minute,
        repeating=True,
        title=title,
        body=body,
        category_id=category,
    )


def _may_coincide(a: CalendarMatch, b: CalendarMatch) -> bool:
    if a == EVERY_DAY or b == EVERY_DAY:
        return True
    if a.day_of_month is not None and b.day_of_month is not None:
        return a.day_of_month == b.day_of_month
    if a.weekday is not None and b.weekday is not None:
        return a.weekday == b.weekday
    # A day of month and a weekday line up in some month.
    return True


def find_overlaps(triggers: Sequence[TriggerSpec]) -> list[tuple[str, str]]:
    """Pairs of trigger ids that can fire on the same day at the same minute."""
    pairs: list[tuple[str, str]] = []
    for i, a in enumerate(triggers):
        for b in triggers[i + 1:]:
            if (a.hour, a.minute) == (b.hour, b.minute) and _may_coincide(a.match, b.match):
                pairs.append((a.id, b.id))
    return pairs
