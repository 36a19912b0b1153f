"""Quiet-hours predicate applied to candidate reminder times."""
from __future__ import annotations

from collections.abc import Collection
from datetime import time

from intentions.models import BlackoutWindow


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


def in_window(candidate_minutes: int, window: BlackoutWindow) -> bool:
    start, end = window.start_minutes, window.end_minutes
    if start <= end:
        return start <= candidate_minutes < end
    # Wraps past midnight, e.g. 22:00 -> 08:00
    return candidate_minutes >= start or candidate_minutes < end


def is_suppressed(
    candidate_time: time,
    candidate_weekday: int | None,
    window: BlackoutWindow,
    blackout_enabled: bool,
    blackout_days: Collection[int],
) -> bool:
    """True if a reminder at candidate_time (and weekday, 0=Sunday) must not fire.

    Suppressed when blackout is enabled and either the weekday is one of
    blackout_days or the time falls inside the window.
    """
    if not blackout_enabled:
        return False
    if candidate_weekday is not None and candidate_weekday in blackout_days:
        return True
    return in_window(minutes_since_midnight(candidate_time), window)
