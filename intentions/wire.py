"""Fixed identifiers shared with the notification dispatcher.

These strings travel over the wire and must match the dispatcher's
registered categories and actions exactly.
"""
from __future__ import annotations

from dataclasses import dataclass

DAILY_INTENTION = "DAILY_INTENTION"
WEEKLY_INTENTION = "WEEKLY_INTENTION"
MONTHLY_INTENTION = "MONTHLY_INTENTION"
GENERAL_REMINDER = "GENERAL_REMINDER"

SET_INTENTION_ACTION = "SET_INTENTION_ACTION"
SKIP_ACTION = "SKIP_ACTION"
DEFAULT_ACTION = "DEFAULT_ACTION"

# Frequency-derived trigger ids
MONTHLY_REMINDER_ID = "monthly-reminder"
BI_MONTHLY_REMINDER_PREFIX = "bi-monthly-reminder-"
WEEKLY_REMINDER_ID = "weekly-reminder"
BI_WEEKLY_REMINDER_PREFIX = "bi-weekly-reminder-"
EVERY_OTHER_DAY_PREFIX = "every-other-day-reminder-"
DAILY_REMINDER_ID = "daily-reminder"
TWICE_DAILY_MORNING_ID = "twice-daily-morning"
TWICE_DAILY_EVENING_ID = "twice-daily-evening"

# Legacy single-purpose trigger ids
LEGACY_DAILY_ID = "daily-intention-reminder"
LEGACY_WEEKLY_ID = "weekly-intention-reminder"
LEGACY_MONTHLY_ID = "monthly-intention-reminder"

CONFIRMATION_PREFIX = "confirmation-"
ERROR_PREFIX = "error-"


@dataclass(frozen=True)
class Action:
    id: str
    title: str
    text_input: bool = False
    button_title: str | None = None
    placeholder: str | None = None


_SET_ACTION = Action(
    id=SET_INTENTION_ACTION,
    title="Set Intention",
    text_input=True,
    button_title="Set",
    placeholder="Enter your intention...",
)
_SKIP_ACTION = Action(id=SKIP_ACTION, title="Skip")

CATEGORIES: dict[str, tuple[Action, ...]] = {
    DAILY_INTENTION: (_SET_ACTION, _SKIP_ACTION),
    WEEKLY_INTENTION: (_SET_ACTION, _SKIP_ACTION),
    MONTHLY_INTENTION: (_SET_ACTION, _SKIP_ACTION),
    GENERAL_REMINDER: (),
}


def accepts_text_reply(category_id: str) -> bool:
    """True if the category offers a free-text 'Set Intention' action."""
    return any(a.text_input for a in CATEGORIES.get(category_id, ()))
