"""Config loading and validation; parses the reminders section into settings."""
from __future__ import annotations

from datetime import time
from pathlib import Path
from typing import Any

import yaml

from intentions.calendar import CalendarConfig
from intentions.channel import channel_types
from intentions.models import (
    BlackoutWindow,
    Frequency,
    LegacyReminder,
    ReminderSettings,
    ReminderType,
    ThemeSnapshot,
)

DEFAULT_CONFIG = "config/config.yaml"
DEFAULT_STORAGE = {
    "intentions_path": "data/intentions.yaml",
    "schedule_path": "data/schedule.yaml",
    "widget_path": "data/widget.json",
}


def load_config(path: str | Path) -> dict:
    """Load YAML config from path."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_time(raw: Any, field: str) -> time:
    """Parse "HH:MM"."""
    if isinstance(raw, time):
        return raw
    if isinstance(raw, int):
        # YAML 1.1 reads an unquoted 20:00 as base-60 minutes (1200)
        hours, minutes = divmod(raw, 60)
        if 0 <= hours <= 23:
            return time(hours, minutes)
        raise ValueError(f"config: {field} out of range: {raw}")
    try:
        hh, mm = str(raw).strip().split(":")
        return time(int(hh), int(mm))
    except ValueError:
        raise ValueError(f"config: {field} must be 'HH:MM', got {raw!r}")


def _weekday(raw: Any, field: str) -> int:
    if not isinstance(raw, int) or not 0 <= raw <= 6:
        raise ValueError(f"config: {field} must be a weekday 0 (Sunday)..6 (Saturday), got {raw!r}")
    return raw


def validate_config(config: dict) -> None:
    """Validate calendar, reminders, channel and themes; raise ValueError on error."""
    if not isinstance(config, dict):
        raise ValueError("config: top level must be a dict")

    cal = config.get("calendar") or {}
    if not isinstance(cal, dict):
        raise ValueError("config: calendar must be a dict")
    if "first_weekday" in cal:
        _weekday(cal["first_weekday"], "calendar.first_weekday")

    reminders = config.get("reminders") or {}
    if not isinstance(reminders, dict):
        raise ValueError("config: reminders must be a dict")
    settings_from_config(config)

    channel = config.get("channel")
    if channel is not None:
        if not isinstance(channel, dict):
            raise ValueError("config: channel must be a dict")
        chan_type = channel.get("type", "pushplus")
        if chan_type not in channel_types():
            raise ValueError(f"config: channel type '{chan_type}' not in {channel_types()}")

    themes = config.get("themes") or {}
    if not isinstance(themes, dict):
        raise ValueError("config: themes must be a dict")
    for theme_id, theme in themes.items():
        if not isinstance(theme, dict):
            raise ValueError(f"config: themes.{theme_id} must be a dict")
        for key in ("background_color", "text_color"):
            if not theme.get(key):
                raise ValueError(f"config: themes.{theme_id} missing '{key}'")


def calendar_from_config(config: dict) -> CalendarConfig:
    cal = config.get("calendar") or {}
    return CalendarConfig(first_weekday=cal.get("first_weekday", 0), timezone=cal.get("timezone"))


def _legacy(raw: Any, field: str, default_day: int) -> LegacyReminder:
    if not raw:
        return LegacyReminder(day=default_day)
    if not isinstance(raw, dict):
        raise ValueError(f"config: {field} must be a dict")
    at = raw.get("time")
    return LegacyReminder(
        enabled=bool(raw.get("enabled", False)),
        time_of_day=parse_time(at, f"{field}.time") if at is not None else None,
        day=int(raw.get("day", default_day)),
    )


def settings_from_config(config: dict) -> ReminderSettings:
    """Build ReminderSettings from the 'reminders' section; missing keys use defaults."""
    r = config.get("reminders") or {}
    defaults = ReminderSettings()

    freq_raw = r.get("frequency", defaults.frequency.value)
    try:
        frequency = Frequency(freq_raw)
    except ValueError:
        raise ValueError(f"config: reminders.frequency '{freq_raw}' not in {[f.value for f in Frequency]}")

    types_raw = r.get("enabled_types")
    if types_raw is None:
        enabled_types = defaults.enabled_types
    else:
        try:
            enabled_types = frozenset(ReminderType(t) for t in types_raw)
        except ValueError as e:
            raise ValueError(f"config: reminders.enabled_types: {e}")

    blackout = r.get("blackout") or {}
    if not isinstance(blackout, dict):
        raise ValueError("config: reminders.blackout must be a dict")
    window = defaults.blackout_window
    if "start" in blackout or "end" in blackout:
        start = parse_time(blackout.get("start", "22:00"), "reminders.blackout.start")
        end = parse_time(blackout.get("end", "08:00"), "reminders.blackout.end")
        window = BlackoutWindow(start.hour, start.minute, end.hour, end.minute)
    days = frozenset(_weekday(d, "reminders.blackout.days[]") for d in blackout.get("days") or [])

    legacy = r.get("legacy") or {}
    if not isinstance(legacy, dict):
        raise ValueError("config: reminders.legacy must be a dict")
    weekly = _legacy(legacy.get("weekly"), "reminders.legacy.weekly", 0)
    if weekly.enabled:
        _weekday(weekly.day, "reminders.legacy.weekly.day")

    return ReminderSettings(
        frequency=frequency,
        enabled_types=enabled_types,
        morning_time=parse_time(r["morning_time"], "reminders.morning_time") if "morning_time" in r else defaults.morning_time,
        evening_time=parse_time(r["evening_time"], "reminders.evening_time") if "evening_time" in r else defaults.evening_time,
        blackout_enabled=bool(blackout.get("enabled", defaults.blackout_enabled)),
        blackout_window=window,
        blackout_days=days,
        legacy_daily=_legacy(legacy.get("daily"), "reminders.legacy.daily", 0),
        legacy_weekly=weekly,
        legacy_monthly=_legacy(legacy.get("monthly"), "reminders.legacy.monthly", 1),
    )


def storage_paths(config: dict) -> dict[str, Path]:
    storage = {**DEFAULT_STORAGE, **(config.get("storage") or {})}
    return {key: Path(value) for key, value in storage.items()}


def themes_from_config(config: dict) -> dict[str, ThemeSnapshot]:
    return {
        str(theme_id): ThemeSnapshot(
            background_color=theme["background_color"],
            text_color=theme["text_color"],
            accent_color=theme.get("accent_color"),
            font_name=theme.get("font_name"),
        )
        for theme_id, theme in (config.get("themes") or {}).items()
    }
