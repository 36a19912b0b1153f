"""Notification dispatcher contract and local implementations.

Rescheduling is destructive then additive: apply_schedule cancels everything
and installs the new set. There is no diff-and-patch API.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import yaml
from croniter import croniter

from intentions.errors import DispatcherError, SchedulingError
from intentions.models import EVERY_DAY, CalendarMatch, TriggerSpec

logger = logging.getLogger(__name__)


class Dispatcher(ABC):
    """Installs trigger specs with the delivery mechanism."""

    @abstractmethod
    def schedule(self, trigger: TriggerSpec) -> None:
        """Install one trigger; raise SchedulingError if it is rejected."""
        ...

    @abstractmethod
    def cancel_all(self) -> None:
        """Remove every pending trigger; raise DispatcherError and keep them on failure."""
        ...

    @abstractmethod
    def cancel(self, ids: Iterable[str]) -> None:
        ...

    @abstractmethod
    def pending(self) -> list[TriggerSpec]:
        ...


def validate_trigger(trigger: TriggerSpec) -> None:
    """Raise SchedulingError for fields no calendar could ever match."""
    if not 0 <= trigger.hour <= 23:
        raise SchedulingError(trigger.id, f"hour {trigger.hour} out of range")
    if not 0 <= trigger.minute <= 59:
        raise SchedulingError(trigger.id, f"minute {trigger.minute} out of range")
    dom = trigger.match.day_of_month
    if dom is not None and not 1 <= dom <= 31:
        raise SchedulingError(trigger.id, f"day of month {dom} out of range")
    weekday = trigger.match.weekday
    if weekday is not None and not 0 <= weekday <= 6:
        raise SchedulingError(trigger.id, f"weekday {weekday} out of range")


def fires_at(trigger: TriggerSpec, now: datetime) -> bool:
    """True if the trigger's calendar match fires in the minute of now."""
    now_trunc = now.replace(second=0, microsecond=0)
    base = now_trunc - timedelta(minutes=1)
    next_run = croniter(trigger.cron_expression(), base).get_next(datetime)
    return next_run.replace(second=0, microsecond=0) == now_trunc


class MemoryDispatcher(Dispatcher):
    """Keeps pending triggers by id; scheduling an existing id replaces it."""

    def __init__(self) -> None:
        self._pending: dict[str, TriggerSpec] = {}

    def schedule(self, trigger: TriggerSpec) -> None:
        validate_trigger(trigger)
        previous = self._pending.get(trigger.id)
        self._pending[trigger.id] = trigger
        try:
            self._persist()
        except DispatcherError as e:
            if previous is None:
                del self._pending[trigger.id]
            else:
                self._pending[trigger.id] = previous
            raise SchedulingError(trigger.id, str(e)) from e
        logger.debug("scheduled %s (%s)", trigger.id, trigger.cron_expression())

    def cancel_all(self) -> None:
        previous = dict(self._pending)
        self._pending.clear()
        try:
            self._persist()
        except DispatcherError:
            self._pending = previous
            raise
        count = len(previous)
        logger.debug("cancelled all %s pending trigger(s)", count)

    def cancel(self, ids: Iterable[str]) -> None:
        previous = dict(self._pending)
        for trigger_id in ids:
            self._pending.pop(trigger_id, None)
        try:
            self._persist()
        except DispatcherError:
            self._pending = previous
            raise

    def pending(self) -> list[TriggerSpec]:
        return list(self._pending.values())

    def due(self, now: datetime) -> list[TriggerSpec]:
        """Triggers to deliver now. One-shot triggers are removed once returned.

        A one-shot trigger without a calendar match is delivered on the first
        call after it was scheduled.
        """
        due: list[TriggerSpec] = []
        for trigger in list(self._pending.values()):
            if not trigger.repeating and trigger.match == EVERY_DAY:
                due.append(trigger)
                continue
            try:
                if fires_at(trigger, now):
                    due.append(trigger)
            except (ValueError, KeyError) as e:
                logger.warning("cron evaluation failed for trigger %s: %s", trigger.id, e)
        one_shots = [t.id for t in due if not t.repeating]
        if one_shots:
            self.cancel(one_shots)
        return due

    def _persist(self) -> None:
        """Hook for durable subclasses."""


def trigger_to_dict(trigger: TriggerSpec) -> dict[str, Any]:
    return {
        "id": trigger.id,
        "day_of_month": trigger.match.day_of_month,
        "weekday": trigger.match.weekday,
        "hour": trigger.hour,
        "minute": trigger.minute,
        "repeating": trigger.repeating,
        "title": trigger.title,
        "body": trigger.body,
        "category_id": trigger.category_id,
    }


def trigger_from_dict(data: dict[str, Any]) -> TriggerSpec:
    return TriggerSpec(
        id=str(data["id"]),
        match=CalendarMatch(day_of_month=data.get("day_of_month"), weekday=data.get("weekday")),
        hour=int(data["hour"]),
        minute=int(data["minute"]),
        repeating=bool(data.get("repeating", True)),
        title=data.get("title") or "",
        body=data.get("body") or "",
        category_id=data.get("category_id") or "",
    )


class YamlDispatcher(MemoryDispatcher):
    """Pending triggers mirrored to a YAML file so separate runs share them."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            if not isinstance(raw, dict):
                raise ValueError("top level must be a mapping")
            for item in raw.get("triggers") or []:
                trigger = trigger_from_dict(item)
                self._pending[trigger.id] = trigger
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            raise DispatcherError(f"cannot read schedule from {self.path}: {e}") from e
        logger.debug("loaded %s pending trigger(s) from %s", len(self._pending), self.path)

    def _persist(self) -> None:
        data = {"triggers": [trigger_to_dict(t) for t in self._pending.values()]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        except OSError as e:
            raise DispatcherError(f"cannot write schedule to {self.path}: {e}") from e


def apply_schedule(dispatcher: Dispatcher, triggers: Sequence[TriggerSpec]) -> list[str]:
    """Cancel everything, then schedule each trigger independently.

    A rejected trigger is logged and skipped; the rest are still installed.
    A failed cancel is logged too, and scheduling goes ahead on top of the
    old set. Returns the ids that were installed.
    """
    try:
        dispatcher.cancel_all()
    except DispatcherError as e:
        logger.error("cancel all failed: %s", e)
    installed: list[str] = []
    for trigger in triggers:
        try:
            dispatcher.schedule(trigger)
        except SchedulingError as e:
            logger.warning("skipping trigger: %s", e)
            continue
        installed.append(trigger.id)
    logger.info("installed %s of %s trigger(s)", len(installed), len(triggers))
    return installed
