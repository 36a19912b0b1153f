"""Runner: load config, wire components, reschedule / deliver / route responses."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from intentions.calendar import ScopeCalendar
from intentions.channel import get_channel
from intentions.config import (
    calendar_from_config,
    load_config,
    settings_from_config,
    storage_paths,
    themes_from_config,
    validate_config,
)
from intentions.dispatcher import YamlDispatcher, apply_schedule
from intentions.manager import IntentionManager
from intentions.models import ReminderSettings, RoutingResult, TriggerSpec
from intentions.policy import ReminderPolicy, find_overlaps
from intentions.resolver import ActiveIntentionResolver
from intentions.router import ResponseRouter
from intentions.store import YamlIntentionStore
from intentions.widget import JsonWidgetSync, WidgetProjector

logger = logging.getLogger(__name__)


@dataclass
class Components:
    calendar: ScopeCalendar
    settings: ReminderSettings
    store: YamlIntentionStore
    resolver: ActiveIntentionResolver
    dispatcher: YamlDispatcher
    policy: ReminderPolicy
    widget: WidgetProjector
    router: ResponseRouter
    manager: IntentionManager
    channel_config: dict

    def now(self) -> datetime:
        return datetime.now(self.calendar.config.tzinfo)


def open_config(config_path: str | Path) -> dict:
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"config not found: {path}")
    config = load_config(path)
    validate_config(config)
    return config


def build_components(config: dict, clock: Callable[[], datetime] | None = None) -> Components:
    """Construct every component explicitly from config; nothing is global."""
    calendar = ScopeCalendar(calendar_from_config(config))
    if clock is None:
        tz = calendar.config.tzinfo

        def clock() -> datetime:
            return datetime.now(tz)

    paths = storage_paths(config)
    store = YamlIntentionStore(paths["intentions_path"], calendar)
    resolver = ActiveIntentionResolver(store, calendar)
    dispatcher = YamlDispatcher(paths["schedule_path"])
    widget = WidgetProjector(resolver, JsonWidgetSync(paths["widget_path"]), themes_from_config(config), clock)
    return Components(
        calendar=calendar,
        settings=settings_from_config(config),
        store=store,
        resolver=resolver,
        dispatcher=dispatcher,
        policy=ReminderPolicy(),
        widget=widget,
        router=ResponseRouter(store, dispatcher, calendar, widget=widget, clock=clock),
        manager=IntentionManager(store, resolver, widget=widget, clock=clock),
        channel_config=config.get("channel") or {},
    )


def reschedule(components: Components) -> list[str]:
    """Rebuild the schedule from settings and replace everything installed."""
    triggers = components.policy.build_schedule(components.settings)
    for a, b in find_overlaps(triggers):
        logger.warning("triggers %s and %s can fire at the same time", a, b)
    return apply_schedule(components.dispatcher, triggers)


def deliver(components: Components, now: datetime | None = None, dry_run: bool = False) -> list[TriggerSpec]:
    """Send every trigger due in the current minute through the configured channel.

    If dry_run is True, due triggers are logged but not sent.
    """
    now = now or components.now()
    due = components.dispatcher.due(now)
    components.widget.refresh()
    if not due:
        logger.info("No triggers due at %s", now.strftime("%Y-%m-%d %H:%M"))
        return []
    if dry_run:
        logger.info("Dry-run mode enabled: will not send any messages to channels.")
    logger.info("Delivering %s trigger(s): %s", len(due), [t.id for t in due])

    chan_type = components.channel_config.get("type", "pushplus")
    channel = get_channel(chan_type)()
    for trigger in due:
        if dry_run:
            logger.info(
                "Dry-run: would send trigger=%s via channel='%s' title=%r body=%r",
                trigger.id,
                chan_type,
                trigger.title,
                trigger.body,
            )
            continue
        try:
            channel.send(trigger, components.channel_config)
        except Exception as e:
            logger.exception("delivery failed trigger=%s channel=%s: %s", trigger.id, chan_type, e)
    return due


def respond(components: Components, action: str, category: str, text: str | None = None) -> RoutingResult:
    result = components.router.handle_response(action, category, text)
    logger.info("response handled: outcome=%s triggers=%s", result.outcome, [t.id for t in result.triggers])
    return result
