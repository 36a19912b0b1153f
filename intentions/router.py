"""Turn an inbound reminder response into a new intention.

Each response is handled on its own; nothing is retained between calls
except what the store keeps. A failed save never raises out of
handle_response: the user gets an error notification instead.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from intentions import wire
from intentions.calendar import ScopeCalendar
from intentions.dispatcher import Dispatcher
from intentions.errors import SchedulingError, StoreError, ValidationError
from intentions.models import EVERY_DAY, Intention, RoutingResult, Scope, TriggerSpec
from intentions.store import IntentionStore
from intentions.widget import WidgetProjector

logger = logging.getLogger(__name__)

NEW_INTENTION_SCREEN = "new_intention"

CATEGORY_SCOPES: dict[str, Scope] = {
    wire.DAILY_INTENTION: Scope.DAY,
    wire.WEEKLY_INTENTION: Scope.WEEK,
    wire.MONTHLY_INTENTION: Scope.MONTH,
}

CONFIRMATION_TITLE = "Intention Set!"
ERROR_TITLE = "Error"
ERROR_BODY = "Failed to save your intention. Please try again in the app."


def scope_for_category(category_id: str) -> Scope:
    """Unknown categories fall back to the day scope."""
    return CATEGORY_SCOPES.get(category_id, Scope.DAY)


class ResponseRouter:
    def __init__(
        self,
        store: IntentionStore,
        dispatcher: Dispatcher,
        calendar: ScopeCalendar,
        widget: WidgetProjector | None = None,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.calendar = calendar
        self.widget = widget
        self.clock = clock
        self.id_factory = id_factory

    def handle_response(self, action_id: str, category_id: str, free_text: str | None = None) -> RoutingResult:
        if action_id == wire.SET_INTENTION_ACTION:
            return self._set_intention(category_id, free_text)
        if action_id == wire.SKIP_ACTION:
            logger.info("reminder skipped (category=%s)", category_id)
            return RoutingResult(outcome="skipped")
        if action_id == wire.DEFAULT_ACTION:
            return RoutingResult(outcome="navigate", navigate_to=NEW_INTENTION_SCREEN)
        logger.warning("unknown action '%s' for category %s; ignoring", action_id, category_id)
        return RoutingResult(outcome="ignored")

    def anchor_for(self, scope: Scope, now: datetime) -> datetime:
        if scope is Scope.DAY:
            return self.calendar.normalize(now)
        return self.calendar.scope_start(scope, now)

    def _set_intention(self, category_id: str, free_text: str | None) -> RoutingResult:
        text = (free_text or "").strip()
        if not text:
            logger.info("empty intention text received; nothing to do")
            return RoutingResult(outcome="ignored")

        scope = scope_for_category(category_id)
        now = self.clock()
        try:
            intention = Intention(
                text=text,
                scope=scope,
                anchor_date=self.anchor_for(scope, now),
                created_at=now,
                updated_at=now,
                ai_generated=False,
            )
            self.store.create(intention)
        except (StoreError, ValidationError) as e:
            logger.error("failed to create %s intention from reminder response: %s", scope.value, e)
            return RoutingResult(outcome="failed", triggers=[self._emit(self._error_trigger(now))])

        logger.info("created %s intention %s from reminder response", scope.value, intention.id)
        self._refresh_widget()
        confirmation = self._emit(self._confirmation_trigger(scope, now))
        return RoutingResult(outcome="created", intention=intention, triggers=[confirmation])

    def _refresh_widget(self) -> None:
        if self.widget is None:
            return
        try:
            self.widget.refresh()
        except OSError as e:
            logger.warning("widget refresh failed: %s", e)

    def _emit(self, trigger: TriggerSpec) -> TriggerSpec:
        try:
            self.dispatcher.schedule(trigger)
        except SchedulingError as e:
            logger.warning("could not schedule %s: %s", trigger.id, e)
        return trigger

    def _confirmation_trigger(self, scope: Scope, now: datetime) -> TriggerSpec:
        return _one_shot(
            f"{wire.CONFIRMATION_PREFIX}{self.id_factory()}",
            now,
            CONFIRMATION_TITLE,
            f"Your {scope.value} intention has been saved.",
        )

    def _error_trigger(self, now: datetime) -> TriggerSpec:
        return _one_shot(f"{wire.ERROR_PREFIX}{self.id_factory()}", now, ERROR_TITLE, ERROR_BODY)


def _one_shot(trigger_id: str, now: datetime, title: str, body: str) -> TriggerSpec:
    return TriggerSpec(
        id=trigger_id,
        match=EVERY_DAY,
        hour=now.hour,
        minute=now.minute,
        repeating=False,
        title=title,
        body=body,
        category_id=wire.GENERAL_REMINDER,
    )
