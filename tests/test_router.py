"""Tests for turning reminder responses into intentions."""

import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from intentions import wire
from intentions.calendar import ScopeCalendar
from intentions.dispatcher import MemoryDispatcher, YamlDispatcher
from intentions.errors import SchedulingError, StoreError
from intentions.models import Intention, Scope
from intentions.resolver import ActiveIntentionResolver
from intentions.router import ERROR_BODY, ResponseRouter, scope_for_category
from intentions.store import MemoryIntentionStore
from intentions.widget import WidgetProjector, WidgetSync

NOW = datetime(2025, 1, 15, 10, 30)  # Wednesday


class FailingStore(MemoryIntentionStore):
    def create(self, intention):
        raise StoreError("disk full")


class RejectingDispatcher(MemoryDispatcher):
    def schedule(self, trigger):
        raise SchedulingError(trigger.id, "not authorized")


class RecordingSync(WidgetSync):
    def __init__(self):
        self.updates = []

    def update(self, snapshot, theme=None):
        self.updates.append((snapshot, theme))


class TestResponseRouter(unittest.TestCase):

    def setUp(self):
        self.calendar = ScopeCalendar()
        self.store = MemoryIntentionStore(self.calendar)
        self.dispatcher = MemoryDispatcher()
        self.router = self._router(self.store, self.dispatcher)

    def _router(self, store, dispatcher, widget=None):
        return ResponseRouter(
            store,
            dispatcher,
            self.calendar,
            widget=widget,
            clock=lambda: NOW,
            id_factory=lambda: "abc",
        )

    def test_weekly_response_anchors_to_week_start(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.WEEKLY_INTENTION, "Exercise more")
        self.assertEqual(result.outcome, "created")
        self.assertEqual(result.intention.scope, Scope.WEEK)
        self.assertEqual(result.intention.anchor_date, datetime(2025, 1, 12))
        self.assertFalse(result.intention.ai_generated)
        self.assertEqual(self.store.find_all(Scope.WEEK), [result.intention])

    def test_confirmation_trigger_emitted(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.WEEKLY_INTENTION, "Exercise more")
        [trigger] = result.triggers
        self.assertEqual(trigger.id, "confirmation-abc")
        self.assertEqual(trigger.title, "Intention Set!")
        self.assertEqual(trigger.body, "Your week intention has been saved.")
        self.assertFalse(trigger.repeating)
        self.assertEqual(self.dispatcher.pending(), [trigger])

    def test_monthly_response_anchors_to_month_start(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.MONTHLY_INTENTION, "Read")
        self.assertEqual(result.intention.anchor_date, datetime(2025, 1, 1))

    def test_daily_and_unknown_categories_anchor_to_now(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, "SOMETHING_ELSE", "  Be patient  ")
        self.assertEqual(result.intention.scope, Scope.DAY)
        self.assertEqual(result.intention.anchor_date, NOW)
        self.assertEqual(result.intention.text, "Be patient")

    def test_whitespace_text_is_silent_noop(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.WEEKLY_INTENTION, "   ")
        self.assertEqual(result.outcome, "ignored")
        self.assertIsNone(result.intention)
        self.assertEqual(result.triggers, [])
        self.assertEqual(self.store.all(), [])
        self.assertEqual(self.dispatcher.pending(), [])

    def test_missing_text_is_silent_noop(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION)
        self.assertEqual(result.outcome, "ignored")
        self.assertEqual(self.dispatcher.pending(), [])

    def test_store_failure_emits_error_trigger(self):
        router = self._router(FailingStore(self.calendar), self.dispatcher)
        result = router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "Stretch")
        self.assertEqual(result.outcome, "failed")
        self.assertIsNone(result.intention)
        [trigger] = result.triggers
        self.assertEqual(trigger.id, "error-abc")
        self.assertEqual(trigger.title, "Error")
        self.assertEqual(trigger.body, ERROR_BODY)
        self.assertEqual(self.dispatcher.pending(), [trigger])

    def test_occupied_slot_emits_error_trigger(self):
        self.store.create(Intention("Already set", Scope.DAY, datetime(2025, 1, 15, 7)))
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "Stretch")
        self.assertEqual(result.outcome, "failed")
        self.assertEqual(result.triggers[0].id, "error-abc")

    def test_overlong_text_emits_error_trigger(self):
        result = self.router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "x" * 101)
        self.assertEqual(result.outcome, "failed")
        self.assertEqual(self.store.all(), [])

    def test_dispatcher_rejection_does_not_undo_creation(self):
        router = self._router(self.store, RejectingDispatcher())
        result = router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "Stretch")
        self.assertEqual(result.outcome, "created")
        self.assertEqual(len(self.store.all()), 1)

    def test_unwritable_schedule_does_not_undo_creation(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            router = self._router(self.store, YamlDispatcher(blocker / "schedule.yaml"))
            result = router.handle_response(wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "Stretch")
        self.assertEqual(result.outcome, "created")
        self.assertEqual(self.store.all(), [result.intention])

    def test_skip_is_noop(self):
        result = self.router.handle_response(wire.SKIP_ACTION, wire.DAILY_INTENTION, "ignored text")
        self.assertEqual(result.outcome, "skipped")
        self.assertEqual(self.store.all(), [])
        self.assertEqual(self.dispatcher.pending(), [])

    def test_default_action_navigates(self):
        result = self.router.handle_response(wire.DEFAULT_ACTION, wire.DAILY_INTENTION)
        self.assertEqual(result.outcome, "navigate")
        self.assertEqual(result.navigate_to, "new_intention")
        self.assertEqual(self.store.all(), [])

    def test_widget_refreshed_after_creation(self):
        sink = RecordingSync()
        widget = WidgetProjector(ActiveIntentionResolver(self.store, self.calendar), sink, clock=lambda: NOW)
        router = self._router(self.store, self.dispatcher, widget)
        router.handle_response(wire.SET_INTENTION_ACTION, wire.MONTHLY_INTENTION, "Save money")
        [(snapshot, theme)] = sink.updates
        self.assertEqual(snapshot.text, "Save money")
        self.assertEqual(snapshot.scope, "month")
        self.assertIsNone(theme)

    def test_category_mapping(self):
        self.assertIs(scope_for_category(wire.DAILY_INTENTION), Scope.DAY)
        self.assertIs(scope_for_category(wire.WEEKLY_INTENTION), Scope.WEEK)
        self.assertIs(scope_for_category(wire.MONTHLY_INTENTION), Scope.MONTH)
        self.assertIs(scope_for_category(wire.GENERAL_REMINDER), Scope.DAY)


if __name__ == "__main__":
    unittest.main()
