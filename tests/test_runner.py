"""Tests for wiring config to components, delivery and the PushPlus channel."""

import json
import os
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import yaml

from intentions import wire
from intentions.channel import get_channel
from intentions.channel.pushplus import PushPlusChannel, render_content, resolve_env
from intentions.models import EVERY_DAY, Scope, TriggerSpec
from intentions.runner import build_components, deliver, open_config, reschedule, respond

NOW = datetime(2025, 1, 15, 8, 0)


class TestRunner(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.widget_path = root / "widget.json"
        self.config_path = root / "config.yaml"
        config = {
            "calendar": {"first_weekday": 0},
            "reminders": {
                "frequency": "twice_daily",
                "enabled_types": ["reminder_to_add"],
                "morning_time": "08:00",
                "evening_time": "20:00",
            },
            "storage": {
                "intentions_path": str(root / "intentions.yaml"),
                "schedule_path": str(root / "schedule.yaml"),
                "widget_path": str(self.widget_path),
            },
            "channel": {"type": "pushplus", "token": "tok"},
        }
        self.config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
        self.components = build_components(open_config(self.config_path), clock=lambda: NOW)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_config(self):
        with self.assertRaises(FileNotFoundError):
            open_config(Path(self.tmp.name) / "nope.yaml")

    def test_reschedule_installs_twice_daily(self):
        installed = reschedule(self.components)
        self.assertEqual(installed, [wire.TWICE_DAILY_MORNING_ID, wire.TWICE_DAILY_EVENING_ID])
        # a fresh process sees the same schedule
        reopened = build_components(open_config(self.config_path), clock=lambda: NOW)
        self.assertEqual(len(reopened.dispatcher.pending()), 2)

    def test_dry_run_delivery_sends_nothing(self):
        reschedule(self.components)
        with patch.object(PushPlusChannel, "send") as send:
            due = deliver(self.components, now=NOW, dry_run=True)
        self.assertEqual([t.id for t in due], [wire.TWICE_DAILY_MORNING_ID])
        send.assert_not_called()

    def test_delivery_sends_due_triggers(self):
        reschedule(self.components)
        with patch.object(PushPlusChannel, "send") as send:
            deliver(self.components, now=NOW)
            self.assertEqual(deliver(self.components, now=datetime(2025, 1, 15, 9, 0)), [])
        send.assert_called_once()
        trigger, channel_config = send.call_args.args
        self.assertEqual(trigger.id, wire.TWICE_DAILY_MORNING_ID)
        self.assertEqual(channel_config["token"], "tok")

    def test_channel_failure_is_logged_not_raised(self):
        reschedule(self.components)
        with patch.object(PushPlusChannel, "send", side_effect=RuntimeError("boom")):
            due = deliver(self.components, now=NOW)
        self.assertEqual(len(due), 1)

    def test_respond_creates_intention_and_updates_widget(self):
        result = respond(self.components, wire.SET_INTENTION_ACTION, wire.WEEKLY_INTENTION, "Exercise more")
        self.assertEqual(result.outcome, "created")
        self.assertEqual(result.intention.anchor_date, datetime(2025, 1, 12))
        data = json.loads(self.widget_path.read_text(encoding="utf-8"))
        self.assertEqual(data["intention"]["text"], "Exercise more")
        # the confirmation goes out on the next delivery run
        with patch.object(PushPlusChannel, "send") as send:
            deliver(self.components, now=datetime(2025, 1, 15, 8, 30))
        self.assertEqual(send.call_args.args[0].title, "Intention Set!")

    def test_manager_shares_store_with_router(self):
        self.components.manager.create("Morning pages", Scope.DAY)
        result = respond(self.components, wire.SET_INTENTION_ACTION, wire.DAILY_INTENTION, "Second one")
        self.assertEqual(result.outcome, "failed")


class TestPushPlusChannel(unittest.TestCase):

    def setUp(self):
        self.trigger = TriggerSpec(
            id="daily-reminder",
            match=EVERY_DAY,
            hour=8,
            minute=0,
            repeating=True,
            title="Time to set your intention",
            body="What do you want to focus on?",
            category_id=wire.DAILY_INTENTION,
        )

    def test_registry(self):
        self.assertIs(get_channel("pushplus"), PushPlusChannel)
        with self.assertRaises(ValueError):
            get_channel("fax")

    def test_resolve_env(self):
        with patch.dict(os.environ, {"PUSH_TOKEN": "secret"}):
            self.assertEqual(resolve_env("${PUSH_TOKEN}"), "secret")
        self.assertEqual(resolve_env("${SURELY_UNSET_VAR_XYZ}"), "${SURELY_UNSET_VAR_XYZ}")

    def test_text_reply_hint(self):
        self.assertIn(wire.SET_INTENTION_ACTION, render_content(self.trigger))

    @patch("intentions.channel.pushplus.requests.post")
    def test_send_posts_payload(self, post):
        post.return_value = MagicMock(status_code=200, json=lambda: {"code": 200})
        PushPlusChannel().send(self.trigger, {"token": "tok", "topic": "me"})
        payload = post.call_args.kwargs["json"]
        self.assertEqual(payload["token"], "tok")
        self.assertEqual(payload["title"], "Time to set your intention")
        self.assertEqual(payload["topic"], "me")
        self.assertEqual(post.call_args.kwargs["timeout"], 10)

    @patch("intentions.channel.pushplus.requests.post")
    def test_missing_token_skips_request(self, post):
        PushPlusChannel().send(self.trigger, {})
        PushPlusChannel().send(self.trigger, {"token": "${SURELY_UNSET_VAR_XYZ}"})
        post.assert_not_called()


if __name__ == "__main__":
    unittest.main()
