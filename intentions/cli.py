"""CLI entry: python -m intentions.cli <command> [--config path]."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from intentions import wire
from intentions.config import DEFAULT_CONFIG
from intentions.errors import IntentionError
from intentions.models import Scope
from intentions.runner import build_components, deliver, open_config, reschedule, respond

LOG_DIR = Path("logs")


def _setup_logging() -> None:
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / "app.log"
    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
    formatter = logging.Formatter(fmt)
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not root.handlers:
        h_stderr = logging.StreamHandler(sys.stderr)
        h_stderr.setFormatter(formatter)
        root.addHandler(h_stderr)
        h_file = logging.FileHandler(log_file, encoding="utf-8")
        h_file.setFormatter(formatter)
        root.addHandler(h_file)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Intention reminders")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Config file path (default: {DEFAULT_CONFIG})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("schedule", help="Rebuild the reminder schedule from settings")

    run_parser = sub.add_parser("run", help="Deliver reminders due this minute")
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log due reminders but do not send them to the channel",
    )

    respond_parser = sub.add_parser("respond", help="Handle a reply to a reminder")
    respond_parser.add_argument(
        "--action",
        default=wire.SET_INTENTION_ACTION,
        choices=[wire.SET_INTENTION_ACTION, wire.SKIP_ACTION, wire.DEFAULT_ACTION],
    )
    respond_parser.add_argument("--category", default=wire.DAILY_INTENTION)
    respond_parser.add_argument("--text", default=None)

    add_parser = sub.add_parser("add", help="Create an intention")
    add_parser.add_argument("--scope", choices=[s.value for s in Scope], default=Scope.DAY.value)
    add_parser.add_argument("--text", required=True)
    add_parser.add_argument("--date", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today)")

    sub.add_parser("current", help="Show the active intention")
    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)

    _setup_logging()

    try:
        components = build_components(open_config(args.config))
        if args.command == "schedule":
            installed = reschedule(components)
            print(f"{len(installed)} reminder(s) scheduled")
        elif args.command == "run":
            deliver(components, dry_run=args.dry_run)
        elif args.command == "respond":
            result = respond(components, args.action, args.category, args.text)
            if result.navigate_to:
                print(f"open: {result.navigate_to}")
            for trigger in result.triggers:
                print(f"{trigger.title}: {trigger.body}")
        elif args.command == "add":
            intention = components.manager.create(args.text, Scope(args.scope), args.date)
            print(f"{intention.scope.value} intention saved: {intention.text}")
        elif args.command == "current":
            intention = components.manager.current()
            if intention is None:
                print("No active intention")
            else:
                print(f"[{intention.scope.value}] {intention.text}")
    except (FileNotFoundError, ValueError, IntentionError) as e:
        logging.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
