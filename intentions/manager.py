"""User-initiated intention CRUD.

Unlike the reminder-response path, every error here reaches the caller.
"""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from intentions.errors import DuplicateRangeError
from intentions.models import SCOPE_PRECEDENCE, Intention, Scope, validate_text
from intentions.resolver import ActiveIntentionResolver
from intentions.store import IntentionStore
from intentions.widget import WidgetProjector

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 3


class IntentionManager:
    def __init__(
        self,
        store: IntentionStore,
        resolver: ActiveIntentionResolver,
        widget: WidgetProjector | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.widget = widget
        self.clock = clock

    def create(self, text: str, scope: Scope, anchor_date: date | datetime | None = None, **extra: Any) -> Intention:
        """Validate and store a new intention.

        Raises ValidationError for bad text, DuplicateRangeError when the
        slot is already taken, StoreError when persisting fails.
        """
        text = validate_text(text, min_length=MIN_TEXT_LENGTH)
        now = self.clock()
        anchor = self.resolver.calendar.normalize(anchor_date if anchor_date is not None else now)
        existing = self.resolver.find_for_scope(scope, anchor)
        if existing is not None:
            start, end = self.resolver.calendar.compute_range(scope, anchor)
            raise DuplicateRangeError(scope, start, end)
        intention = Intention(text=text, scope=scope, anchor_date=anchor, created_at=now, updated_at=now, **extra)
        self.store.create(intention)
        logger.info("created %s intention %s", scope.value, intention.id)
        self._changed()
        return intention

    def update(self, intention: Intention, **changes: Any) -> Intention:
        if "text" in changes:
            changes["text"] = validate_text(changes["text"], min_length=MIN_TEXT_LENGTH)
        updated = dataclasses.replace(intention, updated_at=self.clock(), **changes)
        self.store.update(updated)
        logger.info("updated intention %s", updated.id)
        self._changed()
        return updated

    def delete(self, intention: Intention) -> None:
        self.store.delete(intention)
        logger.info("deleted intention %s", intention.id)
        self._changed()

    def current(self, now: datetime | None = None) -> Intention | None:
        return self.resolver.resolve_active(now or self.clock())

    def list(self, scope: Scope | None = None) -> list[Intention]:
        """Newest anchor first."""
        scopes = [scope] if scope is not None else list(SCOPE_PRECEDENCE)
        items = [i for s in scopes for i in self.store.find_all(s)]
        return sorted(items, key=lambda i: self.resolver.calendar.normalize(i.anchor_date), reverse=True)

    def search(self, query: str) -> list[Intention]:
        query = query.strip().lower()
        if not query:
            return self.list()
        return [i for i in self.list() if query in i.text.lower()]

    def _changed(self) -> None:
        if self.widget is None:
            return
        try:
            self.widget.refresh()
        except OSError as e:
            logger.warning("widget refresh failed: %s", e)
