"""Resolve which intention is active: day beats week beats month."""
from __future__ import annotations

import logging
from datetime import date, datetime

from intentions.calendar import ScopeCalendar
from intentions.models import SCOPE_PRECEDENCE, Intention, Scope
from intentions.store import IntentionStore

logger = logging.getLogger(__name__)


class ActiveIntentionResolver:
    """Looks up intentions by scope and calendar range.

    The store is asked only for all intentions of a scope; range containment
    is computed here, since the store cannot express calendar boundaries.
    """

    def __init__(self, store: IntentionStore, calendar: ScopeCalendar) -> None:
        self.store = store
        self.calendar = calendar

    def find_for_scope(self, scope: Scope, reference: date | datetime) -> Intention | None:
        for intention in self.store.find_all(scope):
            if self.calendar.contains(scope, reference, intention.anchor_date):
                return intention
        return None

    def exists_for_scope(self, scope: Scope, reference: date | datetime) -> bool:
        return self.find_for_scope(scope, reference) is not None

    def resolve_active(self, now: datetime) -> Intention | None:
        for scope in SCOPE_PRECEDENCE:
            intention = self.find_for_scope(scope, now)
            if intention is not None:
                logger.debug("active intention is %s (%s)", intention.id, scope.value)
                return intention
        return None
