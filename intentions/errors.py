"""Error taxonomy shared by the store, scheduler and response paths."""
from __future__ import annotations


class IntentionError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(IntentionError):
    """Invalid input: empty or over-long text, occupied scope range."""


class DuplicateRangeError(ValidationError):
    """An intention already occupies the (scope, range) slot."""

    def __init__(self, scope, start, end) -> None:
        super().__init__(
            f"an intention for scope '{scope.value}' already exists in [{start.isoformat()}, {end.isoformat()})"
        )
        self.scope = scope
        self.start = start
        self.end = end


class StoreError(IntentionError):
    """Persistence failure in the intention store."""


class DispatcherError(IntentionError):
    """The dispatcher could not read or write its pending triggers."""


class SchedulingError(DispatcherError):
    """A single trigger was rejected by the dispatcher."""

    def __init__(self, trigger_id: str, reason: str) -> None:
        super().__init__(f"trigger '{trigger_id}' rejected: {reason}")
        self.trigger_id = trigger_id
        self.reason = reason
