"""Delivery channel abstraction for due reminders."""
from __future__ import annotations

from abc import ABC, abstractmethod

from intentions.models import TriggerSpec


class Channel(ABC):
    """Abstract channel: send(trigger, channel_config) -> None."""

    @abstractmethod
    def send(self, trigger: TriggerSpec, channel_config: dict) -> None:
        """Deliver the trigger's title and body using the given channel config."""
        ...
