"""Intention store contract with in-memory and YAML file implementations.

The store filters by identity and scope only. Temporal containment is the
resolver's job; the one exception is the uniqueness check on write, since
the store is the final arbiter of the (scope, range) invariant.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from intentions.calendar import ScopeCalendar
from intentions.errors import DuplicateRangeError, StoreError, ValidationError
from intentions.models import Intention, Scope

logger = logging.getLogger(__name__)


class IntentionStore(ABC):
    """Durable home of intentions. Each call is an independent unit of work."""

    @abstractmethod
    def create(self, intention: Intention) -> None:
        """Insert; raise DuplicateRangeError if the (scope, range) slot is taken."""
        ...

    @abstractmethod
    def find_all(self, scope: Scope) -> list[Intention]:
        ...

    @abstractmethod
    def find_by_id(self, intention_id: str) -> Intention | None:
        ...

    @abstractmethod
    def update(self, intention: Intention) -> None:
        ...

    @abstractmethod
    def delete(self, intention: Intention) -> None:
        ...


class MemoryIntentionStore(IntentionStore):
    """Dict-backed store; enforces one intention per (scope, range)."""

    def __init__(self, calendar: ScopeCalendar | None = None) -> None:
        self.calendar = calendar or ScopeCalendar()
        self._items: dict[str, Intention] = {}

    def _check_slot(self, intention: Intention) -> None:
        for other in self._items.values():
            if other.id == intention.id or other.scope is not intention.scope:
                continue
            if self.calendar.same_slot(intention.scope, intention.anchor_date, other.anchor_date):
                start, end = self.calendar.compute_range(intention.scope, intention.anchor_date)
                raise DuplicateRangeError(intention.scope, start, end)

    def create(self, intention: Intention) -> None:
        if intention.id in self._items:
            raise ValidationError(f"intention id '{intention.id}' already exists")
        self._check_slot(intention)
        self._items[intention.id] = intention
        try:
            self._persist()
        except StoreError:
            del self._items[intention.id]
            raise
        logger.debug("created %s intention %s", intention.scope.value, intention.id)

    def find_all(self, scope: Scope) -> list[Intention]:
        return [i for i in self._items.values() if i.scope is scope]

    def all(self) -> list[Intention]:
        return list(self._items.values())

    def find_by_id(self, intention_id: str) -> Intention | None:
        return self._items.get(intention_id)

    def update(self, intention: Intention) -> None:
        previous = self._items.get(intention.id)
        if previous is None:
            raise StoreError(f"intention '{intention.id}' not found")
        self._check_slot(intention)
        self._items[intention.id] = intention
        try:
            self._persist()
        except StoreError:
            self._items[intention.id] = previous
            raise

    def delete(self, intention: Intention) -> None:
        previous = self._items.pop(intention.id, None)
        if previous is None:
            raise StoreError(f"intention '{intention.id}' not found")
        try:
            self._persist()
        except StoreError:
            self._items[intention.id] = previous
            raise

    def _persist(self) -> None:
        """Hook for durable subclasses."""


def intention_to_dict(intention: Intention) -> dict[str, Any]:
    return {
        "id": intention.id,
        "text": intention.text,
        "scope": intention.scope.value,
        "anchor_date": intention.anchor_date.isoformat(),
        "created_at": intention.created_at.isoformat(),
        "updated_at": intention.updated_at.isoformat(),
        "ai_generated": intention.ai_generated,
        "ai_rephrased": intention.ai_rephrased,
        "theme_id": intention.theme_id,
        "quote": intention.quote,
        "font_name": intention.font_name,
    }


def intention_from_dict(data: dict[str, Any]) -> Intention:
    return Intention(
        id=str(data["id"]),
        text=data["text"],
        scope=Scope(data["scope"]),
        anchor_date=datetime.fromisoformat(data["anchor_date"]),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
        ai_generated=bool(data.get("ai_generated", False)),
        ai_rephrased=bool(data.get("ai_rephrased", False)),
        theme_id=data.get("theme_id"),
        quote=data.get("quote"),
        font_name=data.get("font_name"),
    )


class YamlIntentionStore(MemoryIntentionStore):
    """Memory store mirrored to a YAML file after every write."""

    def __init__(self, path: str | Path, calendar: ScopeCalendar | None = None) -> None:
        super().__init__(calendar)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            for item in raw.get("intentions") or []:
                intention = intention_from_dict(item)
                self._items[intention.id] = intention
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            raise StoreError(f"cannot read intentions from {self.path}: {e}") from e
        logger.debug("loaded %s intentions from %s", len(self._items), self.path)

    def _persist(self) -> None:
        data = {"intentions": [intention_to_dict(i) for i in self._items.values()]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        except OSError as e:
            raise StoreError(f"cannot write intentions to {self.path}: {e}") from e
