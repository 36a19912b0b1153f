"""Widget projection of the active intention."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from intentions.models import ThemeSnapshot, WidgetSnapshot
from intentions.resolver import ActiveIntentionResolver

logger = logging.getLogger(__name__)


class WidgetSync(ABC):
    """Receives the snapshot to show, or None when nothing is active."""

    @abstractmethod
    def update(self, snapshot: WidgetSnapshot | None, theme: ThemeSnapshot | None = None) -> None:
        ...


class JsonWidgetSync(WidgetSync):
    """Writes the snapshot to a JSON file read by the widget."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def update(self, snapshot: WidgetSnapshot | None, theme: ThemeSnapshot | None = None) -> None:
        data = {
            "intention": _snapshot_dict(snapshot) if snapshot else None,
            "theme": asdict(theme) if theme else None,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.debug("widget data written to %s", self.path)

    def read(self) -> dict:
        if not self.path.exists():
            return {"intention": None, "theme": None}
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)


def _snapshot_dict(snapshot: WidgetSnapshot) -> dict:
    data = asdict(snapshot)
    data["scope_date"] = snapshot.scope_date.isoformat()
    return data


class WidgetProjector:
    def __init__(
        self,
        resolver: ActiveIntentionResolver,
        sink: WidgetSync,
        themes: Mapping[str, ThemeSnapshot] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.resolver = resolver
        self.sink = sink
        self.themes = dict(themes or {})
        self.clock = clock

    def refresh(self) -> WidgetSnapshot | None:
        """Resolve the active intention and push it (or None) to the sink."""
        intention = self.resolver.resolve_active(self.clock())
        if intention is None:
            self.sink.update(None, None)
            return None
        snapshot = WidgetSnapshot.from_intention(intention)
        theme = self.themes.get(intention.theme_id) if intention.theme_id else None
        if theme is not None and intention.font_name and not theme.font_name:
            theme = ThemeSnapshot(theme.background_color, theme.text_color, theme.accent_color, intention.font_name)
        self.sink.update(snapshot, theme)
        return snapshot
