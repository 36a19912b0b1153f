"""Channel layer: base + PushPlus; factory by type."""
from __future__ import annotations

from intentions.channel.base import Channel
from intentions.channel.pushplus import PushPlusChannel

_CHANNELS: dict[str, type[Channel]] = {
    "pushplus": PushPlusChannel,
}


def get_channel(channel_type: str) -> type[Channel]:
    """Return channel class for given type."""
    if channel_type not in _CHANNELS:
        raise ValueError(f"Unknown channel type: {channel_type}")
    return _CHANNELS[channel_type]


def channel_types() -> list[str]:
    return sorted(_CHANNELS)


__all__ = ["Channel", "PushPlusChannel", "channel_types", "get_channel"]
