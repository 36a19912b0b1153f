"""PushPlus channel: delivers a reminder as a PushPlus message."""
from __future__ import annotations

import logging
import os
import re
from typing import Any

import requests

from intentions import wire
from intentions.channel.base import Channel
from intentions.models import TriggerSpec

logger = logging.getLogger(__name__)

PUSHPLUS_URL = "https://www.pushplus.plus/send"
SEND_TIMEOUT = 10

# Match ${VAR_NAME} in token string
ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def resolve_env(raw: str) -> str:
    """Replace ${ENV_VAR} with os.environ values; unknown names are left as-is."""
    def repl(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(0))
    return ENV_PLACEHOLDER_RE.sub(repl, raw)


def render_content(trigger: TriggerSpec) -> str:
    """Message body; text-reply categories get a hint on how to answer."""
    content = trigger.body or trigger.title
    if wire.accepts_text_reply(trigger.category_id):
        content += f"\n\nReply: intentions respond --action {wire.SET_INTENTION_ACTION} --category {trigger.category_id} --text \"...\""
    return content


class PushPlusChannel(Channel):
    """POST to the PushPlus API with token/title/content/template."""

    def send(self, trigger: TriggerSpec, channel_config: dict) -> None:
        token = channel_config.get("token")
        if not token:
            logger.error("PushPlus channel_config missing 'token'")
            return
        token = resolve_env(token)
        if not token or ENV_PLACEHOLDER_RE.search(token):
            logger.error("PushPlus token is empty or references an unset env var. Check .env")
            return
        payload: dict[str, Any] = {
            "token": token,
            "title": trigger.title,
            "content": render_content(trigger),
            "template": "txt",
        }
        topic = channel_config.get("topic")
        if topic:
            payload["topic"] = topic

        try:
            resp = requests.post(PUSHPLUS_URL, json=payload, timeout=SEND_TIMEOUT)
            if resp.status_code != 200:
                logger.error(
                    "PushPlus send failed: trigger=%s status=%s body=%s",
                    trigger.id,
                    resp.status_code,
                    resp.text[:500],
                )
                return
            data = resp.json()
            if isinstance(data, dict) and data.get("code") != 200:
                logger.error(
                    "PushPlus API error: trigger=%s code=%s msg=%s",
                    trigger.id,
                    data.get("code"),
                    data.get("msg", ""),
                )
                return
            logger.info("PushPlus delivered trigger %s", trigger.id)
        except requests.RequestException as e:
            logger.exception("PushPlus request failed for trigger %s: %s", trigger.id, e)
