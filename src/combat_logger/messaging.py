from __future__ import annotations

import logging
from typing import Mapping, Protocol

from .events import BROADCAST, MESSAGE, EventBus

logger = logging.getLogger(__name__)


class Messenger(Protocol):
    def send(self, identity: int, text: str) -> None:
        ...

    def broadcast(self, text: str) -> None:
        ...


class BusMessenger:
    """Messenger that publishes chat output on the event bus for the host to deliver."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus

    def send(self, identity: int, text: str) -> None:
        self.bus.publish(MESSAGE, {"identity": identity, "text": text})

    def broadcast(self, text: str) -> None:
        self.bus.publish(BROADCAST, {"text": text})


def format_template(template: str, values: Mapping[str, object]) -> str:
    """Substitute ``%key%`` placeholders. Unknown placeholders are left untouched."""
    text = template
    for key, value in values.items():
        text = text.replace(f"%{key}%", str(value))
    return text


def send_safely(messenger: Messenger, identity: int, text: str) -> bool:
    """Deliver a message; a blank text or a delivery failure is logged, never raised."""
    if not text:
        return False
    try:
        messenger.send(identity, text)
    except Exception:
        logger.exception("Failed to deliver message to %s", identity)
        return False
    return True


def broadcast_safely(messenger: Messenger, text: str) -> bool:
    if not text:
        return False
    try:
        messenger.broadcast(text)
    except Exception:
        logger.exception("Failed to broadcast message: %r", text)
        return False
    return True


__all__ = ["Messenger", "BusMessenger", "format_template", "send_safely", "broadcast_safely"]
