from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)


# Inbound host events
PLAYER_DAMAGED = "player_damaged"
PLAYER_DISCONNECTED = "player_disconnected"
PLAYER_DIED = "player_died"

# Outbound channels used by the bus-backed collaborators
MESSAGE = "message"
BROADCAST = "broadcast"
COMMAND = "command"


@dataclass(frozen=True)
class Event:
    """Generic event container for host hooks and plugin output.

    Attributes:
        name: Event channel name, one of the module-level constants.
        payload: Arbitrary payload associated with the event.
    """
    name: str
    payload: Dict[str, Any]


class EventBus:
    """A lightweight thread-safe publish/subscribe event bus.

    Handlers are called synchronously, in registration order, on the thread
    that publishes. A failing handler is logged and the remaining handlers
    still run.
    """

    def __init__(self) -> None:
        self._subs: DefaultDict[str, List[Callable[[Event], None]]] = defaultdict(list)
        self._lock = RLock()

    def subscribe(self, event_name: str, callback: Callable[[Event], None]) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        with self._lock:
            if callback not in self._subs[event_name]:
                self._subs[event_name].append(callback)
                logger.debug("Subscribed %s to '%s'", getattr(callback, "__name__", str(callback)), event_name)

    def unsubscribe(self, event_name: str, callback: Callable[[Event], None]) -> None:
        """Remove a callback. Silently ignores callbacks that are not registered."""
        with self._lock:
            handlers = self._subs.get(event_name)
            if not handlers or callback not in handlers:
                return
            handlers.remove(callback)
            logger.debug("Unsubscribed %s from '%s'", getattr(callback, "__name__", str(callback)), event_name)
            if not handlers:
                del self._subs[event_name]

    def subscriber_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._subs.get(event_name, []))

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Publish an event to all registered subscribers.

        Args:
            event_name: The event name to publish.
            payload: A dictionary payload.
        """
        event = Event(name=event_name, payload=payload)
        with self._lock:
            subs = list(self._subs.get(event_name, []))
        logger.debug("Publishing event '%s' to %d subscribers with payload: %s", event_name, len(subs), payload)
        for cb in subs:
            try:
                cb(event)
            except Exception:
                logger.exception("Unhandled exception in event subscriber for '%s'", event_name)

    def clear(self) -> None:
        """Remove all handlers for all events (useful in tests)."""
        with self._lock:
            self._subs.clear()


__all__ = [
    "Event",
    "EventBus",
    "PLAYER_DAMAGED",
    "PLAYER_DISCONNECTED",
    "PLAYER_DIED",
    "MESSAGE",
    "BROADCAST",
    "COMMAND",
]
