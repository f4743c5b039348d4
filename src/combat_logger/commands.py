from __future__ import annotations

import logging
from typing import Optional, Protocol

from .events import COMMAND, EventBus
from .exceptions import CommandExecutionError

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Host command execution. ``origin`` is the identity the command runs as."""

    def execute(self, command: str, origin: Optional[int] = None) -> None:
        ...


class BusCommandRunner:
    """Publishes commands on the event bus for the host's command subsystem."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus

    def execute(self, command: str, origin: Optional[int] = None) -> None:
        if self.bus.subscriber_count(COMMAND) == 0:
            raise CommandExecutionError(f"No command handler registered for {command!r}")
        self.bus.publish(COMMAND, {"command": command, "origin": origin})


def dispatch(runner: CommandRunner, command: str, origin: Optional[int] = None) -> bool:
    """Fire-and-forget command dispatch.

    Failures are logged and reported as False; they never propagate to the
    caller.
    """
    command = command.strip()
    if not command:
        return False
    try:
        runner.execute(command, origin)
    except Exception:
        logger.exception("Command failed: %r (origin=%s)", command, origin)
        return False
    logger.debug("Dispatched command %r (origin=%s)", command, origin)
    return True


__all__ = ["CommandRunner", "BusCommandRunner", "dispatch"]
