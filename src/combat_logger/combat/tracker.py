from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from ..messaging import Messenger, format_template, send_safely
from ..players import PlayerDatabase
from ..scheduler import RecurringTimer, Scheduler, TimerState
from ..settings import CombatSettings
from .session import CombatSession

logger = logging.getLogger(__name__)

DECAY_INTERVAL_SECONDS = 1.0


class CombatTracker:
    """Owns the combat registry and its once-per-second decay timer.

    All state changes go through the methods below. The timer runs exactly
    while at least one session exists: the first ``mark_in_combat`` starts it
    and the removal that empties the registry stops it.

    Not thread-safe. The host must deliver damage, disconnect and death events
    and the decay tick on the same thread.
    """

    def __init__(
        self,
        settings: CombatSettings,
        scheduler: Scheduler,
        messenger: Messenger,
        players: PlayerDatabase,
    ) -> None:
        self.settings = settings
        self.messenger = messenger
        self.players = players
        self._sessions: Dict[int, CombatSession] = {}
        self._timer = RecurringTimer(scheduler, self.tick, DECAY_INTERVAL_SECONDS)

    # ------------------------ Queries ------------------------
    @property
    def timer_state(self) -> TimerState:
        return self._timer.state

    @property
    def timer_running(self) -> bool:
        return self._timer.running

    def is_in_combat(self, identity: int) -> bool:
        return identity in self._sessions

    def is_in_combat_with(self, a: int, b: int) -> bool:
        """True when both players currently hold a session."""
        return a in self._sessions and b in self._sessions

    def remaining_seconds(self, identity: int) -> Optional[int]:
        session = self._sessions.get(identity)
        return session.remaining_seconds if session is not None else None

    def last_aggressor(self, identity: int) -> Optional[int]:
        session = self._sessions.get(identity)
        return session.last_aggressor if session is not None else None

    def session(self, identity: int) -> Optional[CombatSession]:
        """Return a snapshot of the session; mutating it has no effect."""
        session = self._sessions.get(identity)
        return replace(session) if session is not None else None

    def identities(self) -> List[int]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, identity: object) -> bool:
        return identity in self._sessions

    # ------------------------ Mutations ------------------------
    def mark_in_combat(self, identity: int, aggressor: Optional[int] = None) -> bool:
        """Start or refresh the combat countdown for ``identity``.

        Returns False when the player is exempt (operators, if configured).
        """
        if not self.settings.operators_can_be_in_combat and self.players.is_operator(identity):
            logger.debug("Operator %s is exempt from combat tracking", identity)
            return False

        duration = self.settings.combat_time
        session = self._sessions.get(identity)
        if session is None:
            self._sessions[identity] = CombatSession(identity, duration, aggressor)
            logger.debug("%s entered combat for %ds", identity, duration)
            send_safely(self.messenger, identity, self.settings.initiated_combat_message)
        else:
            session.remaining_seconds = duration
            if aggressor is not None:
                session.last_aggressor = aggressor
        self._timer.start()
        return True

    def clear_combat_status(self, identity: int) -> bool:
        """Remove the session for ``identity``. Idempotent; returns True if one existed."""
        removed = self._sessions.pop(identity, None) is not None
        if removed:
            logger.debug("Cleared combat status for %s", identity)
        self.stop_timer_if_empty()
        return removed

    def clear_all(self) -> None:
        self._sessions.clear()
        self.stop_timer_if_empty()

    def tick(self) -> None:
        """Decay step, called once per second while the timer runs."""
        expired: List[int] = []
        for identity, session in list(self._sessions.items()):
            # Message delivery runs host code that may clear other sessions.
            if self._sessions.get(identity) is not session:
                continue
            session.remaining_seconds -= 1
            if session.remaining_seconds <= 0:
                self._sessions.pop(identity, None)
                expired.append(identity)
                send_safely(self.messenger, identity, self.settings.ended_combat_message)
            elif self.settings.combat_time_message_enabled:
                text = format_template(self.settings.combat_time_message, {"time": session.remaining_seconds})
                send_safely(self.messenger, identity, text)
        if expired:
            logger.debug("Combat expired for %s", expired)
        self.stop_timer_if_empty()

    def stop_timer_if_empty(self) -> None:
        if not self._sessions and self._timer.running:
            self._timer.stop()


__all__ = ["CombatTracker", "DECAY_INTERVAL_SECONDS"]
