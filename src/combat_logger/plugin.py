from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .combat.damage import DamageSource, PlayerAttack
from .combat.tracker import CombatTracker
from .commands import BusCommandRunner, CommandRunner
from .death import DeathOutcome, DeathSequenceHandler
from .events import PLAYER_DAMAGED, PLAYER_DIED, PLAYER_DISCONNECTED, Event, EventBus
from .gravestone.builder import GravestoneBuilder
from .items import ItemRegistry
from .messaging import BusMessenger, Messenger, broadcast_safely, format_template
from .players import PlayerDatabase
from .scheduler import Scheduler
from .settings import CombatSettings
from .world.grid import BlockPos, Dimension, World

logger = logging.getLogger(__name__)


class CombatLoggerPlugin:
    """Wires host events to the combat tracker and the death sequence.

    Lifecycle: :meth:`enable` subscribes to the host events on ``bus``,
    :meth:`disable` unsubscribes, stops the decay timer and forgets every
    session. Both are idempotent.

    Host events (published on the bus):
        player_damaged: ``{"victim": int, "source": DamageSource}``
        player_died: ``{"victim": int, "source": DamageSource, "position": BlockPos | None}``
        player_disconnected: ``{"identity": int}``
    """

    def __init__(
        self,
        settings: CombatSettings,
        bus: EventBus,
        scheduler: Scheduler,
        players: PlayerDatabase,
        worlds: Mapping[Dimension, World],
        messenger: Optional[Messenger] = None,
        commands: Optional[CommandRunner] = None,
        registry: Optional[ItemRegistry] = None,
    ) -> None:
        self.settings = settings
        self.bus = bus
        self.players = players
        self.worlds: Dict[Dimension, World] = dict(worlds)
        self.messenger = messenger or BusMessenger(bus)
        self.commands = commands or BusCommandRunner(bus)
        self.tracker = CombatTracker(settings, scheduler, self.messenger, players)
        self.gravestones = GravestoneBuilder(settings, self.worlds, self.messenger, registry)
        self.deaths = DeathSequenceHandler(
            settings,
            self.tracker,
            players,
            self.messenger,
            self.commands,
            self.gravestones,
            self.worlds,
        )
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ------------------------ Lifecycle ------------------------
    def enable(self) -> None:
        if self._enabled:
            return
        self.bus.subscribe(PLAYER_DAMAGED, self._on_damaged_event)
        self.bus.subscribe(PLAYER_DIED, self._on_died_event)
        self.bus.subscribe(PLAYER_DISCONNECTED, self._on_disconnected_event)
        self._enabled = True
        logger.info("Combat logger enabled (combat time %ds)", self.settings.combat_time)

    def disable(self) -> None:
        if not self._enabled:
            return
        self.bus.unsubscribe(PLAYER_DAMAGED, self._on_damaged_event)
        self.bus.unsubscribe(PLAYER_DIED, self._on_died_event)
        self.bus.unsubscribe(PLAYER_DISCONNECTED, self._on_disconnected_event)
        self.tracker.clear_all()
        self._enabled = False
        logger.info("Combat logger disabled")

    # ------------------------ Handlers ------------------------
    def on_player_damaged(self, victim: int, source: DamageSource) -> bool:
        """Tag both players when one player hurts another. Returns True if tagged."""
        if not isinstance(source, PlayerAttack):
            return False
        attacker = source.attacker
        if attacker == victim or victim not in self.players or attacker not in self.players:
            return False
        victim_tagged = self.tracker.mark_in_combat(victim, aggressor=attacker)
        attacker_tagged = self.tracker.mark_in_combat(attacker)
        return victim_tagged or attacker_tagged

    def on_player_died(
        self,
        victim: int,
        source: Optional[DamageSource] = None,
        position: Optional[BlockPos] = None,
    ) -> Optional[DeathOutcome]:
        player = self.players.get(victim)
        if player is None:
            logger.warning("Death event for unknown player %s ignored", victim)
            self.tracker.clear_combat_status(victim)
            return None
        if self.settings.death_sequence_requires_combat and not self.tracker.is_in_combat(victim):
            logger.debug("%s died out of combat; death sequence skipped", player.name)
            return None
        return self.deaths.handle(player, source, position)

    def on_player_disconnected(self, identity: int) -> Optional[DeathOutcome]:
        """Penalise a combat logout; otherwise do nothing."""
        if not self.tracker.is_in_combat(identity):
            return None
        player = self.players.get(identity)
        if player is None:
            self.tracker.clear_combat_status(identity)
            return None
        text = format_template(self.settings.logout_while_in_combat_message, {"name": player.name})
        broadcast_safely(self.messenger, text)
        return self.deaths.handle(player, None, logout=True)

    def clear(self, identity: int) -> bool:
        """Administrative clear of one player's combat status."""
        return self.tracker.clear_combat_status(identity)

    # ------------------------ Bus adapters ------------------------
    def _on_damaged_event(self, event: Event) -> None:
        self.on_player_damaged(event.payload["victim"], event.payload["source"])

    def _on_died_event(self, event: Event) -> None:
        self.on_player_died(event.payload["victim"], event.payload.get("source"), event.payload.get("position"))

    def _on_disconnected_event(self, event: Event) -> None:
        self.on_player_disconnected(event.payload["identity"])


__all__ = ["CombatLoggerPlugin"]
