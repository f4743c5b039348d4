from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .combat.damage import DamageSource, attacker_of
from .combat.tracker import CombatTracker
from .commands import CommandRunner, dispatch
from .gravestone.builder import GravestoneBuilder, GravestoneResult
from .gravestone.transfer import drop_player_inventory
from .messaging import Messenger, broadcast_safely, format_template
from .players import Player, PlayerDatabase
from .settings import CombatSettings, KillerAttribution
from .world.grid import BlockPos, Dimension, World

logger = logging.getLogger(__name__)

HEALTH_GLYPH = "\ue1fe"
ABSORPTION_GLYPH = "\ue1ff"
HEALTH_ASCII = "\u00a7c\u2764\u00a7r"  # red heart, colour reset
ABSORPTION_ASCII = "\u00a7e\u2764\u00a7r"  # yellow heart


def _hearts(points: float) -> str:
    return f"{round(max(points, 0.0) / 2, 1):g}"


def format_health_indicator(health: float, absorption: float = 0.0, use_glyphs: bool = False) -> str:
    """Render remaining health (and absorption, if any) as hearts.

    Health points are shown as hearts (two points per heart). With
    ``use_glyphs`` the resource-pack glyphs are used, otherwise colour-coded
    heart characters.
    """
    health_icon = HEALTH_GLYPH if use_glyphs else HEALTH_ASCII
    absorption_icon = ABSORPTION_GLYPH if use_glyphs else ABSORPTION_ASCII
    text = f"{_hearts(health)} {health_icon}"
    if absorption > 0:
        text += f" {_hearts(absorption)} {absorption_icon}"
    return text


@dataclass(frozen=True)
class DeathOutcome:
    victim: int
    killer: Optional[int] = None
    commands_dispatched: int = 0
    gravestone: Optional[GravestoneResult] = None
    dropped_items: int = 0


class DeathSequenceHandler:
    """Runs the configured reaction to a player death (or combat logout).

    Steps: resolve the killer, run the scripted commands, announce the kill,
    clear combat state, then build a gravestone when enabled. Collaborator
    failures are logged and never stop the later steps.
    """

    def __init__(
        self,
        settings: CombatSettings,
        tracker: CombatTracker,
        players: PlayerDatabase,
        messenger: Messenger,
        commands: CommandRunner,
        gravestones: GravestoneBuilder,
        worlds: Mapping[Dimension, World],
    ) -> None:
        self.settings = settings
        self.tracker = tracker
        self.players = players
        self.messenger = messenger
        self.commands = commands
        self.gravestones = gravestones
        self.worlds = worlds

    def resolve_killer(self, victim: int, source: Optional[DamageSource]) -> Optional[int]:
        attacker = attacker_of(source)
        if attacker == victim:
            attacker = None
        aggressor = self.tracker.last_aggressor(victim)
        if aggressor is not None and (aggressor == victim or not self.tracker.is_in_combat_with(victim, aggressor)):
            aggressor = None

        if self.settings.killer_attribution is KillerAttribution.RECENT_AGGRESSOR:
            return aggressor if aggressor is not None else attacker
        return attacker if attacker is not None else aggressor

    def handle(
        self,
        victim: Player,
        source: Optional[DamageSource] = None,
        position: Optional[BlockPos] = None,
        logout: bool = False,
    ) -> DeathOutcome:
        killer = self.resolve_killer(victim.identity, source)
        killer_name = self.players.name_of(killer) if killer is not None else None
        logger.info(
            "%s %s%s",
            victim.name,
            "logged out in combat" if logout else "died",
            f" (killer: {killer_name})" if killer_name else "",
        )

        dispatched = 0
        if self.settings.execute_death_commands:
            names = {"name": victim.name, "victim": victim.name}
            if dispatch(self.commands, format_template(self.settings.death_command, names), victim.identity):
                dispatched += 1
            if killer is not None:
                names = {"name": killer_name, "killer": killer_name, "victim": victim.name}
                if dispatch(self.commands, format_template(self.settings.killer_command, names), killer):
                    dispatched += 1

        if killer is not None and not logout:
            self._announce_kill(victim, killer, killer_name)

        self.tracker.clear_combat_status(victim.identity)
        if killer is not None and self.settings.clear_killer_on_death:
            self.tracker.clear_combat_status(killer)

        enabled = self.settings.set_chest_gravestone_on_log if logout else self.settings.set_chest_gravestone_on_death
        gravestone = self.gravestones.build(victim, position) if enabled else None

        dropped = 0
        if logout and gravestone is None and self.settings.drop_inventory_on_log:
            world = self.worlds.get(victim.dimension)
            if world is not None:
                dropped = drop_player_inventory(victim, world)

        return DeathOutcome(
            victim=victim.identity,
            killer=killer,
            commands_dispatched=dispatched,
            gravestone=gravestone,
            dropped_items=dropped,
        )

    def _announce_kill(self, victim: Player, killer: int, killer_name: Optional[str]) -> None:
        template = self.settings.killed_by_player_message
        if not template:
            return
        killer_player = self.players.get(killer)
        health = ""
        if killer_player is not None:
            health = format_health_indicator(
                killer_player.health,
                killer_player.absorption,
                self.settings.use_resource_pack_glyphs_in_death_message,
            )
        text = format_template(template, {"victim": victim.name, "killer": killer_name, "health": health})
        broadcast_safely(self.messenger, text.strip())


__all__ = [
    "DeathOutcome",
    "DeathSequenceHandler",
    "format_health_indicator",
    "HEALTH_GLYPH",
    "ABSORPTION_GLYPH",
    "HEALTH_ASCII",
    "ABSORPTION_ASCII",
]
