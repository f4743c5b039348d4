from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from ..items import ItemRegistry
from ..messaging import Messenger, format_template, send_safely
from ..players import Player
from ..settings import CombatSettings
from ..world.blocks import CHEST
from ..world.grid import BlockPos, Dimension, World
from .search import SafeSitePair, find_safe_site
from .transfer import TransferResult, transfer_player_inventory_to_chest, try_add_extra_items_to_chest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GravestoneResult:
    site: SafeSitePair
    transfer: TransferResult
    extra_items: int = 0


class GravestoneBuilder:
    """Places a chest near a death location and fills it with the victim's items."""

    def __init__(
        self,
        settings: CombatSettings,
        worlds: Mapping[Dimension, World],
        messenger: Messenger,
        registry: Optional[ItemRegistry] = None,
    ) -> None:
        self.settings = settings
        self.worlds = worlds
        self.messenger = messenger
        self.registry = registry

    def build(self, player: Player, position: Optional[BlockPos] = None) -> Optional[GravestoneResult]:
        """Create the gravestone, or return None and leave the inventory alone.

        ``position`` defaults to the voxel the player stands in. A victim with
        an empty inventory gets no chest at all, so configured extra items are
        only ever added alongside real belongings.
        """
        world = self.worlds.get(player.dimension)
        if world is None:
            logger.warning("No world loaded for %s; gravestone for %s skipped", player.dimension.label, player.name)
            return None
        if player.inventory.is_empty():
            logger.debug("%s has an empty inventory; no gravestone", player.name)
            return None

        origin = position if position is not None else player.block_pos
        site = find_safe_site(world, origin, self.settings.search_radius, self.settings.search_height)
        if site is None:
            logger.info("No safe gravestone site near %s for %s; using default drops", origin, player.name)
            return None

        container = world.place_container(site.placement, CHEST)
        transfer = transfer_player_inventory_to_chest(player, container, world, drop_at=site.placement)
        extra = 0
        if self.settings.enable_extra_items_for_chest_gravestone:
            extra = try_add_extra_items_to_chest(container, self.settings.extra_items, self.registry)

        pos = site.placement
        logger.info(
            "Placed gravestone for %s at %s in %s (%d stacks, %d extra)",
            player.name,
            pos,
            player.dimension.label,
            transfer.moved_stacks,
            extra,
        )
        text = format_template(
            self.settings.gravestone_location_message,
            {"x": pos.x, "y": pos.y, "z": pos.z, "dimension": player.dimension.label},
        )
        send_safely(self.messenger, player.identity, text)
        return GravestoneResult(site=site, transfer=transfer, extra_items=extra)


__all__ = ["GravestoneBuilder", "GravestoneResult"]
