from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..items import Container, ItemRegistry, ItemStack
from ..players import Player
from ..settings import ExtraItemDescriptor
from ..world.grid import BlockPos, World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferResult:
    moved_stacks: int = 0
    moved_items: int = 0
    dropped_stacks: int = 0
    dropped_items: int = 0


def transfer_player_inventory_to_chest(
    player: Player,
    container: Container,
    world: World,
    drop_at: Optional[BlockPos] = None,
) -> TransferResult:
    """Move every occupied slot of ``player`` into ``container``.

    Slots are visited in the inventory's fixed order (main, armor, offhand)
    and stacks land in the container's next empty slot unchanged. Stacks that
    no longer fit are dropped on the ground at ``drop_at`` (default: the
    player's block position). Every visited slot is cleared, so the total
    item count across player, container and ground is conserved.
    """
    drop_pos = drop_at if drop_at is not None else player.block_pos
    moved_stacks = moved_items = dropped_stacks = dropped_items = 0
    for section, index, stack in list(player.inventory.iter_slots()):
        if stack is None:
            continue
        if container.add(stack):
            moved_stacks += 1
            moved_items += stack.count
        else:
            world.drop_item(drop_pos, stack)
            dropped_stacks += 1
            dropped_items += stack.count
        player.inventory.clear_slot(section, index)

    if dropped_stacks:
        logger.info(
            "Gravestone for %s overflowed: %d stack(s) dropped at %s",
            player.name,
            dropped_stacks,
            drop_pos,
        )
    return TransferResult(moved_stacks, moved_items, dropped_stacks, dropped_items)


def drop_player_inventory(player: Player, world: World) -> int:
    """Drop every occupied slot at the player's position. Returns the item count."""
    pos = player.block_pos
    dropped = 0
    for section, index, stack in list(player.inventory.iter_slots()):
        if stack is None:
            continue
        world.drop_item(pos, stack)
        player.inventory.clear_slot(section, index)
        dropped += stack.count
    logger.debug("Dropped %d item(s) of %s at %s", dropped, player.name, pos)
    return dropped


def build_item_stack(descriptor: ExtraItemDescriptor, registry: Optional[ItemRegistry] = None) -> Optional[ItemStack]:
    """Build the stack described by ``descriptor``.

    Returns None if the registry does not know the item id. Unknown
    enchantment ids are left off the stack.
    """
    registry = registry or ItemRegistry()
    if not registry.is_known_item(descriptor.id):
        logger.warning("Unknown item id %d in extraItems; skipped", descriptor.id)
        return None
    enchantments = []
    for enchant_id, level in descriptor.enchants:
        if registry.is_known_enchantment(enchant_id):
            enchantments.append((enchant_id, level))
        else:
            logger.warning("Unknown enchantment id %d on extra item %d; ignored", enchant_id, descriptor.id)
    return ItemStack(
        item_id=descriptor.id,
        aux=descriptor.aux,
        count=descriptor.count,
        custom_name=descriptor.custom_name,
        lore=tuple(descriptor.lore),
        enchantments=tuple(enchantments),
    )


def try_add_extra_items_to_chest(
    container: Container,
    descriptors: Iterable[ExtraItemDescriptor],
    registry: Optional[ItemRegistry] = None,
) -> int:
    """Append configured extra items in order until the container is full.

    Items that do not fit are skipped silently. Returns the number of stacks
    added.
    """
    added = 0
    for descriptor in descriptors:
        if container.is_full():
            logger.debug("Gravestone full; remaining extra items skipped")
            break
        stack = build_item_stack(descriptor, registry)
        if stack is None:
            continue
        container.add(stack)
        added += 1
    return added


__all__ = [
    "TransferResult",
    "transfer_player_inventory_to_chest",
    "drop_player_inventory",
    "build_item_stack",
    "try_add_extra_items_to_chest",
]
