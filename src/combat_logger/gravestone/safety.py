from __future__ import annotations

from ..world.blocks import BlockType
from ..world.grid import BlockPos, World


def is_safe_block(block: BlockType, is_above_block: bool) -> bool:
    """Classify a single cell for gravestone placement.

    With ``is_above_block`` false the cell is the support: it must be solid,
    non-liquid, non-hazardous and not itself a container. With
    ``is_above_block`` true the cell receives the chest: it must be
    replaceable (air-like), dry and harmless.
    """
    if block.liquid or block.hazardous:
        return False
    if is_above_block:
        return block.replaceable and not block.solid
    return block.solid and not block.replaceable and not block.container


def is_safe_region(world: World, placement: BlockPos) -> bool:
    """Check the neighbourhood of a placement cell.

    The cell above must stay open so the chest can be opened, and no
    horizontal neighbour may be a container (chests would merge), a liquid or
    a hazard.
    """
    above = world.get_block(placement.above())
    if above.solid or above.liquid or above.hazardous:
        return False
    for pos in placement.horizontal_neighbors():
        block = world.get_block(pos)
        if block.container or block.liquid or block.hazardous:
            return False
    return True


__all__ = ["is_safe_block", "is_safe_region"]
