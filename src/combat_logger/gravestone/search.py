from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from ..world.grid import BlockPos, World
from .safety import is_safe_block, is_safe_region

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 4
DEFAULT_HEIGHT = 3


@dataclass(frozen=True)
class SafeSitePair:
    """Where a gravestone goes: ``placement`` sits directly on ``support``."""

    support: BlockPos
    placement: BlockPos


@lru_cache(maxsize=16)
def search_offsets(radius: int, height: int) -> Tuple[Tuple[int, int, int], ...]:
    """Candidate offsets around the origin in search order.

    Ordered by Manhattan distance, then by vertical distance (same level
    first, upward before downward), then by x and z. The order is fixed so the
    same world always yields the same site.
    """
    if radius < 0 or height < 0:
        raise ValueError("radius and height must be non-negative")
    offsets = [
        (dx, dy, dz)
        for dx in range(-radius, radius + 1)
        for dy in range(-height, height + 1)
        for dz in range(-radius, radius + 1)
    ]
    offsets.sort(key=lambda o: (abs(o[0]) + abs(o[1]) + abs(o[2]), abs(o[1]), -o[1], o[0], o[2]))
    return tuple(offsets)


def is_valid_site(world: World, placement: BlockPos) -> bool:
    support = placement.below()
    return (
        is_safe_block(world.get_block(support), is_above_block=False)
        and is_safe_block(world.get_block(placement), is_above_block=True)
        and is_safe_region(world, placement)
    )


def find_safe_site(
    world: World,
    origin: BlockPos,
    radius: int = DEFAULT_RADIUS,
    height: int = DEFAULT_HEIGHT,
) -> Optional[SafeSitePair]:
    """Find the nearest safe gravestone site around ``origin``.

    Examines at most ``(2*radius+1)**2 * (2*height+1)`` cells and returns
    None when none qualifies.
    """
    for dx, dy, dz in search_offsets(radius, height):
        placement = origin.offset(dx, dy, dz)
        if is_valid_site(world, placement):
            site = SafeSitePair(support=placement.below(), placement=placement)
            logger.debug("Safe gravestone site for %s: %s on %s", origin, site.placement, site.support)
            return site
    logger.debug("No safe gravestone site within r=%d h=%d of %s", radius, height, origin)
    return None


__all__ = ["SafeSitePair", "search_offsets", "is_valid_site", "find_safe_site"]
