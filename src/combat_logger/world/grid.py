from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from ..exceptions import WorldAccessError
from ..items import CHEST_CAPACITY, Container, ItemStack
from .blocks import AIR, CHEST, VOID, BlockType

logger = logging.getLogger(__name__)


class Dimension(int, Enum):
    OVERWORLD = 0
    NETHER = 1
    THE_END = 2

    @property
    def label(self) -> str:
        return _DIMENSION_LABELS[self]


_DIMENSION_LABELS = {
    Dimension.OVERWORLD: "Overworld",
    Dimension.NETHER: "Nether",
    Dimension.THE_END: "The End",
}


def dimension_label(dimension_id: int) -> str:
    """Human label for a raw dimension id; unknown ids are shown numerically."""
    try:
        return Dimension(dimension_id).label
    except ValueError:
        return f"Dimension {dimension_id}"


@dataclass(frozen=True, order=True)
class BlockPos:
    x: int
    y: int
    z: int

    @classmethod
    def from_vec(cls, x: float, y: float, z: float) -> "BlockPos":
        """Anchor a float position to the voxel that contains it."""
        return cls(math.floor(x), math.floor(y), math.floor(z))

    def offset(self, dx: int = 0, dy: int = 0, dz: int = 0) -> "BlockPos":
        return BlockPos(self.x + dx, self.y + dy, self.z + dz)

    def below(self) -> "BlockPos":
        return self.offset(dy=-1)

    def above(self) -> "BlockPos":
        return self.offset(dy=1)

    def horizontal_neighbors(self) -> Tuple["BlockPos", ...]:
        return (self.offset(dx=1), self.offset(dx=-1), self.offset(dz=1), self.offset(dz=-1))

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"


class World(Protocol):
    """Read/write access to one dimension of the host world."""

    def get_block(self, pos: BlockPos) -> BlockType:
        ...

    def set_block(self, pos: BlockPos, block: BlockType) -> None:
        ...

    def place_container(self, pos: BlockPos, block: BlockType = CHEST) -> Container:
        ...

    def container_at(self, pos: BlockPos) -> Optional[Container]:
        ...

    def drop_item(self, pos: BlockPos, stack: ItemStack) -> None:
        ...


class VoxelWorld:
    """A sparse, vertically bounded 3D block grid.

    Cells that were never set hold ``default``. Reads outside ``[min_y, max_y]``
    return ``VOID`` and never raise; writes outside raise
    :class:`WorldAccessError` to make misuse obvious.
    """

    def __init__(self, default: BlockType = AIR, min_y: int = -64, max_y: int = 319) -> None:
        if min_y > max_y:
            raise ValueError("min_y must not exceed max_y")
        self.default = default
        self.min_y = min_y
        self.max_y = max_y
        self._blocks: Dict[BlockPos, BlockType] = {}
        self._containers: Dict[BlockPos, Container] = {}
        self.dropped: List[Tuple[BlockPos, ItemStack]] = []

    def is_within(self, pos: BlockPos) -> bool:
        return self.min_y <= pos.y <= self.max_y

    def get_block(self, pos: BlockPos) -> BlockType:
        if not self.is_within(pos):
            return VOID
        return self._blocks.get(pos, self.default)

    def set_block(self, pos: BlockPos, block: BlockType) -> None:
        if not self.is_within(pos):
            raise WorldAccessError(f"Position out of bounds: {pos} (y range {self.min_y}..{self.max_y})")
        self._blocks[pos] = block
        if not block.container:
            self._containers.pop(pos, None)

    def fill(self, start: BlockPos, end: BlockPos, block: BlockType) -> None:
        """Set every cell in the inclusive box spanned by ``start`` and ``end``."""
        for x in range(min(start.x, end.x), max(start.x, end.x) + 1):
            for y in range(min(start.y, end.y), max(start.y, end.y) + 1):
                for z in range(min(start.z, end.z), max(start.z, end.z) + 1):
                    self.set_block(BlockPos(x, y, z), block)

    def place_container(self, pos: BlockPos, block: BlockType = CHEST) -> Container:
        if not block.container:
            raise ValueError(f"{block.name} cannot hold items")
        self.set_block(pos, block)
        container = Container(CHEST_CAPACITY)
        self._containers[pos] = container
        logger.debug("Placed %s at %s", block.name, pos)
        return container

    def container_at(self, pos: BlockPos) -> Optional[Container]:
        return self._containers.get(pos)

    def drop_item(self, pos: BlockPos, stack: ItemStack) -> None:
        self.dropped.append((pos, stack))
        logger.debug("Dropped %dx item %s at %s", stack.count, stack.item_id, pos)

    def dropped_count(self) -> int:
        return sum(stack.count for _, stack in self.dropped)

    def __repr__(self) -> str:
        return f"VoxelWorld(default={self.default.name}, y={self.min_y}..{self.max_y}, cells={len(self._blocks)})"


__all__ = ["BlockPos", "Dimension", "World", "VoxelWorld", "dimension_label"]
