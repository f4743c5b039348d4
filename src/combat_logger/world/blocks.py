from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BlockType:
    """Physical properties of a block type as reported by the host.

    Attributes:
        name: Registry name, e.g. ``"stone"``.
        solid: Load-bearing, can support a block placed on top.
        liquid: Water/lava style fluid.
        replaceable: Air-like; a block can be placed into this cell.
        hazardous: Damages players standing in or on it.
        container: Holds an inventory (chests, barrels).
    """

    name: str
    solid: bool = False
    liquid: bool = False
    replaceable: bool = False
    hazardous: bool = False
    container: bool = False


AIR = BlockType("air", replaceable=True)
VOID = BlockType("void")
STONE = BlockType("stone", solid=True)
DIRT = BlockType("dirt", solid=True)
GRASS = BlockType("grass", solid=True)
BEDROCK = BlockType("bedrock", solid=True)
TALL_GRASS = BlockType("tallgrass", replaceable=True)
WATER = BlockType("water", liquid=True, replaceable=True)
LAVA = BlockType("lava", liquid=True, replaceable=True, hazardous=True)
FIRE = BlockType("fire", replaceable=True, hazardous=True)
MAGMA = BlockType("magma", solid=True, hazardous=True)
CACTUS = BlockType("cactus", solid=True, hazardous=True)
CHEST = BlockType("chest", solid=True, container=True)


__all__ = [
    "BlockType",
    "AIR",
    "VOID",
    "STONE",
    "DIRT",
    "GRASS",
    "BEDROCK",
    "TALL_GRASS",
    "WATER",
    "LAVA",
    "FIRE",
    "MAGMA",
    "CACTUS",
    "CHEST",
]
