from .blocks import BlockType
from .grid import BlockPos, Dimension, VoxelWorld, World, dimension_label

__all__ = ["BlockType", "BlockPos", "Dimension", "VoxelWorld", "World", "dimension_label"]
