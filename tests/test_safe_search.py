import pytest

from combat_logger.gravestone.safety import is_safe_block, is_safe_region
from combat_logger.gravestone.search import SafeSitePair, find_safe_site, search_offsets
from combat_logger.world import blocks
from combat_logger.world.grid import BlockPos, VoxelWorld


ORIGIN = BlockPos(0, 64, 0)


@pytest.mark.parametrize(
    "block, as_support, as_placement",
    [
        (blocks.STONE, True, False),
        (blocks.AIR, False, True),
        (blocks.TALL_GRASS, False, True),
        (blocks.WATER, False, False),
        (blocks.LAVA, False, False),
        (blocks.FIRE, False, False),
        (blocks.MAGMA, False, False),
        (blocks.CHEST, False, False),
        (blocks.VOID, False, False),
    ],
)
def test_is_safe_block(block, as_support, as_placement):
    assert is_safe_block(block, is_above_block=False) is as_support
    assert is_safe_block(block, is_above_block=True) is as_placement


def test_nearest_trivial_site_is_directly_on_the_ground(world):
    site = find_safe_site(world, ORIGIN)
    assert site == SafeSitePair(support=BlockPos(0, 63, 0), placement=ORIGIN)


def test_float_position_is_anchored_to_voxel(world):
    origin = BlockPos.from_vec(-0.5, 64.9, 2.2)
    assert origin == BlockPos(-1, 64, 2)
    assert find_safe_site(world, origin).placement == origin


def test_fully_solid_world_fails():
    world = VoxelWorld(default=blocks.STONE)
    assert find_safe_site(world, ORIGIN) is None


def test_all_air_world_fails():
    world = VoxelWorld()
    assert find_safe_site(world, ORIGIN) is None


def test_search_respects_bound():
    world = VoxelWorld()
    # Only floor lies 6 blocks away horizontally, beyond radius 4
    world.set_block(BlockPos(6, 63, 0), blocks.STONE)
    assert find_safe_site(world, ORIGIN, radius=4, height=3) is None
    assert find_safe_site(world, ORIGIN, radius=6, height=3) == SafeSitePair(BlockPos(6, 63, 0), BlockPos(6, 64, 0))


def test_death_in_the_air_finds_ground_below():
    world = VoxelWorld()
    world.fill(BlockPos(-3, 61, -3), BlockPos(3, 61, 3), blocks.STONE)
    site = find_safe_site(world, ORIGIN)
    assert site == SafeSitePair(BlockPos(0, 61, 0), BlockPos(0, 62, 0))


def test_lava_origin_is_avoided(world):
    world.set_block(ORIGIN, blocks.LAVA)
    site = find_safe_site(world, ORIGIN)
    assert site is not None
    assert site.placement != ORIGIN
    # Lava neighbours are rejected too
    assert ORIGIN not in site.placement.horizontal_neighbors()
    assert world.get_block(site.support) is blocks.STONE


def test_adjacent_chest_is_rejected(world):
    world.place_container(BlockPos(1, 64, 0))
    assert is_safe_region(world, ORIGIN) is False
    site = find_safe_site(world, ORIGIN)
    assert site is not None
    assert BlockPos(1, 64, 0) not in site.placement.horizontal_neighbors()


def test_blocked_headroom_is_rejected(world):
    world.set_block(ORIGIN.above(), blocks.STONE)
    assert is_safe_region(world, ORIGIN) is False
    assert find_safe_site(world, ORIGIN).placement != ORIGIN


def test_search_is_deterministic(world):
    world.set_block(ORIGIN, blocks.LAVA)
    first = find_safe_site(world, ORIGIN)
    assert all(find_safe_site(world, ORIGIN) == first for _ in range(5))


def test_search_offsets_order_and_size():
    offsets = search_offsets(2, 1)
    assert len(offsets) == 5 * 3 * 5
    assert offsets[0] == (0, 0, 0)
    distances = [abs(dx) + abs(dy) + abs(dz) for dx, dy, dz in offsets]
    assert distances == sorted(distances)
    # Same level before changing height at equal distance
    assert offsets[1][1] == 0


def test_out_of_world_height_is_never_safe():
    world = VoxelWorld(min_y=0, max_y=10)
    world.fill(BlockPos(-2, 0, -2), BlockPos(2, 10, 2), blocks.STONE)
    # Standing on the roof at max_y: the cell above is outside the world
    assert find_safe_site(world, BlockPos(0, 11, 0), radius=1, height=1) is None
