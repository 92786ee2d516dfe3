from voxel_terrain.structure import (
    find_cliffs,
    generate_overhangs,
    overhang_direction,
    remove_unsupported,
    supported_mask,
)
from voxel_terrain.voxels import VoxelGrid


def _stepped_grid() -> VoxelGrid:
    # 5x5 plateau of height 10 in the middle of a height-2 plain
    grid = VoxelGrid(7, 12, 7)
    heights = []
    for y in range(7):
        for x in range(7):
            heights.append(10.0 if 2 <= x <= 4 and 2 <= y <= 4 else 2.0)
    grid.fill_from_heightmap(heights)
    return grid


def test_find_cliffs_detects_plateau_edges():
    cliffs = find_cliffs(_stepped_grid(), min_cliff_height=5)
    positions = {(x, y) for x, y, _ in cliffs}
    assert (2, 2) in positions
    assert (3, 3) not in positions
    assert all(z == 9 for _, _, z in cliffs)


def test_find_cliffs_scans_columns_x_major():
    cliffs = find_cliffs(_stepped_grid(), min_cliff_height=5)
    assert len(cliffs) > 1
    assert cliffs == sorted(cliffs)


def test_overhang_direction_follows_current_grid():
    grid = _stepped_grid()
    # neighbours of (3, 1) sit at level 1 apart from the plateau at +y
    assert overhang_direction(grid, 3, 1) == (1, 0)
    # raising the +x neighbour, as an earlier overhang would, moves the choice on
    grid.set(4, 1, 6, True)
    assert overhang_direction(grid, 3, 1) == (-1, 0)


def test_overhangs_extend_cliff_tops():
    grid = _stepped_grid()
    before = grid.get_solid_count()
    added = generate_overhangs(grid, seed=1, chance=1.0, min_cliff_height=5)
    assert added > 0
    assert grid.get_solid_count() == before + added


def test_overhangs_disabled_by_zero_chance():
    grid = _stepped_grid()
    assert generate_overhangs(grid, seed=1, chance=0.0, min_cliff_height=5) == 0


def test_overhangs_are_reproducible():
    a, b = _stepped_grid(), _stepped_grid()
    generate_overhangs(a, seed=9, chance=0.5, min_cliff_height=5)
    generate_overhangs(b, seed=9, chance=0.5, min_cliff_height=5)
    assert a.to_bytes() == b.to_bytes()


def test_floating_block_is_removed():
    grid = VoxelGrid(8, 8, 8)
    grid.fill_from_heightmap([2.0] * 64)
    grid.set(4, 4, 6, True)
    removed = remove_unsupported(grid)
    assert removed == 1
    assert not grid.get(4, 4, 6)
    assert grid.get_solid_count() == 2 * 64


def test_short_overhang_survives_long_one_does_not():
    grid = VoxelGrid(10, 4, 1)
    grid.set(0, 0, 0, True)
    grid.set(0, 0, 1, True)
    for x in range(1, 6):
        grid.set(x, 0, 1, True)
    mask = supported_mask(grid, max_overhang=3)
    assert [bool(mask[1, 0, x]) for x in range(6)] == [True, True, True, True, False, False]
    assert remove_unsupported(grid, max_overhang=3) == 2


def test_grounded_terrain_is_untouched():
    grid = _stepped_grid()
    before = grid.to_bytes()
    assert remove_unsupported(grid) == 0
    assert grid.to_bytes() == before
