import itertools

import numpy as np
import pytest

from voxel_terrain.voxels import EXPORT_HEIGHT, VoxelGrid


def _brute_force_count(grid: VoxelGrid) -> int:
    return sum(
        1
        for x, y, z in itertools.product(range(grid.width), range(grid.depth), range(grid.height))
        if grid.get(x, y, z)
    )


def test_new_grid_is_all_air():
    grid = VoxelGrid(3, 4, 5)
    assert grid.dimensions() == (3, 4, 5)
    assert grid.get_solid_count() == 0
    for x, y, z in itertools.product(range(3), range(5), range(4)):
        assert grid.get(x, y, z) is False


def test_backing_store_is_rounded_up_to_bytes():
    assert VoxelGrid(1, 1, 1).nbytes == 1
    assert VoxelGrid(2, 2, 2).nbytes == 1
    assert VoxelGrid(3, 3, 1).nbytes == 2
    assert VoxelGrid(10, 10, 10).nbytes == 125
    assert VoxelGrid(0, 7, 3).nbytes == 0


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        VoxelGrid(-1, 2, 2)


def test_set_and_get_round_trip():
    grid = VoxelGrid(10, 10, 10)
    assert grid.get(5, 5, 5) is False
    grid.set(5, 5, 5, True)
    assert grid.get(5, 5, 5) is True
    grid.set(5, 5, 5, False)
    assert grid.get(5, 5, 5) is False


def test_neighbouring_bits_are_independent():
    grid = VoxelGrid(4, 2, 2)
    for x in range(4):
        grid.set(x, 0, 0, True)
    grid.set(1, 0, 0, False)
    assert [grid.get(x, 0, 0) for x in range(4)] == [True, False, True, True]


def test_out_of_bounds_reads_air_and_ignores_writes():
    grid = VoxelGrid(2, 2, 2)
    for coords in [(-1, 0, 0), (2, 0, 0), (0, 2, 0), (0, 0, 2), (0, -1, 5)]:
        grid.set(*coords, True)
        assert grid.get(*coords) is False
    assert grid.get_solid_count() == 0


def test_bit_layout_is_z_major_lsb_first():
    grid = VoxelGrid(3, 2, 2)
    # linear index 1*6 + 1*3 + 2 = 11 -> byte 1, bit 3
    grid.set(2, 1, 1, True)
    assert grid.to_bytes() == b"\x00\x08"
    grid.set(0, 0, 0, True)
    assert grid.to_bytes() == b"\x01\x08"


def test_solid_count_matches_brute_force():
    rng = np.random.default_rng(7)
    grid = VoxelGrid(7, 5, 6)
    for _ in range(120):
        x, y, z = (int(v) for v in rng.integers(0, [7, 6, 5]))
        grid.set(x, y, z, bool(rng.integers(0, 2)))
    assert grid.get_solid_count() == _brute_force_count(grid)


def test_fill_from_constant_heightmap():
    grid = VoxelGrid(4, 10, 3)
    grid.fill_from_heightmap([6.7] * 12)
    for x, y in itertools.product(range(4), range(3)):
        column = [grid.get(x, y, z) for z in range(10)]
        assert column == [True] * 6 + [False] * 4
    assert grid.get_solid_count() == 6 * 12


def test_fill_clamps_to_grid_height():
    grid = VoxelGrid(2, 5, 2)
    grid.fill_from_heightmap([40.0, 3.2, -2.0, 0.9])
    heights = grid.column_heights()
    assert heights.tolist() == [[5, 3], [0, 0]]
    assert grid.get_solid_count() == 8


def test_fill_reads_heightmap_row_major_in_x():
    grid = VoxelGrid(3, 4, 2)
    grid.fill_from_heightmap([1, 2, 3, 4, 0, 0])
    assert grid.column_heights().tolist() == [[1, 2, 3], [4, 0, 0]]


def test_fill_with_short_heightmap_raises():
    grid = VoxelGrid(4, 4, 4)
    with pytest.raises(IndexError):
        grid.fill_from_heightmap([1.0] * 15)


def test_fill_keeps_existing_solid_cells():
    grid = VoxelGrid(2, 6, 1)
    grid.set(0, 0, 5, True)
    grid.fill_from_heightmap([2.0, 2.0])
    assert grid.get(0, 0, 5)
    assert grid.get_solid_count() == 5


def test_export_token_count_and_fresh_grid():
    grid = VoxelGrid(5, 10, 4)
    tokens = grid.to_voxel_array().split(" ")
    assert len(tokens) == 5 * 4 * EXPORT_HEIGHT
    assert set(tokens) == {"0"}


def test_export_order_is_z_then_y_then_x():
    grid = VoxelGrid(2, 2, 2)
    grid.set(1, 0, 0, True)
    grid.set(0, 1, 1, True)
    tokens = grid.to_voxel_array().split(" ")
    assert tokens[1] == "1"
    assert tokens[4 + 2] == "1"
    assert tokens.count("1") == 2


def test_export_pads_short_grids_with_air():
    grid = VoxelGrid(2, 3, 2)
    grid.fill_from_heightmap([3.0] * 4)
    tokens = grid.to_voxel_array().split(" ")
    layer = 2 * 2
    assert tokens[: 3 * layer] == ["1"] * (3 * layer)
    assert set(tokens[3 * layer :]) == {"0"}


def test_export_drops_layers_above_fixed_height():
    grid = VoxelGrid(1, 30, 1)
    grid.set(0, 0, 25, True)
    grid.set(0, 0, 22, True)
    tokens = grid.to_voxel_array().split(" ")
    assert len(tokens) == EXPORT_HEIGHT
    assert tokens.count("1") == 1
    assert tokens[22] == "1"


def test_empty_grid_exports_empty_string():
    grid = VoxelGrid(0, 5, 5)
    assert grid.to_voxel_array() == ""
    assert grid.get_solid_count() == 0
    grid.fill_from_heightmap([])
    assert grid.get_solid_count() == 0


def test_dense_round_trip_and_copy():
    grid = VoxelGrid(3, 2, 2)
    grid.set(1, 1, 1, True)
    dense = grid.to_dense()
    assert dense.shape == (2, 2, 3)
    assert dense[1, 1, 1]
    clone = grid.copy()
    clone.set(0, 0, 0, True)
    assert not grid.get(0, 0, 0)
    with pytest.raises(ValueError):
        grid.load_dense(np.zeros((2, 3, 2), dtype=bool))
