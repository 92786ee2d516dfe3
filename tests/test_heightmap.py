import numpy as np

from voxel_terrain.heightmap import generate_heightmap
from voxel_terrain.noise_field import NoiseField2D, NoiseField3D


def test_reference_heightmap_in_range():
    heightmap = generate_heightmap(32, 32, 12345, 0.02, 4, 0.5, 2.0, 50.0)
    assert heightmap.shape == (1024,)
    assert heightmap.dtype == np.float32
    assert np.all(heightmap >= 1.0)
    assert np.all(heightmap <= 50.0)


def test_heightmap_is_deterministic():
    a = generate_heightmap(24, 16, 99, 0.05, 3, 0.5, 2.0, 40.0)
    b = generate_heightmap(24, 16, 99, 0.05, 3, 0.5, 2.0, 40.0)
    np.testing.assert_array_equal(a, b)


def test_seed_changes_output():
    a = generate_heightmap(24, 24, 1, 0.05, 4, 0.5, 2.0, 50.0)
    b = generate_heightmap(24, 24, 2, 0.05, 4, 0.5, 2.0, 50.0)
    assert not np.array_equal(a, b)


def test_length_matches_columns_for_non_square_maps():
    assert generate_heightmap(7, 3, 5, 0.1, 2, 0.5, 2.0, 20.0).size == 21
    assert generate_heightmap(0, 9, 5, 0.1, 2, 0.5, 2.0, 20.0).size == 0


def test_values_stay_above_base_height():
    heightmap = generate_heightmap(16, 16, 3, 0.07, 4, 0.5, 2.0, 50.0)
    # noise is remapped onto [0.3 * max_height, max_height] before clamping
    assert heightmap.min() >= 15.0 - 1e-4


def test_tiny_max_height_is_clamped():
    heightmap = generate_heightmap(8, 8, 11, 0.1, 2, 0.5, 2.0, 0.5)
    assert np.all(heightmap == np.float32(0.5))


def test_noise_fields_are_reproducible():
    assert NoiseField2D(42, octaves=3).sample(1.25, 2.5) == NoiseField2D(42, octaves=3).sample(1.25, 2.5)
    assert NoiseField3D(42).sample(0.3, 0.7, 1.1) == NoiseField3D(42).sample(0.3, 0.7, 1.1)
    assert -1.5 < NoiseField3D(7).sample(0.3, 0.7, 1.1) < 1.5
