"""Terrain shaping passes: cliff overhangs and structural support checks."""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from .noise_field import normalize_seed
from .voxels import VoxelGrid

OVERHANG_SEED_OFFSET = 2000
MAX_OVERHANG_LENGTH = 3

# Candidate overhang directions as (dx, dy); ties resolve to the first entry.
_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

Cliff = Tuple[int, int, int]


def _surface_levels(grid: VoxelGrid) -> np.ndarray:
    """Index of the topmost solid cell per column, 0 for empty columns."""
    return np.maximum(grid.column_heights() - 1, 0)


def find_cliffs(grid: VoxelGrid, min_cliff_height: int) -> List[Cliff]:
    """Return ``(x, y, surface_z)`` for interior columns towering over a neighbour."""
    surface = _surface_levels(grid)
    cliffs: List[Cliff] = []
    for x in range(1, grid.width - 1):
        for y in range(1, grid.depth - 1):
            centre = int(surface[y, x])
            for dx, dy in _DIRECTIONS:
                if centre - int(surface[y + dy, x + dx]) >= min_cliff_height:
                    cliffs.append((x, y, centre))
                    break
    return cliffs


def _surface_at(grid: VoxelGrid, x: int, y: int) -> int:
    for z in range(grid.height - 1, -1, -1):
        if grid.get(x, y, z):
            return z
    return 0


def overhang_direction(grid: VoxelGrid, x: int, y: int) -> Tuple[int, int]:
    """Direction toward the lowest neighbouring surface, read from the grid as it stands."""
    best = _DIRECTIONS[0]
    lowest = None
    for dx, dy in _DIRECTIONS:
        level = _surface_at(grid, x + dx, y + dy)
        if lowest is None or level < lowest:
            lowest = level
            best = (dx, dy)
    return best


def generate_overhangs(grid: VoxelGrid, seed: int, chance: float, min_cliff_height: int) -> int:
    """Extend cliff tops outward toward lower ground.

    Cliffs are found once up front; each overhang direction is chosen against
    the grid including overhangs already placed. Each cliff gets an overhang of
    1 to 3 cells with probability ``chance``.
    Returns the number of cells turned solid.
    """
    rng = np.random.default_rng(normalize_seed(seed + OVERHANG_SEED_OFFSET))
    added = 0

    def _fill(x: int, y: int, z: int) -> None:
        nonlocal added
        if not grid.get(x, y, z):
            grid.set(x, y, z, True)
            added += 1

    for x, y, z in find_cliffs(grid, min_cliff_height):
        if rng.random() >= chance:
            continue
        length = int(rng.integers(1, MAX_OVERHANG_LENGTH + 1))
        dx, dy = overhang_direction(grid, x, y)
        for dist in range(1, length + 1):
            ox, oy = x + dx * dist, y + dy * dist
            if not grid.is_in_bounds(ox, oy, z):
                continue
            _fill(ox, oy, z)
            if rng.random() > 0.5 and dist < length and grid.is_in_bounds(ox, oy, z - 1):
                _fill(ox, oy, z - 1)
    return added


def _spread_lateral(seed: np.ndarray, solid: np.ndarray, steps: int) -> np.ndarray:
    reached = seed.copy()
    for _ in range(steps):
        grown = reached.copy()
        grown[1:, :] |= reached[:-1, :]
        grown[:-1, :] |= reached[1:, :]
        grown[:, 1:] |= reached[:, :-1]
        grown[:, :-1] |= reached[:, 1:]
        grown &= solid
        if np.array_equal(grown, reached):
            break
        reached = grown
    return reached


def supported_mask(grid: VoxelGrid, max_overhang: int = MAX_OVERHANG_LENGTH) -> np.ndarray:
    """Boolean ``(height, depth, width)`` mask of solid cells with a support chain to the floor."""
    dense = grid.to_dense()
    supported = np.zeros_like(dense)
    if grid.height == 0:
        return supported
    supported[0] = dense[0]
    for z in range(1, grid.height):
        resting = dense[z] & supported[z - 1]
        supported[z] = _spread_lateral(resting, dense[z], max(0, int(max_overhang)))
    return supported


def remove_unsupported(grid: VoxelGrid, max_overhang: int = MAX_OVERHANG_LENGTH) -> int:
    """Clear floating cells bottom-up. Returns the number of cells removed."""
    supported = supported_mask(grid, max_overhang)
    before = grid.get_solid_count()
    grid.load_dense(supported)
    return before - int(supported.sum())
