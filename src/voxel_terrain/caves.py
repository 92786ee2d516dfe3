"""Cave carving: random-walk worm tunnels and noise caverns."""

from __future__ import annotations

import math

import numpy as np

from .noise_field import NoiseField3D, normalize_seed
from .voxels import VoxelGrid

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_U64_MASK = (1 << 64) - 1

# Seed offset separating the cavern noise from the worm RNG.
CAVERN_SEED_OFFSET = 1000
CAVERN_FREQUENCY = 0.1
CAVERN_FLOOR = 3
CAVERN_CEILING_RATIO = 0.7

WORM_STEP = 1.5
WORM_MIN_SEGMENTS = 50
WORM_SEGMENT_SPAN = 50
WORM_MIN_RADIUS = 2
WORM_RADIUS_SPAN = 2


class LcgRandom:
    """64-bit linear congruential generator shared by every worm of a pass."""

    __slots__ = ("state",)

    def __init__(self, seed: int) -> None:
        self.state = int(seed) & _U64_MASK

    def next_u64(self) -> int:
        self.state = (self.state * _LCG_MULTIPLIER + _LCG_INCREMENT) & _U64_MASK
        return self.state

    def below(self, bound: int) -> int:
        """Uniform-ish integer in ``[0, bound)``; 0 when ``bound`` is not positive."""
        value = self.next_u64()
        if bound <= 0:
            return 0
        return value % bound

    def random(self) -> float:
        return self.next_u64() / float(_U64_MASK)


def _to_index(value: float) -> int:
    # Truncate toward zero, negatives saturate at 0.
    return max(int(value), 0)


def carve_sphere(grid: VoxelGrid, cx: int, cy: int, cz: int, radius: int) -> None:
    """Clear every cell within ``radius`` of the centre (inclusive).

    Coordinates that fall below zero are clamped to zero rather than skipped.
    """
    radius = max(0, int(radius))
    r2 = radius * radius
    for dz in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if dx * dx + dy * dy + dz * dz <= r2:
                    grid.set(max(cx + dx, 0), max(cy + dy, 0), max(cz + dz, 0), False)


def carve_worm_tunnels(grid: VoxelGrid, seed: int, count: int) -> None:
    """Carve ``count`` random-walk tunnels, all drawn from one LCG seeded with ``seed``."""
    if count <= 0 or grid.volume == 0:
        return
    rng = LcgRandom(seed)
    max_x = float(grid.width - 2)
    max_y = float(grid.depth - 2)
    max_z = float(grid.height - 2)

    for _ in range(count):
        start_x = rng.below(grid.width)
        start_y = rng.below(grid.depth)
        start_z = 5 + rng.below(int(grid.height * 0.6))
        segments = WORM_MIN_SEGMENTS + rng.below(WORM_SEGMENT_SPAN)
        radius = WORM_MIN_RADIUS + rng.below(WORM_RADIUS_SPAN)

        x, y, z = float(start_x), float(start_y), float(start_z)
        dx = rng.random() - 0.5
        dy = rng.random() - 0.5
        dz = (rng.random() - 0.5) * 0.5

        for _ in range(segments):
            carve_sphere(grid, _to_index(x), _to_index(y), _to_index(z), radius)

            dx += (rng.random() - 0.5) * 0.5
            dy += (rng.random() - 0.5) * 0.5
            dz += (rng.random() - 0.5) * 0.3
            length = math.sqrt(dx * dx + dy * dy + dz * dz)
            if length > 0.0:
                dx /= length
                dy /= length
                dz /= length

            x += dx * WORM_STEP
            y += dy * WORM_STEP
            z += dz * WORM_STEP
            x = min(max(x, 1.0), max_x)
            y = min(max(y, 1.0), max_y)
            z = min(max(z, 3.0), max_z)


def carve_caverns(grid: VoxelGrid, seed: int, threshold: float, max_height: float) -> None:
    """Clear solid cells where 3D noise exceeds ``threshold``.

    Only layers ``3 <= z < min(0.7 * max_height, grid.height)`` are considered.
    """
    top = min(max(int(max_height * CAVERN_CEILING_RATIO), 0), grid.height)
    if top <= CAVERN_FLOOR or grid.width == 0 or grid.depth == 0:
        return
    field = NoiseField3D(seed)
    band = grid.to_dense()[CAVERN_FLOOR:top]
    for z_offset, y, x in np.argwhere(band):
        z = int(z_offset) + CAVERN_FLOOR
        x, y = int(x), int(y)
        if field.sample(x * CAVERN_FREQUENCY, y * CAVERN_FREQUENCY, z * CAVERN_FREQUENCY) > threshold:
            grid.set(x, y, z, False)


def carve_caves(grid: VoxelGrid, seed: int, cave_count: int, cave_threshold: float, max_height: float) -> None:
    """Worm tunnels seeded with ``seed``, then caverns seeded with ``seed + 1000``."""
    carve_worm_tunnels(grid, seed, cave_count)
    carve_caverns(grid, normalize_seed(seed + CAVERN_SEED_OFFSET), cave_threshold, max_height)


def open_cave_entrances(grid: VoxelGrid) -> int:
    """Clear the topmost solid cell sitting on air in each column.

    Returns the number of cells cleared.
    """
    if grid.height < 2:
        return 0
    dense = grid.to_dense()
    # roof[z] is a solid cell with air directly below it, for z >= 1.
    roof = dense[1:] & ~dense[:-1]
    has_roof = roof.any(axis=0)
    if not has_roof.any():
        return 0
    top_down = roof[::-1]
    z_roof = (grid.height - 1) - top_down.argmax(axis=0)
    ys, xs = np.nonzero(has_roof)
    dense[z_roof[ys, xs], ys, xs] = False
    grid.load_dense(dense)
    return int(ys.size)
