"""Seeded coherent noise fields built on Perlin noise."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from noise import pnoise2, pnoise3

SEED_MASK = 0xFFFFFFFF
# Lattice period of the underlying Perlin implementation.
NOISE_PERIOD = 1024


def normalize_seed(seed: int) -> int:
    """Treat ``seed`` as an unsigned 32-bit value."""
    return int(seed) & SEED_MASK


def _seed_offsets(seed: int, dims: int) -> Tuple[float, ...]:
    rng = np.random.default_rng(normalize_seed(seed))
    return tuple(float(v) for v in rng.uniform(0.0, NOISE_PERIOD, size=dims))


class NoiseField2D:
    """Fractal Brownian motion over 2D Perlin noise, nominally in ``[-1, 1]``."""

    __slots__ = ("seed", "octaves", "persistence", "lacunarity", "_offset")

    def __init__(self, seed: int, octaves: int = 1, persistence: float = 0.5, lacunarity: float = 2.0) -> None:
        self.seed = normalize_seed(seed)
        self.octaves = max(1, int(octaves))
        self.persistence = float(persistence)
        self.lacunarity = float(lacunarity)
        self._offset = _seed_offsets(self.seed, 2)

    def sample(self, x: float, y: float) -> float:
        ox, oy = self._offset
        return pnoise2(
            x + ox,
            y + oy,
            octaves=self.octaves,
            persistence=self.persistence,
            lacunarity=self.lacunarity,
            repeatx=NOISE_PERIOD,
            repeaty=NOISE_PERIOD,
        )


class NoiseField3D:
    """Single-octave 3D Perlin noise."""

    __slots__ = ("seed", "_offset")

    def __init__(self, seed: int) -> None:
        self.seed = normalize_seed(seed)
        self._offset = _seed_offsets(self.seed, 3)

    def sample(self, x: float, y: float, z: float) -> float:
        ox, oy, oz = self._offset
        return pnoise3(
            x + ox,
            y + oy,
            z + oz,
            repeatx=NOISE_PERIOD,
            repeaty=NOISE_PERIOD,
            repeatz=NOISE_PERIOD,
        )
