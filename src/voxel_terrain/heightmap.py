"""Fractal-noise heightmap generation."""

from __future__ import annotations

import numpy as np

from .noise_field import NoiseField2D

Array = np.ndarray

# Lowest point of the remapped noise range, as a fraction of max height.
BASE_HEIGHT_RATIO = 0.3


def generate_heightmap(
    width: int,
    depth: int,
    seed: int,
    scale: float,
    octaves: int,
    persistence: float,
    lacunarity: float,
    max_height: float,
) -> Array:
    """Return ``width * depth`` surface heights, row-major in ``x``.

    Noise sampled at ``(x * scale, y * scale)`` is remapped from ``[-1, 1]`` to
    ``[0.3 * max_height, max_height]`` and clamped to ``[1.0, max_height]``.
    """
    width, depth = max(0, int(width)), max(0, int(depth))
    field = NoiseField2D(seed, octaves=octaves, persistence=persistence, lacunarity=lacunarity)
    max_height = float(max_height)
    base_height = max_height * BASE_HEIGHT_RATIO
    span = max_height - base_height

    heights = np.empty(width * depth, dtype=np.float32)
    for y in range(depth):
        row = y * width
        for x in range(width):
            value = field.sample(x * scale, y * scale)
            height = base_height + ((value + 1.0) / 2.0) * span
            heights[row + x] = min(max(height, 1.0), max_height)
    return heights
