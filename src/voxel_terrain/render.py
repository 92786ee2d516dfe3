"""PNG previews of voxel terrain."""

from __future__ import annotations

import numpy as np
from PIL import Image

from .voxels import VoxelGrid

# Colors (RGB)
_LOW = np.array((70, 110, 60), dtype=np.float32)
_HIGH = np.array((215, 205, 180), dtype=np.float32)
_EMPTY = (23, 43, 71)
_CAVE_SHADE = 0.6


def render_png(grid: VoxelGrid) -> Image.Image:
    """Top-down preview shaded by column height; columns hollowed by caves render darker."""
    heights = grid.column_heights()
    if heights.size == 0:
        return Image.new("RGB", (grid.width, grid.depth))

    top = max(int(heights.max()), 1)
    t = (heights.astype(np.float32) / top)[..., None]
    shaded = _LOW + t * (_HIGH - _LOW)

    # a column is hollow when it holds fewer solid cells than its height
    dense = grid.to_dense()
    hollow = dense.sum(axis=0) < heights
    shaded[hollow] *= _CAVE_SHADE

    img = np.clip(shaded, 0, 255).astype(np.uint8)
    img[heights == 0] = _EMPTY
    return Image.fromarray(img)
