"""Bit-packed voxel occupancy storage."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

# Number of vertical layers in the exported voxel array, regardless of grid height.
EXPORT_HEIGHT = 23


class VoxelGrid:
    """Fixed-size boolean voxel volume stored one bit per cell.

    Cells are addressed as ``(x, y, z)`` with ``x`` along the width, ``y`` along
    the depth and ``z`` vertical. The linear index is
    ``z * width * depth + y * width + x`` and bit ``index % 8`` of byte
    ``index // 8`` holds the cell. Coordinates outside the grid read as air and
    writes to them are ignored.
    """

    __slots__ = ("width", "height", "depth", "_data")

    def __init__(self, width: int, height: int, depth: int) -> None:
        width, height, depth = int(width), int(height), int(depth)
        if width < 0 or height < 0 or depth < 0:
            raise ValueError("grid dimensions must be non-negative")
        self.width = width
        self.height = height
        self.depth = depth
        self._data = np.zeros((self.volume + 7) // 8, dtype=np.uint8)

    # Internal utilities -------------------------------------------------
    def _index(self, x: int, y: int, z: int) -> int:
        return z * (self.width * self.depth) + y * self.width + x

    # API ----------------------------------------------------------------
    @property
    def volume(self) -> int:
        return self.width * self.height * self.depth

    @property
    def nbytes(self) -> int:
        return int(self._data.size)

    def dimensions(self) -> Tuple[int, int, int]:
        return self.width, self.height, self.depth

    def is_in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.depth and 0 <= z < self.height

    def get(self, x: int, y: int, z: int) -> bool:
        if not self.is_in_bounds(x, y, z):
            return False
        index = self._index(x, y, z)
        return bool((int(self._data[index >> 3]) >> (index & 7)) & 1)

    def set(self, x: int, y: int, z: int, value: bool) -> None:
        if not self.is_in_bounds(x, y, z):
            return
        index = self._index(x, y, z)
        byte_index = index >> 3
        mask = 1 << (index & 7)
        if value:
            self._data[byte_index] = int(self._data[byte_index]) | mask
        else:
            self._data[byte_index] = int(self._data[byte_index]) & ~mask & 0xFF

    def fill_from_heightmap(self, heightmap: Sequence[float]) -> None:
        """Mark ``z < floor(h)`` solid for every column, clamped to the grid height.

        ``heightmap`` is row-major in ``x`` and must hold ``width * depth`` values.
        Existing solid cells are kept.
        """
        columns = self.width * self.depth
        values = np.asarray(heightmap, dtype=np.float64).ravel()
        if values.size < columns:
            raise IndexError(f"heightmap has {values.size} values, grid needs {columns}")
        heights = np.floor(values[:columns])
        heights = np.nan_to_num(heights, nan=0.0, posinf=float(self.height), neginf=0.0)
        levels = np.clip(heights, 0, self.height).astype(np.int64).reshape(self.depth, self.width)
        layers = np.arange(self.height, dtype=np.int64).reshape(-1, 1, 1)
        self.load_dense(self.to_dense() | (layers < levels[None, :, :]))

    def get_solid_count(self) -> int:
        return int(np.unpackbits(self._data).sum(dtype=np.int64))

    def to_bytes(self) -> bytes:
        return self._data.tobytes()

    def to_dense(self) -> np.ndarray:
        """Return occupancy as a ``(height, depth, width)`` boolean array."""
        bits = np.unpackbits(self._data, bitorder="little")[: self.volume]
        return bits.reshape(self.height, self.depth, self.width).astype(bool)

    def load_dense(self, mask: np.ndarray) -> None:
        """Replace occupancy with a ``(height, depth, width)`` boolean mask."""
        mask = np.asarray(mask, dtype=bool)
        expected = (self.height, self.depth, self.width)
        if mask.shape != expected:
            raise ValueError(f"mask shape {mask.shape} does not match grid shape {expected}")
        self._data[:] = np.packbits(mask.ravel(), bitorder="little")

    def column_heights(self) -> np.ndarray:
        """Index of the topmost solid cell plus one per ``(y, x)`` column, 0 when empty."""
        dense = self.to_dense()
        if self.height == 0:
            return np.zeros((self.depth, self.width), dtype=np.int64)
        top_down = dense[::-1]
        has_solid = top_down.any(axis=0)
        first = top_down.argmax(axis=0)
        return np.where(has_solid, self.height - first, 0).astype(np.int64)

    def copy(self) -> "VoxelGrid":
        clone = VoxelGrid(self.width, self.height, self.depth)
        clone._data[:] = self._data
        return clone

    def to_voxel_array(self) -> str:
        """Serialize to space separated ``0``/``1`` tokens, ``EXPORT_HEIGHT`` layers deep.

        Tokens run z outermost, then y, then x. Layers at or above the grid height
        export as ``0``; layers at or above ``EXPORT_HEIGHT`` are dropped.
        """
        layers = np.zeros((EXPORT_HEIGHT, self.depth, self.width), dtype=bool)
        kept = min(EXPORT_HEIGHT, self.height)
        layers[:kept] = self.to_dense()[:kept]
        return " ".join(np.where(layers.ravel(), "1", "0").tolist())

    def __repr__(self) -> str:
        return f"VoxelGrid(width={self.width}, height={self.height}, depth={self.depth})"
