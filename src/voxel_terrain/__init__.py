"""Procedural voxel terrain: heightmaps, cave carving and voxel-array export."""

from .caves import carve_caverns, carve_caves, carve_worm_tunnels, open_cave_entrances
from .generate import TerrainResult, generate_terrain
from .heightmap import generate_heightmap
from .render import render_png
from .structure import generate_overhangs, remove_unsupported
from .voxels import EXPORT_HEIGHT, VoxelGrid

__all__ = [
    "EXPORT_HEIGHT",
    "VoxelGrid",
    "generate_heightmap",
    "carve_caves",
    "carve_caverns",
    "carve_worm_tunnels",
    "open_cave_entrances",
    "generate_overhangs",
    "remove_unsupported",
    "generate_terrain",
    "TerrainResult",
    "render_png",
]
__version__ = "0.1.0"
