"""Heightmap to voxel-array stages."""

from __future__ import annotations

from ...caves import CAVERN_SEED_OFFSET, carve_caves, open_cave_entrances
from ...heightmap import generate_heightmap
from ...noise_field import normalize_seed
from ...structure import generate_overhangs, remove_unsupported
from ...voxels import EXPORT_HEIGHT, VoxelGrid
from ..registry import stage


@stage("heightmap", outputs=("Heightmap",))
def heightmap_stage(context, deps):
    """Fractal noise surface heights for every column."""
    config = context.config
    terrain = config.terrain
    heightmap = generate_heightmap(
        config.map_size,
        config.map_size,
        config.seed,
        terrain.scale,
        terrain.octaves,
        terrain.persistence,
        terrain.lacunarity,
        config.max_height,
    )
    metadata = {
        "columns": int(heightmap.size),
        "min_height": float(heightmap.min()) if heightmap.size else 0.0,
        "max_height": float(heightmap.max()) if heightmap.size else 0.0,
    }
    return {"Heightmap": heightmap}, metadata


@stage("voxels", inputs=("heightmap",), outputs=("VoxelGrid",))
def voxels_stage(context, deps):
    """Solid terrain volume filled up to the heightmap surface."""
    config = context.config
    heightmap = deps["heightmap"].artifact("Heightmap")
    grid = VoxelGrid(config.map_size, config.grid_height, config.map_size)
    with context.timed("fill_from_heightmap"):
        grid.fill_from_heightmap(heightmap)
    return {"VoxelGrid": grid}, {"solid": grid.get_solid_count(), "bytes": grid.nbytes}


@stage("caves", inputs=("voxels",), outputs=("VoxelGrid",))
def caves_stage(context, deps):
    """Worm tunnels and noise caverns, optionally opened to the surface."""
    config = context.config
    settings = config.caves
    grid = deps["voxels"].artifact("VoxelGrid")
    before = grid.get_solid_count()
    entrances = 0
    if settings.generate:
        with context.timed("carve_caves"):
            carve_caves(
                grid,
                normalize_seed(config.seed + CAVERN_SEED_OFFSET),
                settings.count,
                settings.threshold,
                config.max_height,
            )
        if settings.open_entrances:
            entrances = open_cave_entrances(grid)
    after = grid.get_solid_count()
    metadata = {
        "enabled": settings.generate,
        "carved": before - after,
        "entrances": entrances,
        "solid": after,
    }
    return {"VoxelGrid": grid}, metadata


@stage("overhangs", inputs=("caves",), outputs=("VoxelGrid",))
def overhangs_stage(context, deps):
    """Cliff-top overhangs extending toward lower ground."""
    config = context.config
    settings = config.overhangs
    grid = deps["caves"].artifact("VoxelGrid")
    added = 0
    if settings.generate:
        added = generate_overhangs(grid, config.seed, settings.chance, settings.min_cliff_height)
    return {"VoxelGrid": grid}, {"enabled": settings.generate, "added": added}


@stage("structure", inputs=("overhangs",), outputs=("VoxelGrid",))
def structure_stage(context, deps):
    """Removal of floating cells without a support chain to the floor."""
    config = context.config
    grid = deps["overhangs"].artifact("VoxelGrid")
    removed = 0
    if config.validate_structure:
        with context.timed("remove_unsupported"):
            removed = remove_unsupported(grid)
    return {"VoxelGrid": grid}, {"enabled": config.validate_structure, "removed": removed}


@stage("export", inputs=("structure",), outputs=("VoxelArray",))
def export_stage(context, deps):
    """Flattened voxel array string for the map format."""
    grid = deps["structure"].artifact("VoxelGrid")
    voxel_array = grid.to_voxel_array()
    metadata = {
        "tokens": grid.width * grid.depth * EXPORT_HEIGHT,
        "solid": grid.get_solid_count(),
    }
    return {"VoxelArray": voxel_array, "VoxelGrid": grid}, metadata
