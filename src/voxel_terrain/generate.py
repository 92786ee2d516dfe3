"""End-to-end terrain generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import numpy as np

from .pipeline import ExecutionEngine, GeneratorConfig, RunLogger
from .voxels import VoxelGrid

TERRAIN_STAGES = ("heightmap", "voxels", "caves", "overhangs", "structure", "export")


@dataclass
class TerrainResult:
    grid: VoxelGrid
    heightmap: np.ndarray
    voxel_array: str
    stats: Dict[str, Any] = field(default_factory=dict)


def generate_terrain(
    config: GeneratorConfig | Mapping[str, Any] | None = None,
    logger: RunLogger | None = None,
) -> TerrainResult:
    """Run heightmap, fill, carving, shaping and export for one map."""
    if config is None:
        config = GeneratorConfig()
    elif not isinstance(config, GeneratorConfig):
        config = GeneratorConfig.from_mapping(config)

    engine = ExecutionEngine(config, logger=logger)
    results = engine.run(TERRAIN_STAGES)

    export = results["export"]
    stats = {name: dict(results[name].metadata) for name in TERRAIN_STAGES}
    return TerrainResult(
        grid=export.artifact("VoxelGrid"),
        heightmap=results["heightmap"].artifact("Heightmap"),
        voxel_array=export.artifact("VoxelArray"),
        stats=stats,
    )
