"""Stage-based terrain generation pipeline."""

from .config import CaveSettings, GeneratorConfig, OverhangSettings, TerrainSettings, load_config
from .execution import ExecutionEngine, PipelineContext
from .logging import RunLogger
from .models import StageResult, StageStats
from .registry import StageDescriptor, StageRegistry, registry, stage

# Ensure built-in stages are registered on import.
from . import stages  # noqa: F401,E402

__all__ = [
    "CaveSettings",
    "GeneratorConfig",
    "OverhangSettings",
    "TerrainSettings",
    "load_config",
    "ExecutionEngine",
    "PipelineContext",
    "RunLogger",
    "StageResult",
    "StageStats",
    "StageDescriptor",
    "StageRegistry",
    "registry",
    "stage",
]
