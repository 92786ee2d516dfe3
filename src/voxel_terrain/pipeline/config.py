"""Configuration models for terrain generation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, Dict, Mapping
import uuid

import yaml

from ..voxels import EXPORT_HEIGHT


def _section(mapping: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = mapping.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"Config section '{key}' must be a mapping, got {type(value)!r}")
    return value


def _non_negative(name: str, value: Any, kind: type = int) -> Any:
    try:
        converted = kind(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config value '{name}' must be numeric, got {value!r}") from exc
    if converted < 0:
        raise ValueError(f"Config value '{name}' must be non-negative, got {value!r}")
    return converted


@dataclass(frozen=True)
class TerrainSettings:
    """Fractal noise parameters for the heightmap."""

    scale: float = 0.02
    octaves: int = 4
    persistence: float = 0.5
    lacunarity: float = 2.0

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TerrainSettings":
        if not mapping:
            return cls()
        return cls(
            scale=float(mapping.get("scale", mapping.get("noise_scale", cls.scale))),
            octaves=_non_negative("terrain.octaves", mapping.get("octaves", cls.octaves)),
            persistence=float(mapping.get("persistence", cls.persistence)),
            lacunarity=float(mapping.get("lacunarity", cls.lacunarity)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scale": self.scale,
            "octaves": self.octaves,
            "persistence": self.persistence,
            "lacunarity": self.lacunarity,
        }


@dataclass(frozen=True)
class CaveSettings:
    generate: bool = True
    count: int = 5
    threshold: float = 0.5
    open_entrances: bool = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "CaveSettings":
        if not mapping:
            return cls()
        return cls(
            generate=bool(mapping.get("generate", cls.generate)),
            count=_non_negative("caves.count", mapping.get("count", mapping.get("cave_count", cls.count))),
            threshold=float(mapping.get("threshold", mapping.get("cave_threshold", cls.threshold))),
            open_entrances=bool(mapping.get("open_entrances", cls.open_entrances)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generate": self.generate,
            "count": self.count,
            "threshold": self.threshold,
            "open_entrances": self.open_entrances,
        }


@dataclass(frozen=True)
class OverhangSettings:
    generate: bool = False
    chance: float = 0.3
    min_cliff_height: int = 5

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "OverhangSettings":
        if not mapping:
            return cls()
        return cls(
            generate=bool(mapping.get("generate", cls.generate)),
            chance=float(mapping.get("chance", cls.chance)),
            min_cliff_height=_non_negative(
                "overhangs.min_cliff_height", mapping.get("min_cliff_height", cls.min_cliff_height)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"generate": self.generate, "chance": self.chance, "min_cliff_height": self.min_cliff_height}


def _default_run_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"run-{timestamp}-{uuid.uuid4().hex[:8]}"


@dataclass
class GeneratorConfig:
    """Top-level configuration for a terrain generation run."""

    map_size: int = 128
    max_height: float = 50.0
    grid_height: int = EXPORT_HEIGHT
    seed: int = 0
    terrain: TerrainSettings = field(default_factory=TerrainSettings)
    caves: CaveSettings = field(default_factory=CaveSettings)
    overhangs: OverhangSettings = field(default_factory=OverhangSettings)
    validate_structure: bool = False
    run_id: str = field(default_factory=_default_run_id)
    log_dir: Path | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "GeneratorConfig":
        if not isinstance(mapping, Mapping):
            raise TypeError(f"Configuration must be a mapping, got {type(mapping)!r}")
        log_dir = mapping.get("log_dir")
        return cls(
            map_size=_non_negative("map_size", mapping.get("map_size", cls.map_size)),
            max_height=_non_negative("max_height", mapping.get("max_height", cls.max_height), float),
            grid_height=_non_negative("grid_height", mapping.get("grid_height", cls.grid_height)),
            seed=int(mapping.get("seed", cls.seed)),
            terrain=TerrainSettings.from_mapping(_section(mapping, "terrain")),
            caves=CaveSettings.from_mapping(_section(mapping, "caves")),
            overhangs=OverhangSettings.from_mapping(_section(mapping, "overhangs")),
            validate_structure=bool(mapping.get("validate_structure", cls.validate_structure)),
            run_id=str(mapping.get("run_id") or _default_run_id()),
            log_dir=Path(log_dir).expanduser().resolve() if log_dir else None,
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "GeneratorConfig":
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(path)
        with path.open("r", encoding="utf8") as fh:
            if path.suffix.lower() in {".yml", ".yaml"}:
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise TypeError(f"Configuration file must contain a mapping, got {type(data)!r}")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map_size": self.map_size,
            "max_height": self.max_height,
            "grid_height": self.grid_height,
            "seed": self.seed,
            "terrain": self.terrain.to_dict(),
            "caves": self.caves.to_dict(),
            "overhangs": self.overhangs.to_dict(),
            "validate_structure": self.validate_structure,
        }

    def run_log_path(self) -> Path | None:
        if self.log_dir is None:
            return None
        return self.log_dir / f"{self.run_id}.jsonl"


def load_config(source: Path | str) -> GeneratorConfig:
    """Convenience helper for CLI consumers."""
    return GeneratorConfig.from_file(source)
