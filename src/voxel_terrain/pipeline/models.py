"""Core data models shared across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping


@dataclass
class StageStats:
    """Timing metrics for a stage execution."""

    start_ns: int
    end_ns: int
    duration_ns: int
    cpu_time_ns: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_ns": self.start_ns,
            "end_ns": self.end_ns,
            "duration_ns": self.duration_ns,
            "cpu_time_ns": self.cpu_time_ns,
        }


@dataclass
class StageResult:
    """Captured outcome of a pipeline stage."""

    stage_name: str
    dependencies: tuple[str, ...]
    artifacts: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)
    stats: StageStats | None = None

    @classmethod
    def from_output(
        cls,
        stage_name: str,
        dependencies: Iterable[str],
        output: "StageOutput",
    ) -> "StageResult":
        if isinstance(output, StageResult):
            output.stage_name = stage_name
            output.dependencies = tuple(dependencies)
            return output
        artifacts: Dict[str, Any]
        metadata: Dict[str, Any] = {}
        if output is None:
            artifacts = {}
        elif isinstance(output, tuple) and len(output) == 2 and isinstance(output[1], Mapping):
            # (artifacts, metadata)
            artifacts = dict(output[0])
            metadata = dict(output[1])
        elif isinstance(output, Mapping):
            artifacts = dict(output)
        else:
            artifacts = {"value": output}
        return cls(
            stage_name=stage_name,
            dependencies=tuple(dependencies),
            artifacts=artifacts,
            metadata=metadata,
        )

    def artifact(self, name: str) -> Any:
        try:
            return self.artifacts[name]
        except KeyError as exc:
            raise KeyError(f"Stage '{self.stage_name}' produced no artifact '{name}'") from exc

    def record_stats(self, stats: StageStats) -> None:
        self.stats = stats


StageOutput = Mapping[str, Any] | tuple | Any
