"""Pipeline execution engine."""

from __future__ import annotations

import time
from contextlib import contextmanager
from graphlib import CycleError, TopologicalSorter
from typing import Dict, Iterable, Iterator

from .config import GeneratorConfig
from .logging import RunLogger
from .models import StageResult, StageStats
from .registry import registry


class PipelineContext:
    """Shared state passed to stages during execution."""

    def __init__(self, config: GeneratorConfig, logger: RunLogger) -> None:
        self.config = config
        self.logger = logger
        self._current_stage: str | None = None

    def set_current_stage(self, stage_name: str | None) -> None:
        self._current_stage = stage_name

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            end = time.perf_counter_ns()
            self.logger.log_event(
                {
                    "type": "timed_scope",
                    "stage": self._current_stage,
                    "label": label,
                    "duration_ns": end - start,
                }
            )


class ExecutionEngine:
    """Runs registered stages in dependency order with timing and logging."""

    def __init__(self, config: GeneratorConfig, logger: RunLogger | None = None) -> None:
        # caller-supplied loggers are left open
        self._owns_logger = logger is None
        self._logger = logger if logger is not None else RunLogger(config.run_log_path())
        self._context = PipelineContext(config=config, logger=self._logger)

    @property
    def logger(self) -> RunLogger:
        return self._logger

    def _dependency_graph(self, stages: Iterable[str]) -> Dict[str, set[str]]:
        descriptors = registry().descriptors()
        graph: Dict[str, set[str]] = {}
        pending = list(stages)
        while pending:
            stage_name = pending.pop()
            if stage_name in graph:
                continue
            if stage_name not in descriptors:
                raise KeyError(f"Stage '{stage_name}' not registered")
            inputs = set(descriptors[stage_name].inputs)
            graph[stage_name] = inputs
            pending.extend(inputs)
        return graph

    def _topological_order(self, stages: Iterable[str]) -> list[str]:
        graph = self._dependency_graph(stages)
        try:
            return list(TopologicalSorter(graph).static_order())
        except CycleError as exc:
            raise ValueError(f"Invalid stage graph: {exc}") from exc

    def run(self, stages: Iterable[str] | None = None) -> Dict[str, StageResult]:
        """Execute ``stages`` and everything they depend on; all registered stages by default."""
        descriptors = registry().descriptors()
        selected = list(stages) if stages else list(descriptors.keys())
        order = self._topological_order(selected)
        results: Dict[str, StageResult] = {}

        try:
            for stage_name in order:
                descriptor = descriptors[stage_name]
                dependencies = {name: results[name] for name in descriptor.inputs}
                self._context.set_current_stage(stage_name)
                self._logger.log_stage_start(stage_name)

                start_ns = time.perf_counter_ns()
                start_cpu = time.process_time_ns()
                output = descriptor.callable(self._context, dependencies)
                result = StageResult.from_output(stage_name, descriptor.inputs, output)
                end_ns = time.perf_counter_ns()
                end_cpu = time.process_time_ns()
                result.record_stats(
                    StageStats(
                        start_ns=start_ns,
                        end_ns=end_ns,
                        duration_ns=end_ns - start_ns,
                        cpu_time_ns=end_cpu - start_cpu,
                    )
                )
                self._logger.log_stage_end(result)
                results[stage_name] = result
                self._context.set_current_stage(None)
        finally:
            if self._owns_logger:
                self._logger.close()
        return results


__all__ = ["ExecutionEngine", "PipelineContext"]
