"""Asynchronous structured logging for generation runs."""

from __future__ import annotations

import json
import queue
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import StageResult


class RunLogger:
    """Collects structured events and, given a path, writes them to disk as JSON lines.

    File output happens on a daemon writer thread; ``close()`` drains it and
    writes a Markdown summary next to the log.
    """

    def __init__(self, log_path: Optional[Path] = None, summary_path: Optional[Path] = None) -> None:
        self._log_path = log_path
        self._summary_path = summary_path or (log_path.with_suffix(".md") if log_path else None)
        self._events: List[Dict[str, Any]] = []
        self._stage_records: list[dict[str, Any]] = []
        self._queue: "queue.Queue[Optional[Dict[str, Any]]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._thread = threading.Thread(target=self._worker, daemon=True)
            self._thread.start()

    def _worker(self) -> None:
        assert self._log_path is not None
        with self._log_path.open("a", encoding="utf8") as fh:
            while True:
                item = self._queue.get()
                if item is None:
                    break
                json.dump(item, fh, sort_keys=True)
                fh.write("\n")
                fh.flush()

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(self._events)

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_path

    def log_event(self, event: Dict[str, Any]) -> None:
        payload = {"timestamp": time.time(), **event}
        self._events.append(payload)
        if self._thread is not None and not self._closed:
            self._queue.put(payload)

    def log_stage_start(self, stage_name: str) -> None:
        self.log_event({"type": "stage_start", "stage": stage_name})

    def log_stage_end(self, stage_result: StageResult) -> None:
        stats = stage_result.stats
        payload: Dict[str, Any] = {
            "type": "stage_end",
            "stage": stage_result.stage_name,
            "metadata": stage_result.metadata,
        }
        if stats:
            payload["stats"] = stats.to_dict()
            self._stage_records.append({"stage": stage_result.stage_name, "duration_ns": stats.duration_ns})
        self.log_event(payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._thread is not None:
            self._queue.put(None)
            self._thread.join(timeout=2)
            self._write_summary()

    def _write_summary(self) -> None:
        if not self._stage_records or self._summary_path is None:
            return
        total_duration = sum(record["duration_ns"] for record in self._stage_records)
        lines = ["# Terrain Run Summary", "", f"- Total stages: {len(self._stage_records)}"]
        lines.append(f"- Total duration (ms): {total_duration / 1e6:.2f}")
        lines.append("")
        lines.append("| Stage | Duration (ms) |")
        lines.append("| --- | ---: |")
        for record in self._stage_records:
            lines.append(f"| {record['stage']} | {record['duration_ns'] / 1e6:.2f} |")
        self._summary_path.parent.mkdir(parents=True, exist_ok=True)
        self._summary_path.write_text("\n".join(lines), encoding="utf8")


__all__ = ["RunLogger"]
