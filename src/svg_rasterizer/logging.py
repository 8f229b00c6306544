from __future__ import annotations

import csv
import json
import threading
import time
from dataclasses import asdict, dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any

from .utils import atomic_write


SUMMARY_HEADER = ["run_id", "timestamp", "total", "ok", "failed", "skipped"]

_summary_lock = threading.Lock()


@dataclass(slots=True)
class StageTimings:
    read_ms: float = 0.0
    plan_ms: float = 0.0
    render_ms: float = 0.0
    write_ms: float = 0.0


@dataclass(slots=True)
class RunLogEntry:
    run_id: str
    source: str
    destination: str
    status: str
    renderer: str | None
    error_code: str | None
    error_message: str | None
    out_width: int | None
    out_height: int | None
    timings: StageTimings
    size_bytes: int

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class RunLogger:
    """Appends one JSON line per finished task; safe to share between workers."""

    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._log_file

    def append(self, entry: RunLogEntry) -> None:
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._lock:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with self._log_file.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


@dataclass(slots=True)
class BatchSummary:
    timestamp: float = field(default_factory=time.time)
    total: int = 0
    ok: int = 0
    failed: int = 0
    skipped: int = 0

    def as_row(self, run_id: str) -> list[str]:
        return [
            run_id,
            time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp)),
            str(self.total),
            str(self.ok),
            str(self.failed),
            str(self.skipped),
        ]


def write_summary_csv(path: Path, header: list[str], rows: list[list[str]]) -> None:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    atomic_write(path, buffer.getvalue())


def append_summary_row(path: Path, run_id: str, summary: BatchSummary) -> None:
    with _summary_lock:
        header = list(SUMMARY_HEADER)
        rows: list[list[str]] = []
        if path.exists():
            with path.open("r", encoding="utf-8", newline="") as handle:
                reader = list(csv.reader(handle))
            if reader:
                header = reader[0]
                rows = reader[1:]
        rows.append(summary.as_row(run_id))
        write_summary_csv(path, header, rows)
