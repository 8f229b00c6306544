"""Bounded worker pool that drives one conversion run."""

from __future__ import annotations

import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from .compositing import parse_background
from .encoding import destination_for
from .errors import ConversionError, ErrorKind, InvalidDocumentError, JobError, NotFoundError
from .inspection import SVG_EXTENSIONS, DocumentFolder, inspect_document
from .models import (
    RGB,
    ConversionJob,
    ConversionResult,
    ConversionSummary,
    InputMode,
    Phase,
    ProgressState,
    SizeMode,
)

if TYPE_CHECKING:
    from .core import ConversionService


ProgressListener = Callable[[ProgressState], None]
ItemListener = Callable[[ConversionResult], None]


class RunState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CONVERTING = "converting"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    DONE = "done"
    FAILED = "failed"


class ProgressTracker:
    """Counters for a single run. Every mutation happens under one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._phase = Phase.SCANNING
        self._total = 0
        self._active = 0
        self._ok = 0
        self._failed = 0
        self._last_source: Path | None = None

    def _snapshot(self) -> ProgressState:
        return ProgressState(
            phase=self._phase,
            total=self._total,
            current=self._ok + self._failed,
            active=self._active,
            ok=self._ok,
            failed=self._failed,
            last_source_path=self._last_source,
        )

    def snapshot(self) -> ProgressState:
        with self._lock:
            return self._snapshot()

    def start(self, total: int) -> ProgressState:
        with self._lock:
            self._phase = Phase.SCANNING
            self._total = total
            return self._snapshot()

    def set_phase(self, phase: Phase) -> ProgressState:
        with self._lock:
            self._phase = phase
            return self._snapshot()

    def begin(self, source: Path) -> None:
        with self._lock:
            self._phase = Phase.CONVERTING
            self._active += 1
            self._last_source = source

    def complete(self, result: ConversionResult) -> ProgressState:
        with self._lock:
            self._active = max(0, self._active - 1)
            if result.ok:
                self._ok += 1
            else:
                self._failed += 1
            self._last_source = result.source_path
            return self._snapshot()

    def exclude(self, count: int) -> ProgressState:
        with self._lock:
            self._total = max(self._ok + self._failed, self._total - count)
            return self._snapshot()


@dataclass(frozen=True, slots=True)
class _WorkItem:
    index: int
    source: Path
    destination: Path


class BatchCoordinator:
    """Runs one :class:`ConversionJob` through scanning, converting and completion.

    A coordinator owns its :class:`ProgressTracker` and is used for exactly one
    run. Per-task failures become failed results; only configuration problems
    found while scanning (``JobError``) abort the run.
    """

    def __init__(
        self,
        service: "ConversionService",
        job: ConversionJob,
        *,
        run_id: str,
        workers: int,
        extensions: Iterable[str] = SVG_EXTENSIONS,
        require_uniform_exact: bool = True,
        on_progress: ProgressListener | None = None,
        on_item: ItemListener | None = None,
        cancellation: threading.Event | None = None,
    ) -> None:
        self._service = service
        self._job = job
        self._run_id = run_id
        self._workers = max(1, workers)
        self._extensions = tuple(extensions)
        self._require_uniform_exact = require_uniform_exact
        self._on_progress = on_progress or (lambda _: None)
        self._on_item = on_item or (lambda _: None)
        self._cancellation = cancellation or threading.Event()
        self._tracker = ProgressTracker()
        self._state = RunState.IDLE
        self._state_lock = threading.Lock()
        self._background: RGB | None = None
        self._results: list[ConversionResult] = []

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def state(self) -> RunState:
        return self._state

    def progress(self) -> ProgressState:
        return self._tracker.snapshot()

    def cancel(self) -> None:
        self._cancellation.set()

    def run(self) -> ConversionSummary:
        with self._state_lock:
            if self._state is not RunState.IDLE:
                raise RuntimeError("A coordinator drives exactly one run")
            self._state = RunState.SCANNING
        try:
            items = self._scan()
        except JobError:
            self._state = RunState.FAILED
            raise
        self._state = RunState.CONVERTING
        skipped = self._convert(items)

        cancelled = self._state is RunState.CANCELLING
        self._state = RunState.CANCELLED if cancelled else RunState.DONE
        final = self._tracker.set_phase(Phase.CANCELLED if cancelled else Phase.DONE)
        self._on_progress(final)
        return ConversionSummary(
            run_id=self._run_id,
            total=final.total,
            ok=final.ok,
            failed=final.failed,
            skipped=skipped,
            cancelled=cancelled,
            results=sorted(self._results, key=lambda result: result.index),
        )

    # ---- scanning ----

    def _scan(self) -> list[_WorkItem]:
        self._background = parse_background(self._job.background)
        sources = self._resolve_sources()
        output_dir = self._prepare_output_dir(self._job.output_dir)
        if (
            self._job.size_mode is SizeMode.EXACT
            and self._require_uniform_exact
            and len(sources) > 1
        ):
            self._ensure_uniform_sizes(sources)
        items = [
            _WorkItem(index=position, source=source, destination=destination_for(source, output_dir))
            for position, source in enumerate(sources, start=1)
        ]
        self._on_progress(self._tracker.start(len(items)))
        return items

    def _resolve_sources(self) -> list[Path]:
        job = self._job
        if job.input_mode is InputMode.FOLDER:
            if len(job.sources) != 1:
                raise JobError("Folder mode takes exactly one directory.")
            try:
                folder = DocumentFolder(job.sources[0], self._extensions)
            except NotFoundError as exc:
                raise JobError(str(exc)) from exc
            return list(folder)
        if not job.sources:
            raise JobError("No source documents given.")
        return list(job.sources)

    def _prepare_output_dir(self, output_dir: Path | None) -> Path | None:
        if output_dir is None:
            return None
        if output_dir.exists() and not output_dir.is_dir():
            raise JobError(f"Output path is not a directory: {output_dir}")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise JobError(f"Cannot create output directory {output_dir}: {exc}") from exc
        if not os.access(output_dir, os.W_OK):
            raise JobError(f"Output directory is not writable: {output_dir}")
        return output_dir

    def _ensure_uniform_sizes(self, sources: Sequence[Path]) -> None:
        seen = set()
        for source in sources:
            try:
                seen.add(inspect_document(source))
            except (NotFoundError, InvalidDocumentError):
                continue
            if len(seen) > 1:
                sizes = ", ".join(sorted(str(size) for size in seen))
                raise JobError(
                    f"Exact mode requires all sources to share one intrinsic size (found {sizes})."
                )

    # ---- converting ----

    def _convert(self, items: Sequence[_WorkItem]) -> int:
        pending: dict[Future[ConversionResult], _WorkItem] = {}
        dispatched = 0
        limit = len(items)
        skipped = 0

        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="svg-worker") as pool:

            def dispatch_until_full() -> None:
                nonlocal dispatched, limit, skipped
                while len(pending) < self._workers and dispatched < limit:
                    if self._cancellation.is_set():
                        skipped = limit - dispatched
                        limit = dispatched
                        self._state = RunState.CANCELLING
                        self._tracker.exclude(skipped)
                        return
                    item = items[dispatched]
                    dispatched += 1
                    pending[pool.submit(self._execute, item)] = item

            dispatch_until_full()
            while pending:
                done, _ = wait(list(pending), return_when=FIRST_COMPLETED)
                for future in done:
                    pending.pop(future)
                    self._record(future.result())
                dispatch_until_full()
        return skipped

    def _execute(self, item: _WorkItem) -> ConversionResult:
        self._tracker.begin(item.source)
        renderer_id = self._service.renderer_id
        try:
            task = self._service.convert_task(
                item.source,
                item.destination,
                self._job,
                background=self._background,
                run_id=self._run_id,
            )
        except ConversionError as exc:
            return ConversionResult.failure(
                item.index, 0, item.source, item.destination, exc.code, str(exc), renderer_id
            )
        except Exception as exc:
            return ConversionResult.failure(
                item.index,
                0,
                item.source,
                item.destination,
                ErrorKind.RENDER_ERROR,
                f"{type(exc).__name__}: {exc}",
                renderer_id,
            )
        return ConversionResult.success(item.index, 0, task, renderer_id)

    def _record(self, result: ConversionResult) -> None:
        snapshot = self._tracker.complete(result)
        result.total = snapshot.total
        self._results.append(result)
        self._on_item(result)
        self._on_progress(snapshot)


__all__ = [
    "BatchCoordinator",
    "ItemListener",
    "ProgressListener",
    "ProgressTracker",
    "RunState",
]
