from __future__ import annotations

import threading
import time
from pathlib import Path

from .batch import BatchCoordinator, ItemListener, ProgressListener
from .compositing import flatten, render_to_target
from .config import AppConfig
from .encoding import encode_png, persist
from .errors import ConversionError, ErrorKind
from .inspection import count_documents, inspect_document, load_document, scan_folder
from .logging import BatchSummary, RunLogEntry, RunLogger, StageTimings, append_summary_row
from .models import (
    RGB,
    ConversionJob,
    ConversionSummary,
    ConversionTask,
    FolderSizeSummary,
    Size,
    SizeMode,
)
from .planning import plan_target_size
from .renderers import Renderer, get_renderer
from .utils import elapsed_ms, generate_run_id


class ConversionService:
    def __init__(self, config: AppConfig, renderer: Renderer | None = None) -> None:
        self._config = config
        self._renderer = renderer or get_renderer(config.runtime.renderer, config.runtime.dpi)
        self._logger: RunLogger | None = None
        if config.runtime.enable_run_log:
            self._logger = RunLogger(config.runtime.log_dir / config.runtime.log_file)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def renderer_id(self) -> str:
        return self._renderer.renderer_id

    def inspect(self, path: Path) -> Size:
        return inspect_document(Path(path))

    def scan_folder(self, directory: Path) -> FolderSizeSummary:
        return scan_folder(Path(directory), self._config.extensions)

    def count_documents(self, directory: Path) -> int:
        return count_documents(Path(directory), self._config.extensions)

    def start_conversion(
        self,
        job: ConversionJob,
        *,
        on_progress: ProgressListener | None = None,
        on_item: ItemListener | None = None,
        cancellation: threading.Event | None = None,
        workers: int | None = None,
        run_id: str | None = None,
    ) -> ConversionSummary:
        """Run *job* to completion (or cancellation) and return the final tally.

        Raises ``JobError`` if the job cannot start; individual document
        failures are reported through *on_item* and never raise.
        """
        batch = self._config.runtime.batch
        coordinator = BatchCoordinator(
            self,
            job,
            run_id=run_id or generate_run_id(),
            workers=workers or batch.effective_pool_size,
            extensions=self._config.extensions,
            require_uniform_exact=batch.require_uniform_exact,
            on_progress=on_progress,
            on_item=on_item,
            cancellation=cancellation,
        )
        summary = coordinator.run()
        self._write_batch_summary(summary)
        return summary

    def convert_task(
        self,
        source: Path,
        destination: Path,
        job: ConversionJob,
        *,
        background: RGB | None,
        run_id: str,
    ) -> ConversionTask:
        timings = StageTimings()
        try:
            task, size_bytes = self._convert_internal(source, destination, job, background, timings)
        except ConversionError as exc:
            self._log(
                run_id, source, destination, timings, error_code=exc.code.value, error_message=str(exc)
            )
            raise
        except Exception as exc:
            self._log(
                run_id,
                source,
                destination,
                timings,
                error_code=ErrorKind.RENDER_ERROR.value,
                error_message=f"{type(exc).__name__}: {exc}",
            )
            raise
        self._log(run_id, source, destination, timings, task=task, size_bytes=size_bytes)
        return task

    def _convert_internal(
        self,
        source: Path,
        destination: Path,
        job: ConversionJob,
        background: RGB | None,
        timings: StageTimings,
    ) -> tuple[ConversionTask, int]:
        start = time.perf_counter()
        document = load_document(source)
        timings.read_ms = elapsed_ms(start)

        start = time.perf_counter()
        intrinsic = document.size
        target = plan_target_size(
            job.size_mode,
            intrinsic,
            scale_factor=job.scale_factor,
            exact_size=job.exact_size,
        )
        task = ConversionTask(
            source_path=source,
            intrinsic_size=intrinsic,
            target_size=target,
            crop_enabled=job.crop_enabled,
            background=background,
            destination_path=destination,
            exact=job.size_mode is SizeMode.EXACT,
        )
        timings.plan_ms = elapsed_ms(start)

        start = time.perf_counter()
        image = flatten(render_to_target(self._renderer, document, task), task.background)
        timings.render_ms = elapsed_ms(start)

        start = time.perf_counter()
        size_bytes = persist(task.destination_path, encode_png(image))
        timings.write_ms = elapsed_ms(start)
        return task, size_bytes

    def _log(
        self,
        run_id: str,
        source: Path,
        destination: Path,
        timings: StageTimings,
        *,
        task: ConversionTask | None = None,
        size_bytes: int = 0,
        error_code: str | None = None,
        error_message: str | None = None,
    ) -> None:
        if self._logger is None:
            return
        self._logger.append(
            RunLogEntry(
                run_id=run_id,
                source=str(source),
                destination=str(destination),
                status="failure" if error_code else "success",
                renderer=self.renderer_id,
                error_code=error_code,
                error_message=error_message,
                out_width=task.target_size.width if task else None,
                out_height=task.target_size.height if task else None,
                timings=timings,
                size_bytes=size_bytes,
            )
        )

    def _write_batch_summary(self, summary: ConversionSummary) -> None:
        if not self._config.runtime.enable_run_log:
            return
        runtime = self._config.runtime
        append_summary_row(
            runtime.log_dir / runtime.summary_csv,
            summary.run_id,
            BatchSummary(
                total=summary.total,
                ok=summary.ok,
                failed=summary.failed,
                skipped=summary.skipped,
            ),
        )


__all__ = ["ConversionService"]
