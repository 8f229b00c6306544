from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from .config import AppConfig
from .core import ConversionService
from .errors import JobError
from .models import ConversionJob, ConversionResult, ProgressState
from .utils import generate_run_id


ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).strftime(ISO_FORMAT)


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def terminal(self) -> bool:
        return self in {JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELED}


@dataclass(slots=True)
class JobRecord:
    job_id: str
    status: JobStatus
    submitted_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    progress: ProgressState | None = None
    items: list[dict[str, object]] = field(default_factory=list)
    summary: dict[str, object] | None = None
    error_code: str | None = None
    error_message: str | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "submitted_at": self.submitted_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "progress": self.progress.to_payload() if self.progress else None,
            "items": list(self.items),
            "summary": self.summary,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


@dataclass(slots=True)
class JobHandle:
    job_id: str
    job: ConversionJob
    record: JobRecord
    cancel_event: threading.Event
    workers: int | None = None


class JobManager:
    """Runs conversion jobs in the background; each job gets its own coordinator."""

    def __init__(self, config: AppConfig, service: ConversionService) -> None:
        self._config = config
        self._service = service
        pool_size = max(1, config.runtime.jobs.max_concurrent_jobs)
        self._executor = ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="job-worker")
        self._jobs: dict[str, JobHandle] = {}
        self._futures: dict[str, Future[None]] = {}
        self._lock = threading.Lock()

    def submit(self, job: ConversionJob, *, workers: int | None = None) -> JobRecord:
        job_id = generate_run_id("job")
        record = JobRecord(job_id=job_id, status=JobStatus.QUEUED, submitted_at=_iso(_utc_now()))
        handle = JobHandle(
            job_id=job_id,
            job=job,
            record=record,
            cancel_event=threading.Event(),
            workers=workers,
        )
        with self._lock:
            self._jobs[job_id] = handle
            self._prune()
            snapshot = self._copy(record)
        future = self._executor.submit(self._run_job, handle)
        with self._lock:
            self._futures[job_id] = future
        return snapshot

    def _run_job(self, handle: JobHandle) -> None:
        if handle.cancel_event.is_set():
            self._update(handle, status=JobStatus.CANCELED, finished_at=_iso(_utc_now()))
            return
        self._update(handle, status=JobStatus.RUNNING, started_at=_iso(_utc_now()))

        def _on_progress(state: ProgressState) -> None:
            self._update(handle, progress=state)

        def _on_item(result: ConversionResult) -> None:
            with self._lock:
                handle.record.items.append(result.to_payload())

        try:
            summary = self._service.start_conversion(
                handle.job,
                on_progress=_on_progress,
                on_item=_on_item,
                cancellation=handle.cancel_event,
                workers=handle.workers,
                run_id=handle.job_id,
            )
        except JobError as exc:
            self._update(
                handle,
                status=JobStatus.FAILED,
                finished_at=_iso(_utc_now()),
                error_code=exc.code.value,
                error_message=str(exc),
            )
            return
        except Exception as exc:  # pragma: no cover - unexpected paths
            self._update(
                handle,
                status=JobStatus.FAILED,
                finished_at=_iso(_utc_now()),
                error_code="UNKNOWN",
                error_message=str(exc),
            )
            raise
        status = JobStatus.CANCELED if summary.cancelled else JobStatus.SUCCEEDED
        self._update(
            handle,
            status=status,
            finished_at=_iso(_utc_now()),
            summary=summary.to_payload(),
        )

    def _update(
        self,
        handle: JobHandle,
        *,
        status: JobStatus | None = None,
        started_at: str | None = None,
        finished_at: str | None = None,
        progress: ProgressState | None = None,
        summary: dict[str, object] | None = None,
        error_code: str | None = None,
        error_message: str | None = None,
    ) -> None:
        with self._lock:
            record = handle.record
            if status is not None:
                record.status = status
            if started_at:
                record.started_at = started_at
            if finished_at:
                record.finished_at = finished_at
            if progress is not None:
                record.progress = progress
            if summary is not None:
                record.summary = summary
            if error_code is not None:
                record.error_code = error_code
            if error_message is not None:
                record.error_message = error_message

    def _copy(self, record: JobRecord) -> JobRecord:
        return replace(record, items=list(record.items))

    def _prune(self) -> None:
        limit = self._config.runtime.jobs.history_limit
        finished = [job_id for job_id, handle in self._jobs.items() if handle.record.status.terminal]
        excess = len(finished) - limit
        for job_id in finished[: max(0, excess)]:
            self._jobs.pop(job_id, None)
            self._futures.pop(job_id, None)

    def cancel(self, job_id: str) -> bool:
        with self._lock:
            handle = self._jobs.get(job_id)
            if handle is None or handle.record.status.terminal:
                return False
        handle.cancel_event.set()
        return True

    def get_status(self, job_id: str) -> JobRecord | None:
        with self._lock:
            handle = self._jobs.get(job_id)
            if handle is None:
                return None
            return self._copy(handle.record)

    def wait(self, job_id: str, timeout: float | None = None) -> JobRecord | None:
        with self._lock:
            future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.get_status(job_id)

    def list_jobs(self, limit: int = 50) -> list[dict[str, object]]:
        with self._lock:
            records = [self._copy(handle.record) for handle in self._jobs.values()]
        if limit > 0:
            records = records[-limit:]
        return [record.to_payload() for record in records]

    def shutdown(self) -> None:
        with self._lock:
            handles = list(self._jobs.values())
        for handle in handles:
            handle.cancel_event.set()
        self._executor.shutdown(wait=True)


__all__ = [
    "JobManager",
    "JobRecord",
    "JobStatus",
]
