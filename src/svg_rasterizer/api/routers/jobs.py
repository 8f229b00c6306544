from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_job_manager
from ..schemas import ConvertRequest
from ...jobs import JobManager

router = APIRouter(prefix="/api/v1", tags=["jobs"])


@router.post("/jobs", summary="Start a background conversion", status_code=202)
def submit_job(
    request: ConvertRequest,
    manager: JobManager = Depends(get_job_manager),
) -> dict[str, Any]:
    record = manager.submit(request.to_job(), workers=request.workers)
    return {
        "job_id": record.job_id,
        "status": record.status.value,
        "submitted_at": record.submitted_at,
    }


@router.get("/jobs/{job_id}", summary="Retrieve job status, progress and items")
def get_job(job_id: str, manager: JobManager = Depends(get_job_manager)) -> dict[str, Any]:
    record = manager.get_status(job_id)
    if record is None:
        raise HTTPException(status_code=404, detail="JOB_NOT_FOUND")
    return record.to_payload()


@router.post("/jobs/{job_id}/cancel", summary="Stop dispatching further documents")
def cancel_job(job_id: str, manager: JobManager = Depends(get_job_manager)) -> dict[str, Any]:
    if not manager.cancel(job_id):
        raise HTTPException(status_code=409, detail="NOT_CANCELABLE")
    record = manager.get_status(job_id)
    if record is None:
        raise HTTPException(status_code=404, detail="JOB_NOT_FOUND")
    return record.to_payload()


@router.get("/jobs", summary="List recent jobs")
def list_jobs(
    limit: int = Query(50, ge=1, le=500),
    manager: JobManager = Depends(get_job_manager),
) -> dict[str, Any]:
    return {"jobs": manager.list_jobs(limit)}


__all__ = ["router"]
