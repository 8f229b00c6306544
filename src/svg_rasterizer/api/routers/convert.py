from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ..dependencies import get_service
from ..schemas import ConvertRequest, CountPayload, FolderSizePayload, PathRequest, SizePayload
from ...core import ConversionService
from ...models import ConversionResult

router = APIRouter(prefix="/api/v1", tags=["conversion"])


@router.post("/inspect", summary="Intrinsic size of one document", response_model=SizePayload)
async def inspect_document(
    payload: PathRequest,
    service: ConversionService = Depends(get_service),
) -> dict[str, int]:
    size = await run_in_threadpool(service.inspect, Path(payload.path))
    return size.to_dict()


@router.post("/scan", summary="Size overview of a folder", response_model=FolderSizePayload)
async def scan_folder(
    payload: PathRequest,
    service: ConversionService = Depends(get_service),
) -> dict[str, object]:
    summary = await run_in_threadpool(service.scan_folder, Path(payload.path))
    return summary.to_dict()


@router.post("/count", summary="Number of documents in a folder", response_model=CountPayload)
async def count_documents(
    payload: PathRequest,
    service: ConversionService = Depends(get_service),
) -> dict[str, int]:
    total = await run_in_threadpool(service.count_documents, Path(payload.path))
    return {"total": total}


@router.post("/convert", summary="Convert documents and wait for the result")
async def convert(
    request: ConvertRequest,
    service: ConversionService = Depends(get_service),
) -> dict[str, Any]:
    items: list[dict[str, object]] = []

    def _on_item(result: ConversionResult) -> None:
        items.append(result.to_payload())

    summary = await run_in_threadpool(
        service.start_conversion,
        request.to_job(),
        on_item=_on_item,
        workers=request.workers,
    )
    items.sort(key=lambda item: int(item["index"]))  # type: ignore[arg-type]
    return {"summary": summary.to_payload(), "items": items}


__all__ = ["router"]
