from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_service
from ...core import ConversionService
from ...renderers import available_renderers

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
def health(service: ConversionService = Depends(get_service)) -> dict[str, object]:
    return {
        "status": "ok",
        "renderer": service.renderer_id,
        "available_renderers": available_renderers(),
    }


__all__ = ["router"]
