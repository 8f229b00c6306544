from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import AppConfig, load_config_from_env
from ..core import ConversionService
from ..errors import ConversionError, ErrorKind
from ..jobs import JobManager
from .routers import convert, health, jobs

_STATUS_BY_KIND = {
    ErrorKind.JOB_ERROR: 400,
    ErrorKind.NOT_FOUND: 404,
}


def create_app(
    config: AppConfig | None = None,
    *,
    service: ConversionService | None = None,
    require_enabled: bool = True,
) -> FastAPI:
    if config is None:
        config = load_config_from_env()
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via configuration or environment.")

    app = FastAPI(title="SVG Rasterizer", version="0.1.0")
    app.state.config = config
    service = service or ConversionService(config)
    app.state.service = service
    app.state.job_manager = JobManager(config, service)

    app.include_router(health.router)
    app.include_router(convert.router)
    app.include_router(jobs.router)

    @app.exception_handler(ConversionError)
    async def _conversion_error(request: Request, exc: ConversionError) -> JSONResponse:
        status_code = _STATUS_BY_KIND.get(exc.code, 422)
        return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        manager: JobManager = app.state.job_manager
        manager.shutdown()

    return app


__all__ = ["create_app"]
