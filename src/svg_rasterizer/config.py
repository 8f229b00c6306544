from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping


CONFIG_FILE = Path("config.toml")
ENV_PREFIX = "SVGR_"


@dataclass(slots=True)
class BatchConfig:
    worker_pool_size: int = 0
    require_uniform_exact: bool = True

    @property
    def effective_pool_size(self) -> int:
        if self.worker_pool_size > 0:
            return self.worker_pool_size
        return min(4, max(1, os.cpu_count() or 1))


@dataclass(slots=True)
class JobsConfig:
    max_concurrent_jobs: int = 2
    history_limit: int = 50


@dataclass(slots=True)
class RuntimeConfig:
    log_dir: Path = Path("runs")
    log_file: str = "log.jsonl"
    summary_csv: str = "summary.csv"
    enable_run_log: bool = True
    enable_local_api: bool = False
    renderer: str = "cairosvg"
    dpi: float = 96.0
    batch: BatchConfig = field(default_factory=BatchConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    extensions: tuple[str, ...] = (".svg",)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_batch(data: Mapping[str, object] | None) -> BatchConfig:
    if not data:
        return BatchConfig()
    return BatchConfig(
        worker_pool_size=int(data.get("worker_pool_size", 0)),
        require_uniform_exact=bool(data.get("require_uniform_exact", True)),
    )


def _build_jobs(data: Mapping[str, object] | None) -> JobsConfig:
    if not data:
        return JobsConfig()
    return JobsConfig(
        max_concurrent_jobs=int(data.get("max_concurrent_jobs", 2)),
        history_limit=int(data.get("history_limit", 50)),
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    batch = data.get("batch")
    jobs = data.get("jobs")
    return RuntimeConfig(
        log_dir=Path(str(data.get("log_dir", "runs"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        summary_csv=str(data.get("summary_csv", "summary.csv")),
        enable_run_log=bool(data.get("enable_run_log", True)),
        enable_local_api=bool(data.get("enable_local_api", False)),
        renderer=str(data.get("renderer", "cairosvg")),
        dpi=float(data.get("dpi", 96.0)),
        batch=_build_batch(batch if isinstance(batch, Mapping) else None),
        jobs=_build_jobs(jobs if isinstance(jobs, Mapping) else None),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def _extensions(value: object | None, default: Iterable[str]) -> tuple[str, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        value = (value,)
    if isinstance(value, Iterable):
        normalized = []
        for item in value:
            text = str(item).strip().lower()
            normalized.append(text if text.startswith(".") else f".{text}")
        return tuple(normalized)
    raise TypeError(f"Unsupported extensions configuration: {value!r}")


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    runtime_data = raw.get("runtime") if isinstance(raw, Mapping) else None
    extensions_data = raw.get("extensions") if isinstance(raw, Mapping) else None
    api_data = raw.get("api") if isinstance(raw, Mapping) else None
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    extensions = _extensions(extensions_data, AppConfig().extensions)
    api = _build_api(api_data if isinstance(api_data, Mapping) else None)
    return AppConfig(runtime=runtime, extensions=extensions, api=api)


def _env_flag(value: str | None) -> bool | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


def load_config_from_env(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load the file named by ``SVGR_CONFIG_PATH`` and apply ``SVGR_ENABLE_LOCAL_API``."""
    environ = os.environ if environ is None else environ
    path = environ.get(f"{ENV_PREFIX}CONFIG_PATH")
    config = load_config(Path(path) if path else None)
    enabled = _env_flag(environ.get(f"{ENV_PREFIX}ENABLE_LOCAL_API"))
    if enabled is not None:
        config.runtime.enable_local_api = enabled
    return config


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "log_dir": str(config.runtime.log_dir),
            "log_file": config.runtime.log_file,
            "summary_csv": config.runtime.summary_csv,
            "enable_run_log": config.runtime.enable_run_log,
            "enable_local_api": config.runtime.enable_local_api,
            "renderer": config.runtime.renderer,
            "dpi": config.runtime.dpi,
            "batch": {
                "worker_pool_size": config.runtime.batch.worker_pool_size,
                "require_uniform_exact": config.runtime.batch.require_uniform_exact,
            },
            "jobs": {
                "max_concurrent_jobs": config.runtime.jobs.max_concurrent_jobs,
                "history_limit": config.runtime.jobs.history_limit,
            },
        },
        "extensions": list(config.extensions),
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
