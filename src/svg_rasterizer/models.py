"""Domain models for vector-to-raster conversion runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

from .errors import ErrorKind, InvalidDimensionsError


RGB = tuple[int, int, int]


class InputMode(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class SizeMode(str, Enum):
    SCALE = "scale"
    EXACT = "exact"


class Phase(str, Enum):
    SCANNING = "scanning"
    CONVERTING = "converting"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class Size:
    """Pixel dimensions; both sides are at least one pixel."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise InvalidDimensionsError(
                f"Width/Height must be positive numbers (got {self.width}x{self.height})."
            )

    @property
    def pixels(self) -> int:
        return self.width * self.height

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(slots=True)
class FolderSizeSummary:
    total: int = 0
    all_same: bool = True
    base_size: Size | None = None
    unique_sizes: list[Size] = field(default_factory=list)

    @classmethod
    def from_sizes(cls, sizes: Iterable[Size]) -> "FolderSizeSummary":
        summary = cls()
        for size in sizes:
            summary.total += 1
            if summary.base_size is None:
                summary.base_size = size
            elif size != summary.base_size:
                summary.all_same = False
            if size not in summary.unique_sizes:
                summary.unique_sizes.append(size)
        return summary

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "all_same": self.all_same,
            "base_size": self.base_size.to_dict() if self.base_size else None,
            "unique_sizes": [size.to_dict() for size in self.unique_sizes],
        }


def _whole_pixels(value: object, label: str) -> int:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidDimensionsError(f"{label} must be a whole number of pixels (got {value!r}).") from exc
    if not number.is_integer():
        raise InvalidDimensionsError(f"{label} must be a whole number of pixels (got {value!r}).")
    return int(number)


@dataclass(frozen=True, slots=True)
class ConversionJob:
    """Caller input for one run. Never mutated once the run starts."""

    input_mode: InputMode
    sources: tuple[Path, ...]
    output_dir: Path | None = None
    size_mode: SizeMode = SizeMode.SCALE
    scale_factor: float | None = 1.0
    exact_size: tuple[int, int] | None = None
    crop_enabled: bool = False
    background: str | None = None

    @classmethod
    def create(
        cls,
        input_mode: InputMode | str,
        sources: Iterable[Path | str] | Path | str,
        *,
        output_dir: Path | str | None = None,
        size_mode: SizeMode | str = SizeMode.SCALE,
        scale_factor: float | None = None,
        width: int | None = None,
        height: int | None = None,
        crop: bool = False,
        background: str | None = None,
    ) -> "ConversionJob":
        if isinstance(sources, (str, Path)):
            sources = [sources]
        exact_size = None
        if width is not None and height is not None:
            exact_size = (_whole_pixels(width, "Width"), _whole_pixels(height, "Height"))
        return cls(
            input_mode=InputMode(input_mode),
            sources=tuple(Path(source) for source in sources),
            output_dir=Path(output_dir) if output_dir else None,
            size_mode=SizeMode(size_mode),
            scale_factor=1.0 if scale_factor is None else float(scale_factor),
            exact_size=exact_size,
            crop_enabled=bool(crop),
            background=background,
        )


@dataclass(slots=True)
class ConversionTask:
    source_path: Path
    intrinsic_size: Size
    target_size: Size
    crop_enabled: bool
    background: RGB | None
    destination_path: Path
    exact: bool = False


@dataclass(slots=True)
class ConversionResult:
    index: int
    total: int
    source_path: Path
    destination_path: Path
    ok: bool
    out_width: int | None = None
    out_height: int | None = None
    renderer_id: str | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def success(
        cls, index: int, total: int, task: ConversionTask, renderer_id: str
    ) -> "ConversionResult":
        return cls(
            index=index,
            total=total,
            source_path=task.source_path,
            destination_path=task.destination_path,
            ok=True,
            out_width=task.target_size.width,
            out_height=task.target_size.height,
            renderer_id=renderer_id,
        )

    @classmethod
    def failure(
        cls,
        index: int,
        total: int,
        source_path: Path,
        destination_path: Path,
        kind: ErrorKind,
        message: str,
        renderer_id: str | None = None,
    ) -> "ConversionResult":
        return cls(
            index=index,
            total=total,
            source_path=source_path,
            destination_path=destination_path,
            ok=False,
            renderer_id=renderer_id,
            error_kind=kind,
            error_message=message or kind.value,
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "index": self.index,
            "total": self.total,
            "source_path": str(self.source_path),
            "destination_path": str(self.destination_path),
            "out_width": self.out_width,
            "out_height": self.out_height,
            "ok": self.ok,
            "renderer_id": self.renderer_id,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error": self.error_message,
        }


@dataclass(frozen=True, slots=True)
class ProgressState:
    """Read-only snapshot of one run's counters."""

    phase: Phase
    total: int = 0
    current: int = 0
    active: int = 0
    ok: int = 0
    failed: int = 0
    last_source_path: Path | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "phase": self.phase.value,
            "total": self.total,
            "current": self.current,
            "active": self.active,
            "ok": self.ok,
            "failed": self.failed,
            "last_source_path": str(self.last_source_path) if self.last_source_path else None,
        }


@dataclass(slots=True)
class ConversionSummary:
    run_id: str
    total: int = 0
    ok: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    results: list[ConversionResult] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "total": self.total,
            "ok": self.ok,
            "failed": self.failed,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
        }


__all__ = [
    "RGB",
    "InputMode",
    "SizeMode",
    "Phase",
    "Size",
    "FolderSizeSummary",
    "ConversionJob",
    "ConversionTask",
    "ConversionResult",
    "ProgressState",
    "ConversionSummary",
]
