from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..models import ConversionJob


class PathRequest(BaseModel):
    path: str


class SizePayload(BaseModel):
    width: int
    height: int


class FolderSizePayload(BaseModel):
    total: int
    all_same: bool
    base_size: SizePayload | None = None
    unique_sizes: list[SizePayload] = Field(default_factory=list)


class CountPayload(BaseModel):
    total: int


class ConvertRequest(BaseModel):
    input_mode: Literal["file", "folder"] = "file"
    input_path: str | None = None
    input_paths: list[str] | None = None
    output_dir: str | None = None
    size_mode: Literal["scale", "exact"] = "scale"
    scale: float | None = None
    width: int | None = None
    height: int | None = None
    crop: bool = False
    background: str | None = None
    workers: int | None = Field(default=None, ge=1, le=64)

    def to_job(self) -> ConversionJob:
        sources = list(self.input_paths or [])
        if not sources and self.input_path:
            sources = [self.input_path]
        return ConversionJob.create(
            self.input_mode,
            sources,
            output_dir=self.output_dir,
            size_mode=self.size_mode,
            scale_factor=self.scale,
            width=self.width,
            height=self.height,
            crop=self.crop,
            background=self.background,
        )


__all__ = [
    "PathRequest",
    "SizePayload",
    "FolderSizePayload",
    "CountPayload",
    "ConvertRequest",
]
