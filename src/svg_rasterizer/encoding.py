from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image

from .errors import OutputWriteError
from .utils import atomic_write_bytes


RASTER_EXTENSION = ".png"


def destination_for(source: Path, output_dir: Path | None = None) -> Path:
    """Same base name with the raster extension, beside the source unless *output_dir* is set."""
    directory = output_dir if output_dir is not None else source.parent
    return directory / f"{source.stem}{RASTER_EXTENSION}"


def encode_png(image: Image.Image) -> bytes:
    """8 bits per channel; RGBA keeps its alpha channel, RGB has none."""
    if image.mode not in {"RGB", "RGBA"}:
        image = image.convert("RGBA")
    buffer = BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise OutputWriteError(f"PNG encoding failed: {exc}") from exc
    return buffer.getvalue()


def persist(path: Path, data: bytes) -> int:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_bytes(path, data)
    except OSError as exc:
        raise OutputWriteError(f"Cannot write {path}: {exc}") from exc
    return len(data)


__all__ = ["RASTER_EXTENSION", "destination_for", "encode_png", "persist"]
