from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from svg_rasterizer.config import AppConfig, RuntimeConfig
from svg_rasterizer.core import ConversionService
from svg_rasterizer.errors import RenderError
from svg_rasterizer.inspection import SvgDocument
from svg_rasterizer.models import Size

GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def _cairo_available() -> bool:
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


requires_cairo = pytest.mark.skipif(not _cairo_available(), reason="cairosvg/libcairo not installed")


class FakeRenderer:
    """Paints the left half green and the right half blue at the requested size.

    ``data-fail`` on the root raises a render error; ``data-transparent``
    yields a fully transparent image.
    """

    renderer_id = "fake"

    def __init__(self) -> None:
        self.calls: list[tuple[str, Size]] = []
        self._lock = threading.Lock()

    def render(self, document: SvgDocument, size: Size) -> Image.Image:
        with self._lock:
            self.calls.append((document.path.name, size))
        if document.root.get("data-fail") is not None:
            raise RenderError(f"{document.path.name}: cannot draw")
        if document.root.get("data-transparent") is not None:
            return Image.new("RGBA", (size.width, size.height), (0, 0, 0, 0))
        image = Image.new("RGBA", (size.width, size.height), BLUE)
        half = size.width // 2
        if half:
            image.paste(GREEN, (0, 0, half, size.height))
        return image


def svg_markup(width: object = 100, height: object = 50, *, attrs: str = "", body: str = "") -> str:
    parts = ['<svg xmlns="http://www.w3.org/2000/svg"']
    if width is not None:
        parts.append(f'width="{width}"')
    if height is not None:
        parts.append(f'height="{height}"')
    if attrs:
        parts.append(attrs)
    return " ".join(parts) + f">{body}</svg>"


@pytest.fixture
def write_svg(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        name: str,
        width: object = 100,
        height: object = 50,
        *,
        directory: Path | None = None,
        **kwargs: str,
    ) -> Path:
        target = (directory or tmp_path / "in") / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(svg_markup(width, height, **kwargs), encoding="utf-8")
        return target

    return _write


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    runtime = RuntimeConfig(log_dir=tmp_path / "runs", enable_local_api=True)
    runtime.batch.worker_pool_size = 2
    return AppConfig(runtime=runtime)


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def service(config: AppConfig, renderer: FakeRenderer) -> ConversionService:
    return ConversionService(config, renderer=renderer)
