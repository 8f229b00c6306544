from __future__ import annotations

from io import BytesIO
from typing import Callable

from PIL import Image

from ..errors import RenderError
from ..inspection import SvgDocument
from ..models import Size
from .base import ensure_size


class CairoSVGRenderer:
    """Renders through cairosvg, mapping the viewBox onto exactly the requested pixels.

    Callers pick sizes that either keep the source aspect or are meant to
    stretch, so the root is always written with ``preserveAspectRatio="none"``.
    """

    renderer_id = "cairosvg"

    def __init__(self, dpi: float = 96.0, svg2png: Callable[..., bytes] | None = None) -> None:
        if svg2png is None:
            try:
                import cairosvg
            except (ModuleNotFoundError, OSError) as exc:  # pragma: no cover - import guard
                raise RuntimeError(
                    "cairosvg and the native cairo library are required for the cairosvg renderer"
                ) from exc
            svg2png = cairosvg.svg2png
        self._svg2png = svg2png
        self._dpi = dpi

    def render(self, document: SvgDocument, size: Size) -> Image.Image:
        markup = document.to_markup(size.width, size.height, stretch=True)
        try:
            png = self._svg2png(bytestring=markup, url=str(document.path), dpi=self._dpi)
            image = Image.open(BytesIO(png))
            image.load()
        except Exception as exc:
            raise RenderError(f"{document.path.name}: {exc}") from exc
        return ensure_size(image, size)
