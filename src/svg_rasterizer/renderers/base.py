from __future__ import annotations

from typing import Protocol

from PIL import Image

from ..inspection import SvgDocument
from ..models import Size


class Renderer(Protocol):
    """Turns a parsed document into an RGBA image of exactly the requested size.

    Output uses straight alpha over a transparent background. Anything the
    backend cannot draw is reported as ``RenderError``.
    """

    renderer_id: str

    def render(self, document: SvgDocument, size: Size) -> Image.Image:  # pragma: no cover - interface
        ...


def ensure_size(image: Image.Image, size: Size) -> Image.Image:
    image = image.convert("RGBA")
    if image.size != (size.width, size.height):
        image = image.resize((size.width, size.height), Image.Resampling.LANCZOS)
    return image
