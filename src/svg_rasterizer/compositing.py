"""Aspect reconciliation and background flattening."""

from __future__ import annotations

import math
import re

from PIL import Image

from .errors import JobError
from .inspection import SvgDocument
from .models import RGB, ConversionTask, Size
from .planning import aspect_matches, enforce_pixel_ceiling
from .renderers import Renderer


HEX_COLOR_RE = re.compile(r"#?([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})")


def parse_background(value: str | None) -> RGB | None:
    """Parse ``#RRGGBB`` (leading ``#`` optional); blank means no background."""
    if value is None or not value.strip():
        return None
    match = HEX_COLOR_RE.fullmatch(value.strip())
    if not match:
        raise JobError("Invalid background color (expected #RRGGBB).")
    red, green, blue = (int(part, 16) for part in match.groups())
    return (red, green, blue)


def cover_size(source_width: float, source_height: float, target: Size) -> Size:
    """Smallest aspect-preserving size that fully covers *target*."""
    scale = max(target.width / source_width, target.height / source_height)
    return Size(
        max(target.width, math.ceil(source_width * scale - 1e-6)),
        max(target.height, math.ceil(source_height * scale - 1e-6)),
    )


def center_crop(image: Image.Image, target: Size) -> Image.Image:
    left = (image.width - target.width) // 2
    top = (image.height - target.height) // 2
    return image.crop((left, top, left + target.width, top + target.height))


def render_to_target(renderer: Renderer, document: SvgDocument, task: ConversionTask) -> Image.Image:
    """Render *document* at the task's target size.

    Only exact-mode tasks whose target differs from the source aspect are
    reconciled: with cropping enabled the document is rendered to cover the
    target and trimmed evenly; otherwise it is rendered stretched.
    """
    target = task.target_size
    if not task.exact or aspect_matches(document.width, document.height, target):
        return renderer.render(document, target)
    if task.crop_enabled:
        cover = cover_size(document.width, document.height, target)
        enforce_pixel_ceiling(cover)
        return center_crop(renderer.render(document, cover), target)
    return renderer.render(document, target)


def flatten(image: Image.Image, background: RGB | None) -> Image.Image:
    if background is None:
        return image
    canvas = Image.new("RGBA", image.size, (*background, 255))
    canvas.alpha_composite(image.convert("RGBA"))
    return canvas.convert("RGB")


__all__ = [
    "parse_background",
    "cover_size",
    "center_crop",
    "render_to_target",
    "flatten",
]
