from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict

from .base import Renderer, ensure_size


def _cairosvg(dpi: float) -> Renderer:
    from .cairo import CairoSVGRenderer

    return CairoSVGRenderer(dpi=dpi)


_RENDERER_FACTORIES: Dict[str, Callable[[float], Renderer]] = {
    "cairosvg": _cairosvg,
}


@lru_cache(maxsize=8)
def get_renderer(name: str = "cairosvg", dpi: float = 96.0) -> Renderer:
    factory = _RENDERER_FACTORIES.get(name)
    if not factory:
        raise KeyError(f"No renderer registered for {name!r}")
    return factory(dpi)


def available_renderers() -> list[str]:
    return sorted(_RENDERER_FACTORIES)


__all__ = [
    "Renderer",
    "available_renderers",
    "ensure_size",
    "get_renderer",
]
