"""Target raster size planning."""

from __future__ import annotations

import math

from .errors import InvalidDimensionsError, TooLargeError
from .models import Size, SizeMode


MAX_PIXELS = 80_000_000


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aspect_matches(source_width: float, source_height: float, target: Size) -> bool:
    """True when one side of *target* is exactly the other side scaled by the source aspect."""
    height_from_width = max(1, _round_half_up(target.width * source_height / source_width))
    width_from_height = max(1, _round_half_up(target.height * source_width / source_height))
    return height_from_width == target.height or width_from_height == target.width


def enforce_pixel_ceiling(size: Size, max_pixels: int = MAX_PIXELS) -> None:
    if size.pixels > max_pixels:
        side = math.isqrt(max_pixels)
        raise TooLargeError(
            f"Too large ({size}). Max is ~{side}×{side} ({max_pixels / 1_000_000:.0f}MP)."
        )


def _coerce_exact(exact_size: Size | tuple[int, int] | None) -> Size:
    if exact_size is None:
        raise InvalidDimensionsError("Width and height are required in exact mode.")
    if isinstance(exact_size, Size):
        return exact_size
    width, height = exact_size
    if width is None or height is None:
        raise InvalidDimensionsError("Width and height are required in exact mode.")
    return Size(int(width), int(height))


def plan_target_size(
    size_mode: SizeMode | str,
    intrinsic: Size,
    *,
    scale_factor: float | None = None,
    exact_size: Size | tuple[int, int] | None = None,
) -> Size:
    """Return the validated raster size for one document.

    Scale mode multiplies the intrinsic size; exact mode returns *exact_size*
    as given, leaving aspect reconciliation to the compositor.
    """
    mode = SizeMode(size_mode)
    if mode is SizeMode.SCALE:
        try:
            factor = 1.0 if scale_factor is None else float(scale_factor)
        except (TypeError, ValueError) as exc:
            raise InvalidDimensionsError("Scale must be a positive number.") from exc
        if not math.isfinite(factor) or factor <= 0:
            raise InvalidDimensionsError("Scale must be a positive number.")
        width = intrinsic.width * factor
        height = intrinsic.height * factor
        if not math.isfinite(width * height):
            raise TooLargeError(f"Too large: scale {factor} overflows {intrinsic}.")
        target = Size(max(1, _round_half_up(width)), max(1, _round_half_up(height)))
    else:
        target = _coerce_exact(exact_size)
    enforce_pixel_ceiling(target)
    return target


__all__ = ["MAX_PIXELS", "aspect_matches", "enforce_pixel_ceiling", "plan_target_size"]
