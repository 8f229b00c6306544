from __future__ import annotations

import pytest

from svg_rasterizer.errors import InvalidDimensionsError, TooLargeError
from svg_rasterizer.models import Size, SizeMode
from svg_rasterizer.planning import MAX_PIXELS, aspect_matches, plan_target_size


def test_scale_mode_multiplies_intrinsic_size() -> None:
    assert plan_target_size(SizeMode.SCALE, Size(100, 50), scale_factor=2) == Size(200, 100)


def test_scale_mode_rounds_half_up() -> None:
    assert plan_target_size("scale", Size(5, 3), scale_factor=0.5) == Size(3, 2)


def test_scale_mode_never_goes_below_one_pixel() -> None:
    assert plan_target_size("scale", Size(10, 10), scale_factor=0.01) == Size(1, 1)


@pytest.mark.parametrize("factor", [0, -1, float("nan"), "abc"])
def test_scale_mode_rejects_bad_factor(factor: object) -> None:
    with pytest.raises(InvalidDimensionsError):
        plan_target_size("scale", Size(10, 10), scale_factor=factor)  # type: ignore[arg-type]


def test_exact_mode_returns_requested_size() -> None:
    assert plan_target_size("exact", Size(100, 50), exact_size=(64, 64)) == Size(64, 64)


def test_exact_mode_requires_both_sides() -> None:
    with pytest.raises(InvalidDimensionsError):
        plan_target_size("exact", Size(100, 50))
    with pytest.raises(InvalidDimensionsError):
        plan_target_size("exact", Size(100, 50), exact_size=(0, 10))


def test_pixel_ceiling_is_enforced_with_message() -> None:
    with pytest.raises(TooLargeError) as excinfo:
        plan_target_size("scale", Size(1000, 1000), scale_factor=10)
    message = str(excinfo.value)
    assert "10000x10000" in message
    assert "80MP" in message


def test_pixel_ceiling_boundary() -> None:
    side = 8000
    assert side * (MAX_PIXELS // side) == MAX_PIXELS
    assert plan_target_size("exact", Size(1, 1), exact_size=(side, MAX_PIXELS // side)).pixels == MAX_PIXELS
    with pytest.raises(TooLargeError):
        plan_target_size("exact", Size(1, 1), exact_size=(side, MAX_PIXELS // side + 1))


def test_huge_scale_overflow_is_too_large() -> None:
    with pytest.raises(TooLargeError):
        plan_target_size("scale", Size(10, 10), scale_factor=1e308)


def test_aspect_matches_requires_exact_rounded_ratio() -> None:
    assert aspect_matches(100, 50, Size(200, 100))
    assert aspect_matches(100, 33, Size(200, 66))
    assert aspect_matches(10.5, 7, Size(3, 2))
    assert not aspect_matches(100, 33, Size(200, 67))
    assert not aspect_matches(100, 50, Size(100, 51))
    assert not aspect_matches(100, 50, Size(3, 1))
    assert not aspect_matches(100, 50, Size(100, 100))
