from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from svg_rasterizer.compositing import (
    center_crop,
    cover_size,
    flatten,
    parse_background,
    render_to_target,
)
from svg_rasterizer.errors import JobError, TooLargeError
from svg_rasterizer.inspection import load_document
from svg_rasterizer.models import ConversionTask, Size

GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def make_task(document_path: Path, target: Size, *, exact: bool, crop: bool) -> ConversionTask:
    return ConversionTask(
        source_path=document_path,
        intrinsic_size=Size(100, 50),
        target_size=target,
        crop_enabled=crop,
        background=None,
        destination_path=document_path.with_suffix(".png"),
        exact=exact,
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [("#FF0000", (255, 0, 0)), ("00ff7f", (0, 255, 127)), ("", None), (None, None), ("  ", None)],
)
def test_parse_background(value: str | None, expected: tuple[int, int, int] | None) -> None:
    assert parse_background(value) == expected


@pytest.mark.parametrize("value", ["red", "#FFF", "#GG0000", "#FF00001"])
def test_parse_background_rejects_invalid(value: str) -> None:
    with pytest.raises(JobError):
        parse_background(value)


def test_cover_size_fills_target() -> None:
    assert cover_size(100, 50, Size(100, 100)) == Size(200, 100)
    assert cover_size(50, 100, Size(100, 100)) == Size(100, 200)
    assert cover_size(3, 2, Size(10, 10)) == Size(15, 10)


def test_center_crop_is_symmetric() -> None:
    image = Image.new("RGBA", (200, 100), (0, 0, 0, 255))
    cropped = center_crop(image, Size(100, 100))
    assert cropped.size == (100, 100)
    assert center_crop(Image.new("RGBA", (11, 4)), Size(10, 4)).size == (10, 4)


def test_crop_renders_cover_and_trims_center(write_svg, renderer) -> None:
    document = load_document(write_svg("wide.svg", 100, 50))
    task = make_task(document.path, Size(100, 100), exact=True, crop=True)
    image = render_to_target(renderer, document, task)
    assert image.size == (100, 100)
    assert renderer.calls == [("wide.svg", Size(200, 100))]
    assert image.getpixel((0, 50)) == GREEN
    assert image.getpixel((49, 50)) == GREEN
    assert image.getpixel((50, 50)) == BLUE
    assert image.getpixel((99, 50)) == BLUE


def test_without_crop_renders_stretched_at_target(write_svg, renderer) -> None:
    document = load_document(write_svg("wide.svg", 100, 50))
    task = make_task(document.path, Size(100, 100), exact=True, crop=False)
    image = render_to_target(renderer, document, task)
    assert image.size == (100, 100)
    assert renderer.calls == [("wide.svg", Size(100, 100))]


def test_matching_aspect_skips_crop(write_svg, renderer) -> None:
    document = load_document(write_svg("wide.svg", 100, 50))
    task = make_task(document.path, Size(200, 100), exact=True, crop=True)
    render_to_target(renderer, document, task)
    assert renderer.calls == [("wide.svg", Size(200, 100))]


def test_cover_size_respects_pixel_ceiling(write_svg, renderer) -> None:
    document = load_document(write_svg("tall.svg", 1, 1000))
    task = make_task(document.path, Size(8000, 10), exact=True, crop=True)
    with pytest.raises(TooLargeError):
        render_to_target(renderer, document, task)
    assert renderer.calls == []


def test_flatten_composites_onto_background() -> None:
    image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
    image.putpixel((0, 0), (0, 0, 255, 255))
    flat = flatten(image, (255, 0, 0))
    assert flat.mode == "RGB"
    assert flat.getpixel((1, 1)) == (255, 0, 0)
    assert flat.getpixel((0, 0)) == (0, 0, 255)


def test_flatten_without_background_keeps_alpha() -> None:
    image = Image.new("RGBA", (2, 2), (0, 0, 0, 0))
    assert flatten(image, None).mode == "RGBA"


def test_one_pixel_aspect_difference_is_still_cropped(write_svg, renderer) -> None:
    document = load_document(write_svg("wide.svg", 100, 50))
    task = make_task(document.path, Size(100, 51), exact=True, crop=True)
    image = render_to_target(renderer, document, task)
    assert renderer.calls == [("wide.svg", Size(102, 51))]
    assert image.size == (100, 51)
    assert image.getpixel((0, 0))[3] == 255
    assert image.getpixel((99, 50))[3] == 255


def test_small_mismatched_target_is_reconciled(write_svg, renderer) -> None:
    document = load_document(write_svg("wide.svg", 100, 50))
    cropped = render_to_target(renderer, document, make_task(document.path, Size(3, 1), exact=True, crop=True))
    assert renderer.calls == [("wide.svg", Size(3, 2))]
    assert cropped.size == (3, 1)

    renderer.calls.clear()
    stretched = render_to_target(renderer, document, make_task(document.path, Size(3, 1), exact=True, crop=False))
    assert renderer.calls == [("wide.svg", Size(3, 1))]
    assert stretched.size == (3, 1)
