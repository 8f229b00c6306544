from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from svg_rasterizer.encoding import destination_for, encode_png, persist
from svg_rasterizer.errors import OutputWriteError


def test_destination_beside_source() -> None:
    assert destination_for(Path("/in/logo.svg")) == Path("/in/logo.png")


def test_destination_in_output_dir() -> None:
    assert destination_for(Path("/in/icon.final.svg"), Path("/out")) == Path("/out/icon.final.png")


def test_encode_png_keeps_alpha() -> None:
    data = encode_png(Image.new("RGBA", (3, 2), (10, 20, 30, 40)))
    decoded = Image.open(BytesIO(data))
    assert decoded.format == "PNG"
    assert decoded.mode == "RGBA"
    assert decoded.size == (3, 2)
    assert decoded.getpixel((0, 0)) == (10, 20, 30, 40)


def test_encode_png_rgb_has_no_alpha() -> None:
    decoded = Image.open(BytesIO(encode_png(Image.new("RGB", (1, 1), (255, 0, 0)))))
    assert decoded.mode == "RGB"


def test_persist_creates_parent_and_overwrites(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "a.png"
    assert persist(target, b"first") == 5
    persist(target, b"second")
    assert target.read_bytes() == b"second"


def test_persist_reports_io_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    with pytest.raises(OutputWriteError) as excinfo:
        persist(blocker / "a.png", b"data")
    assert excinfo.value.code.value == "IO_ERROR"
