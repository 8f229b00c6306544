from __future__ import annotations

from pathlib import Path

import pytest

from svg_rasterizer.errors import InvalidDimensionsError
from svg_rasterizer.models import ConversionJob, InputMode, SizeMode


def test_create_normalises_caller_input() -> None:
    job = ConversionJob.create("file", "a.svg", size_mode="exact", width=64, height=32.0)
    assert job.input_mode is InputMode.FILE
    assert job.sources == (Path("a.svg"),)
    assert job.size_mode is SizeMode.EXACT
    assert job.exact_size == (64, 32)


@pytest.mark.parametrize(("width", "height"), [(100.7, 50), (100, "50.5"), ("wide", 50), (float("inf"), 50)])
def test_create_rejects_fractional_exact_sizes(width: object, height: object) -> None:
    with pytest.raises(InvalidDimensionsError):
        ConversionJob.create("file", ["a.svg"], size_mode="exact", width=width, height=height)  # type: ignore[arg-type]
