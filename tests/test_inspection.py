from __future__ import annotations

from pathlib import Path

import pytest

from svg_rasterizer.errors import InvalidDocumentError, NotFoundError
from svg_rasterizer.inspection import (
    DocumentFolder,
    count_documents,
    inspect_document,
    load_document,
    parse_length,
    parse_view_box,
    scan_folder,
)
from svg_rasterizer.models import Size


def test_inspect_reads_width_and_height(write_svg) -> None:
    path = write_svg("a.svg", 100, 50)
    assert inspect_document(path) == Size(100, 50)


def test_inspect_rounds_fractional_sizes_up(write_svg) -> None:
    path = write_svg("a.svg", "10.2", "4.0001")
    assert inspect_document(path) == Size(11, 5)


def test_inspect_strips_units(write_svg) -> None:
    path = write_svg("a.svg", "64px", "32pt")
    assert inspect_document(path) == Size(64, 32)


def test_inspect_falls_back_to_view_box(write_svg) -> None:
    path = write_svg("a.svg", None, None, attrs='viewBox="0 0 300 150"')
    assert inspect_document(path) == Size(300, 150)


def test_inspect_derives_missing_side_from_view_box(write_svg) -> None:
    path = write_svg("a.svg", 200, None, attrs='viewBox="0,0,100,25"')
    assert inspect_document(path) == Size(200, 50)


def test_percentages_count_as_absent(write_svg) -> None:
    path = write_svg("a.svg", "100%", "100%", attrs='viewBox="0 0 40 20"')
    assert inspect_document(path) == Size(40, 20)


def test_inspect_uses_default_without_any_size(write_svg) -> None:
    path = write_svg("a.svg", None, None)
    assert inspect_document(path) == Size(100, 100)


def test_inspect_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        inspect_document(tmp_path / "missing.svg")


def test_inspect_rejects_malformed_markup(tmp_path: Path) -> None:
    path = tmp_path / "broken.svg"
    path.write_text("<svg xmlns='http://www.w3.org/2000/svg'", encoding="utf-8")
    with pytest.raises(InvalidDocumentError):
        inspect_document(path)


def test_inspect_rejects_non_svg_root(tmp_path: Path) -> None:
    path = tmp_path / "page.svg"
    path.write_text("<html><body/></html>", encoding="utf-8")
    with pytest.raises(InvalidDocumentError):
        inspect_document(path)


@pytest.mark.parametrize("value", ["abc", "-4", "0"])
def test_parse_length_rejects_bad_values(value: str) -> None:
    with pytest.raises(InvalidDocumentError):
        parse_length(value, "width")


def test_parse_view_box_requires_four_numbers() -> None:
    assert parse_view_box("0 0 10 20") == (0.0, 0.0, 10.0, 20.0)
    with pytest.raises(InvalidDocumentError):
        parse_view_box("0 0 10")


def test_to_markup_sets_viewport_without_touching_original(write_svg) -> None:
    document = load_document(write_svg("a.svg", 100, 50))
    markup = document.to_markup(200, 100, stretch=True).decode("utf-8")
    assert 'width="200"' in markup
    assert 'height="100"' in markup
    assert 'viewBox="0 0 100 50"' in markup
    assert 'preserveAspectRatio="none"' in markup
    assert document.root.get("width") == "100"
    assert document.root.get("viewBox") is None


def test_folder_is_sorted_and_non_recursive(tmp_path: Path, write_svg) -> None:
    folder = tmp_path / "in"
    write_svg("b.svg")
    write_svg("a.SVG")
    write_svg("nested.svg", directory=folder / "sub")
    (folder / "notes.txt").write_text("skip", encoding="utf-8")
    names = [path.name for path in DocumentFolder(folder)]
    assert names == ["a.SVG", "b.svg"]
    assert count_documents(folder) == 2


def test_scan_folder_reports_unique_sizes(tmp_path: Path, write_svg) -> None:
    write_svg("a.svg", 100, 50)
    write_svg("b.svg", 100, 50)
    write_svg("c.svg", 30, 30)
    (tmp_path / "in" / "d.svg").write_text("not svg", encoding="utf-8")
    summary = scan_folder(tmp_path / "in")
    assert summary.total == 3
    assert summary.all_same is False
    assert summary.base_size == Size(100, 50)
    assert summary.unique_sizes == [Size(100, 50), Size(30, 30)]


def test_scan_folder_all_same(tmp_path: Path, write_svg) -> None:
    write_svg("a.svg", 10, 10)
    write_svg("b.svg", 10, 10)
    summary = scan_folder(tmp_path / "in")
    assert summary.all_same is True
    assert summary.to_dict()["base_size"] == {"width": 10, "height": 10}


def test_scan_folder_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        scan_folder(tmp_path / "nope")
