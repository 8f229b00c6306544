"""Intrinsic size discovery for SVG documents and folders."""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .errors import InvalidDocumentError, NotFoundError
from .models import FolderSizeSummary, Size


SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
SVG_EXTENSIONS: tuple[str, ...] = (".svg",)

DEFAULT_WIDTH = 100.0
DEFAULT_HEIGHT = 100.0

LENGTH_RE = re.compile(
    r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*([A-Za-z]*|%)\s*$"
)
VIEW_BOX_SEPARATOR_RE = re.compile(r"[\s,]+")

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


ViewBox = tuple[float, float, float, float]


@dataclass(slots=True)
class SvgDocument:
    """A parsed document plus its resolved intrinsic dimensions in user units."""

    path: Path
    root: ET.Element
    width: float
    height: float
    view_box: ViewBox | None

    @property
    def size(self) -> Size:
        return Size(max(1, math.ceil(self.width)), max(1, math.ceil(self.height)))

    def to_markup(self, width: int, height: int, *, stretch: bool = False) -> bytes:
        """Serialize the document with its outermost viewport set to *width* x *height*.

        The original tree is left untouched so the same document can be
        rendered more than once.
        """
        root = ET.Element(self.root.tag, dict(self.root.attrib))
        root.text = self.root.text
        root.extend(list(self.root))
        root.set("width", str(width))
        root.set("height", str(height))
        if self.view_box is None:
            root.set("viewBox", f"0 0 {_format_number(self.width)} {_format_number(self.height)}")
        if stretch:
            root.set("preserveAspectRatio", "none")
        return ET.tostring(root, encoding="utf-8")


def _format_number(value: float) -> str:
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def is_svg(path: Path, extensions: Iterable[str] = SVG_EXTENSIONS) -> bool:
    return path.suffix.lower() in tuple(ext.lower() for ext in extensions)


def parse_length(value: str | None, attribute: str) -> float | None:
    """Parse a width/height attribute; returns None when it carries no intrinsic size."""
    if value is None or not value.strip():
        return None
    match = LENGTH_RE.match(value)
    if not match:
        raise InvalidDocumentError(f"Invalid {attribute} attribute: {value!r}")
    number, unit = match.groups()
    if unit == "%":
        return None
    length = float(number)
    if not math.isfinite(length) or length <= 0:
        raise InvalidDocumentError(f"Non-positive {attribute} attribute: {value!r}")
    return length


def parse_view_box(value: str | None) -> ViewBox | None:
    if value is None or not value.strip():
        return None
    parts = [part for part in VIEW_BOX_SEPARATOR_RE.split(value.strip()) if part]
    if len(parts) != 4:
        raise InvalidDocumentError(f"Invalid viewBox attribute: {value!r}")
    try:
        min_x, min_y, width, height = (float(part) for part in parts)
    except ValueError as exc:
        raise InvalidDocumentError(f"Invalid viewBox attribute: {value!r}") from exc
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise InvalidDocumentError(f"Non-positive viewBox size: {value!r}")
    return (min_x, min_y, width, height)


def _resolve_dimensions(
    width: float | None, height: float | None, view_box: ViewBox | None
) -> tuple[float, float]:
    if width is not None and height is not None:
        return width, height
    if width is not None:
        if view_box:
            return width, width * view_box[3] / view_box[2]
        return width, DEFAULT_HEIGHT
    if height is not None:
        if view_box:
            return height * view_box[2] / view_box[3], height
        return DEFAULT_WIDTH, height
    if view_box:
        return view_box[2], view_box[3]
    return DEFAULT_WIDTH, DEFAULT_HEIGHT


def parse_document(data: bytes, path: Path) -> SvgDocument:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise InvalidDocumentError(f"{path.name}: {exc}") from exc
    if _local_name(root.tag) != "svg":
        raise InvalidDocumentError(
            f"{path.name}: root element is <{_local_name(root.tag)}>, expected <svg>"
        )
    view_box = parse_view_box(root.get("viewBox"))
    width, height = _resolve_dimensions(
        parse_length(root.get("width"), "width"),
        parse_length(root.get("height"), "height"),
        view_box,
    )
    if width <= 0 or height <= 0:
        raise InvalidDocumentError(f"{path.name}: computed size is not positive")
    return SvgDocument(path=path, root=root, width=width, height=height, view_box=view_box)


def load_document(path: Path) -> SvgDocument:
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Source file does not exist: {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise NotFoundError(f"Cannot read {path}: {exc}") from exc
    return parse_document(data, path)


def inspect_document(path: Path) -> Size:
    return load_document(path).size


class DocumentFolder:
    """Restartable, non-recursive sequence of the vector documents in a directory."""

    def __init__(self, directory: Path, extensions: Iterable[str] = SVG_EXTENSIONS) -> None:
        self.directory = Path(directory)
        self.extensions = tuple(ext.lower() for ext in extensions)
        if not self.directory.is_dir():
            raise NotFoundError(f"Invalid folder path: {directory}")

    def __iter__(self) -> Iterator[Path]:
        for entry in sorted(self.directory.iterdir()):
            if entry.is_file() and is_svg(entry, self.extensions):
                yield entry

    def count(self) -> int:
        return sum(1 for _ in self)

    def sizes(self) -> Iterator[tuple[Path, Size]]:
        """Yield ``(path, size)`` for every entry that inspects cleanly; bad entries are skipped."""
        for path in self:
            try:
                size = inspect_document(path)
            except (NotFoundError, InvalidDocumentError):
                continue
            yield path, size


def scan_folder(directory: Path, extensions: Iterable[str] = SVG_EXTENSIONS) -> FolderSizeSummary:
    folder = DocumentFolder(directory, extensions)
    return FolderSizeSummary.from_sizes(size for _, size in folder.sizes())


def count_documents(directory: Path, extensions: Iterable[str] = SVG_EXTENSIONS) -> int:
    return DocumentFolder(directory, extensions).count()


__all__ = [
    "SVG_EXTENSIONS",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "SvgDocument",
    "DocumentFolder",
    "is_svg",
    "parse_length",
    "parse_view_box",
    "parse_document",
    "load_document",
    "inspect_document",
    "scan_folder",
    "count_documents",
]
