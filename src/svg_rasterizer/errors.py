"""Error codes and exception types raised by the conversion engine."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    INVALID_DIMENSIONS = "INVALID_DIMENSIONS"
    TOO_LARGE = "TOO_LARGE"
    RENDER_ERROR = "RENDER_ERROR"
    IO_ERROR = "IO_ERROR"
    JOB_ERROR = "JOB_ERROR"


class ConversionError(RuntimeError):
    def __init__(self, code: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": str(self)}


class NotFoundError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.NOT_FOUND, message)


class InvalidDocumentError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INVALID_DOCUMENT, message)


class InvalidDimensionsError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INVALID_DIMENSIONS, message)


class TooLargeError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.TOO_LARGE, message)


class RenderError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.RENDER_ERROR, message)


class OutputWriteError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.IO_ERROR, message)


class JobError(ConversionError):
    """Configuration problem detected before any task is dispatched."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.JOB_ERROR, message)


__all__ = [
    "ErrorKind",
    "ConversionError",
    "NotFoundError",
    "InvalidDocumentError",
    "InvalidDimensionsError",
    "TooLargeError",
    "RenderError",
    "OutputWriteError",
    "JobError",
]
