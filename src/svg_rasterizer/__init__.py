"""Batch SVG to PNG rasterizer."""

from .config import AppConfig, load_config
from .core import ConversionService
from .errors import ConversionError, ErrorKind
from .models import ConversionJob, ConversionResult, ConversionSummary, Size

__all__ = [
    "AppConfig",
    "load_config",
    "ConversionError",
    "ConversionJob",
    "ConversionResult",
    "ConversionService",
    "ConversionSummary",
    "ErrorKind",
    "Size",
]
