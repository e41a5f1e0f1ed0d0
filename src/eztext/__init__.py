from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ez-text-renderer")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .buffer import PixelBuffer
from .color import Color, blend, pack, unpack
from .compositor import render_text, render_text_to_buffer
from .engine import FaceMetrics, FontEngine, FreeTypeEngine, Glyph
from .errors import ErrorCode, TextRenderError
from .measure import compute_text_width
from .ppm import dump_image
from .session import FontSession

__all__ = [
    "Color",
    "ErrorCode",
    "FaceMetrics",
    "FontEngine",
    "FontSession",
    "FreeTypeEngine",
    "Glyph",
    "PixelBuffer",
    "TextRenderError",
    "blend",
    "compute_text_width",
    "dump_image",
    "pack",
    "render_text",
    "render_text_to_buffer",
    "unpack",
]
