from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .debug_log import render_debug_log
from .engine import EngineError, FaceMetrics, FontEngine, FreeTypeEngine, UnknownFontFormat
from .errors import (
    ErrorOpeningFont,
    FontNotSet,
    FontNotUnicode,
    InitializationFailed,
    NotInitialized,
    UnableToSetSize,
    UnsupportedFontFormat,
)


def fits_height(metrics: FaceMetrics, height: int) -> bool:
    return height >= metrics.extent_px and height >= metrics.height_px


@dataclass(slots=True)
class FontSession:
    """Engine handle plus the single active face.

    Not thread-safe: callers serialize access to a session.
    """

    engine: FontEngine = field(default_factory=FreeTypeEngine)
    initialized: bool = False
    face: Any = None
    font_set: bool = False
    font_path: Path | None = None
    pixel_size: int = 0
    metrics: FaceMetrics | None = None

    def __enter__(self) -> FontSession:
        self.init()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.release()

    def init(self) -> None:
        if self.initialized:
            return
        try:
            self.engine.start()
        except EngineError as exc:
            raise InitializationFailed() from exc
        self.initialized = True
        render_debug_log("session_init", engine=type(self.engine).__name__)

    def release(self) -> None:
        if not self.initialized:
            return
        self._drop_face()
        self.engine.stop()
        self.initialized = False
        render_debug_log("session_release")

    def set_font(self, path: str | Path, height: int) -> None:
        if not self.initialized:
            raise NotInitialized()
        self._drop_face()

        try:
            face = self.engine.open_face(path)
        except UnknownFontFormat as exc:
            raise UnsupportedFontFormat(f"Unsupported font format: {path}") from exc
        except EngineError as exc:
            raise ErrorOpeningFont(f"Error opening font: {path}") from exc
        render_debug_log("font_open", path=path)

        try:
            self.engine.select_unicode_charmap(face)
        except EngineError as exc:
            raise FontNotUnicode() from exc

        size, metrics = fit_pixel_size(self.engine, face, int(height))

        self.face = face
        self.font_path = Path(path)
        self.pixel_size = size
        self.metrics = metrics
        self.font_set = True

    def require_face(self) -> tuple[Any, FaceMetrics]:
        if not self.initialized:
            raise NotInitialized()
        if not self.font_set or self.metrics is None:
            raise FontNotSet()
        return self.face, self.metrics

    def _drop_face(self) -> None:
        self.face = None
        self.font_set = False
        self.font_path = None
        self.pixel_size = 0
        self.metrics = None


def fit_pixel_size(engine: FontEngine, face: Any, height: int) -> tuple[int, FaceMetrics]:
    """Largest pixel size, counting down from `height`, whose metrics fit in `height`.

    Engines may report a nominal size smaller than the extents they actually
    render, so every candidate is checked against the ascender + descender
    span and the line height.
    """
    trial = height
    while trial > 0:
        try:
            metrics = engine.set_pixel_size(face, trial)
        except EngineError as exc:
            raise UnableToSetSize(f"Unable to set font size {trial}") from exc
        render_debug_log(
            "size_fit_try",
            trial=trial,
            ascender=metrics.ascender_px,
            descender=metrics.descender_px,
            line_height=metrics.height_px,
        )
        if fits_height(metrics, height):
            render_debug_log("size_fit_done", requested=height, size=trial)
            return trial, metrics
        trial -= 1
    raise UnableToSetSize(f"No pixel size fits height {height}")


__all__ = [
    "FontSession",
    "fit_pixel_size",
    "fits_height",
]
