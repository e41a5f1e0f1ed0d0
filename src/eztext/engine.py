from __future__ import annotations

"""
Font rasterization engine seam.

The renderer only needs five capabilities from an engine: open a face from a
file, select its Unicode charmap, set a pixel size (reporting the resulting
size metrics), and load one glyph by code point. `FontEngine` names them so
tests can script an engine; `FreeTypeEngine` is the production one.

Metrics are kept in 26.6 fixed point, as FreeType reports them; the
`*_px` properties shift down to whole pixels.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import freetype

# FT_PIXEL_MODE_* values.
PIXEL_MODE_MONO = 1
PIXEL_MODE_GRAY = 2

# FT_Err_Unknown_File_Format
FT_ERR_UNKNOWN_FILE_FORMAT = 0x02


class EngineError(Exception):
    pass


class UnknownFontFormat(EngineError):
    pass


class MissingGlyph(EngineError):
    pass


@dataclass(frozen=True, slots=True)
class FaceMetrics:
    ascender: int
    descender: int
    height: int

    @classmethod
    def from_pixels(cls, ascender: int, descender: int, height: int) -> FaceMetrics:
        return cls(int(ascender) << 6, int(descender) << 6, int(height) << 6)

    @property
    def ascender_px(self) -> int:
        return self.ascender >> 6

    @property
    def descender_px(self) -> int:
        return self.descender >> 6

    @property
    def height_px(self) -> int:
        return self.height >> 6

    @property
    def extent_px(self) -> int:
        """Ascender plus descender depth, shifted to pixels after summing."""
        return (self.ascender + abs(self.descender)) >> 6


@dataclass(frozen=True, slots=True)
class Glyph:
    advance: int
    width: int = 0
    rows: int = 0
    pitch: int = 0
    left: int = 0
    top: int = 0
    pixel_mode: int = PIXEL_MODE_GRAY
    buffer: bytes = b""

    def coverage(self, row: int, col: int) -> int:
        return self.buffer[row * abs(self.pitch) + col]


class FontEngine(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def open_face(self, path: str | Path) -> Any: ...

    def select_unicode_charmap(self, face: Any) -> None: ...

    def set_pixel_size(self, face: Any, size: int) -> FaceMetrics: ...

    def load_glyph(self, face: Any, code_point: int, *, render: bool) -> Glyph: ...


def _ft_errcode(exc: BaseException) -> int | None:
    code = getattr(exc, "errcode", None)
    return int(code) if code is not None else None


class FreeTypeEngine:
    """`FontEngine` backed by FreeType through `freetype-py`."""

    def __init__(self) -> None:
        self._library: Any = None

    @property
    def started(self) -> bool:
        return self._library is not None

    def start(self) -> None:
        try:
            import freetype
        except (ImportError, RuntimeError, OSError) as exc:
            # freetype-py raises RuntimeError when the shared library is missing.
            raise EngineError(f"FreeType unavailable: {exc}") from exc
        try:
            self._library = freetype.get_handle()
        except freetype.FT_Exception as exc:
            raise EngineError(f"FT_Init_FreeType failed: {exc}") from exc

    def stop(self) -> None:
        """Forget the library handle.

        `freetype.get_handle()` returns one process-wide `FT_Library` that
        freetype-py creates on first use and frees at interpreter exit, so there
        is nothing to destroy here. Faces opened through this engine are
        released when the session drops its last reference to them.
        """
        self._library = None

    def open_face(self, path: str | Path) -> freetype.Face:
        import freetype

        try:
            return freetype.Face(str(path))
        except freetype.FT_Exception as exc:
            if _ft_errcode(exc) == FT_ERR_UNKNOWN_FILE_FORMAT:
                raise UnknownFontFormat(f"unknown file format: {path}") from exc
            raise EngineError(f"cannot open face {path}: {exc}") from exc
        except OSError as exc:
            raise EngineError(f"cannot open face {path}: {exc}") from exc

    def select_unicode_charmap(self, face: freetype.Face) -> None:
        import freetype

        try:
            face.select_charmap(freetype.FT_ENCODING_UNICODE)
        except freetype.FT_Exception as exc:
            raise EngineError(f"no unicode charmap: {exc}") from exc

    def set_pixel_size(self, face: freetype.Face, size: int) -> FaceMetrics:
        import freetype

        try:
            face.set_pixel_sizes(0, int(size))
        except freetype.FT_Exception as exc:
            raise EngineError(f"cannot set pixel size {size}: {exc}") from exc
        metrics = face.size
        return FaceMetrics(
            ascender=int(metrics.ascender),
            descender=int(metrics.descender),
            height=int(metrics.height),
        )

    def load_glyph(self, face: freetype.Face, code_point: int, *, render: bool) -> Glyph:
        import freetype

        if face.get_char_index(code_point) == 0:
            raise MissingGlyph(f"no glyph for U+{code_point:04X}")
        flags = freetype.FT_LOAD_RENDER if render else freetype.FT_LOAD_DEFAULT
        try:
            face.load_char(chr(code_point), flags)
        except freetype.FT_Exception as exc:
            raise EngineError(f"cannot load U+{code_point:04X}: {exc}") from exc
        slot = face.glyph
        advance = int(slot.advance.x) >> 6
        if not render:
            return Glyph(advance=advance)
        bitmap = slot.bitmap
        return Glyph(
            advance=advance,
            width=int(bitmap.width),
            rows=int(bitmap.rows),
            pitch=int(bitmap.pitch),
            left=int(slot.bitmap_left),
            top=int(slot.bitmap_top),
            pixel_mode=int(bitmap.pixel_mode),
            buffer=bytes(bitmap.buffer),
        )


__all__ = [
    "EngineError",
    "FaceMetrics",
    "FontEngine",
    "FreeTypeEngine",
    "Glyph",
    "MissingGlyph",
    "PIXEL_MODE_GRAY",
    "PIXEL_MODE_MONO",
    "UnknownFontFormat",
]
