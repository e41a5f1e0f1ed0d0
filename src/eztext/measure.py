from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .debug_log import code_point, render_debug_log
from .engine import EngineError, FontEngine, Glyph
from .session import FontSession


def iter_glyphs(engine: FontEngine, face: Any, text: str, *, render: bool) -> Iterator[tuple[str, Glyph]]:
    """Yield `(char, glyph)` for every character the engine can load; others are skipped."""
    for char in text:
        try:
            glyph = engine.load_glyph(face, ord(char), render=render)
        except EngineError as exc:
            render_debug_log("glyph_skip", reason="load_error", code_point=code_point(char), error=exc)
            continue
        yield char, glyph


def compute_text_width(session: FontSession, text: str) -> int:
    """Return the summed advance of `text` in whole pixels.

    The last glyph's bitmap overhang past its advance is not counted.
    """
    face, _metrics = session.require_face()
    width = 0
    for _char, glyph in iter_glyphs(session.engine, face, text, render=False):
        width += glyph.advance
    return width


__all__ = [
    "compute_text_width",
    "iter_glyphs",
]
