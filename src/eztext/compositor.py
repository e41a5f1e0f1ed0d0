from __future__ import annotations

"""
Two-stage text compositor.

Glyph coverage is first painted into an off-screen rectangle pre-filled with
the background color: coverage mixes the front color against the background,
then the mix is laid over whatever the rectangle already holds (overlapping
glyphs). The finished rectangle is then laid over the destination with
straight (non-premultiplied) alpha, clipped to the destination bounds.

Byte order everywhere is B,G,R,A (see `eztext.buffer`).
"""

from .buffer import BYTES_PER_PIXEL, PixelBuffer
from .color import CHANNEL_MAX, TRANSPARENT, Color, blend
from .debug_log import code_point, render_debug_log
from .engine import PIXEL_MODE_GRAY, Glyph
from .errors import GenericError, OutOfMemory
from .measure import iter_glyphs
from .session import FontSession

ALPHA = 3


def draw_glyph(work: PixelBuffer, glyph: Glyph, pen_x: int, pen_y: int, front: Color, back: Color) -> None:
    front_px = front.bgra()
    back_px = back.bgra()
    data = work.data
    w = work.width
    h = work.height
    stride = abs(glyph.pitch)
    coverage = glyph.buffer

    for i in range(glyph.rows):
        di = pen_y - glyph.top + i
        if di < 0:
            continue
        if di >= h:
            break
        row = i * stride
        for j in range(glyph.width):
            dj = pen_x + glyph.left + j
            if dj < 0:
                continue
            if dj >= w:
                break

            cov = coverage[row + j]
            if cov == 0:
                continue
            idx = (di * w + dj) * BYTES_PER_PIXEL
            if cov == CHANNEL_MAX:
                data[idx : idx + BYTES_PER_PIXEL] = front_px
                continue

            mixed = [blend(cov, front_px[k], back_px[k]) for k in range(BYTES_PER_PIXEL)]
            mix_alpha = mixed[ALPHA]
            for k in range(BYTES_PER_PIXEL):
                data[idx + k] = blend(mix_alpha, mixed[k], data[idx + k])


def _over_pixel(src: bytes | bytearray, s_idx: int, dst: bytearray, d_idx: int) -> None:
    src_a = src[s_idx + ALPHA]
    dst_weight = dst[d_idx + ALPHA] * (CHANNEL_MAX - src_a) // CHANNEL_MAX
    out_a = src_a + dst_weight
    if out_a == 0:
        # Both sides fully transparent: nothing to divide by, keep the destination.
        return
    # Colors reuse the floored dst_weight, keeping each channel a weighted mean <= 255.
    for k in range(ALPHA):
        dst[d_idx + k] = (src[s_idx + k] * src_a + dst[d_idx + k] * dst_weight) // out_a
    dst[d_idx + ALPHA] = out_a


def over(src: Color, dst: Color) -> Color:
    """Straight-alpha `src` over `dst` for a single pixel."""
    out = bytearray(dst.bgra())
    _over_pixel(src.bgra(), 0, out, 0)
    return Color(out[3], out[2], out[1], out[0])


def composite_over(src: PixelBuffer, dest: PixelBuffer, x: int, y: int) -> int:
    """Lay `src` over `dest` with its top-left corner at `(x, y)`.

    Anything outside `dest` is clipped. Returns the number of destination
    pixels visited.
    """
    x0 = max(x, 0)
    y0 = max(y, 0)
    x1 = min(x + src.width, dest.width)
    y1 = min(y + src.height, dest.height)
    if x0 >= x1 or y0 >= y1:
        return 0

    s_data = src.data
    d_data = dest.data
    for dy in range(y0, y1):
        s_row = (dy - y) * src.width - x
        d_row = dy * dest.width
        for dx in range(x0, x1):
            _over_pixel(s_data, (s_row + dx) * BYTES_PER_PIXEL, d_data, (d_row + dx) * BYTES_PER_PIXEL)
    return (x1 - x0) * (y1 - y0)


def _check_area(w: int, h: int) -> None:
    if w <= 0 or h <= 0:
        raise GenericError(f"render area must be positive, got {w}x{h}")


def render_text(
    session: FontSession,
    text: str,
    front: Color,
    back: Color,
    x: int,
    y: int,
    w: int,
    h: int,
    dest: PixelBuffer,
) -> None:
    """Render `text` into a `w x h` box at `(x, y)` of `dest`.

    Glyphs the engine cannot load, or that come back in a pixel format other
    than 8-bit gray, are skipped and recorded in the debug log.
    """
    face, metrics = session.require_face()
    _check_area(w, h)

    try:
        work = PixelBuffer.filled(w, h, back)
    except MemoryError as exc:
        raise OutOfMemory() from exc

    pen_x = 0
    pen_y = metrics.ascender_px
    drawn = 0
    for char, glyph in iter_glyphs(session.engine, face, text, render=True):
        if glyph.pixel_mode != PIXEL_MODE_GRAY:
            render_debug_log(
                "glyph_skip",
                reason="unsupported_pixel_mode",
                code_point=code_point(char),
                pixel_mode=glyph.pixel_mode,
            )
            continue
        draw_glyph(work, glyph, pen_x, pen_y, front, back)
        pen_x += glyph.advance
        drawn += 1

    visited = composite_over(work, dest, x, y)
    render_debug_log("render_done", glyphs=drawn, chars=len(text), area=(x, y, w, h), visited=visited)


def render_text_to_buffer(session: FontSession, text: str, front: Color, back: Color, w: int, h: int) -> PixelBuffer:
    """Render into a fresh, fully transparent `w x h` buffer."""
    session.require_face()
    _check_area(w, h)
    try:
        out = PixelBuffer.filled(w, h, TRANSPARENT)
    except MemoryError as exc:
        raise OutOfMemory() from exc
    render_text(session, text, front, back, 0, 0, w, h, out)
    return out


__all__ = [
    "composite_over",
    "draw_glyph",
    "over",
    "render_text",
    "render_text_to_buffer",
]
