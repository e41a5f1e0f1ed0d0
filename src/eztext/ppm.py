from __future__ import annotations

"""
Binary PPM (P6) output.

File layout:
  - ASCII header `P6\\n{width} {height}\\n255\\n`
  - width*height R,G,B byte triplets, row-major, alpha dropped
"""

import re
from pathlib import Path
from typing import BinaryIO

from .buffer import BYTES_PER_PIXEL, PixelBuffer
from .debug_log import render_debug_log
from .errors import CantOpenFile

MAGIC = b"P6"
MAX_VALUE = 255

_HEADER_RE = re.compile(rb"\AP6\s+(\d+)\s+(\d+)\s+(\d+)\s")


class PpmFormatError(ValueError):
    pass


def ppm_header(width: int, height: int) -> bytes:
    return b"P6\n%d %d\n%d\n" % (width, height, MAX_VALUE)


def encode_ppm(buffer: PixelBuffer) -> bytes:
    rgb = bytearray(buffer.width * buffer.height * 3)
    data = buffer.data
    # B,G,R,A -> R,G,B
    rgb[0::3] = data[2::BYTES_PER_PIXEL]
    rgb[1::3] = data[1::BYTES_PER_PIXEL]
    rgb[2::3] = data[0::BYTES_PER_PIXEL]
    return ppm_header(buffer.width, buffer.height) + bytes(rgb)


def _open_binary(dest: str | Path | BinaryIO) -> tuple[BinaryIO, bool]:
    if hasattr(dest, "write"):
        return dest, False  # type: ignore[return-value]
    try:
        return open(Path(dest), "wb"), True
    except OSError as exc:
        raise CantOpenFile(f"Unable to open file: {dest}") from exc


def dump_image(buffer: PixelBuffer, dest: str | Path | BinaryIO) -> None:
    payload = encode_ppm(buffer)
    f, should_close = _open_binary(dest)
    try:
        f.write(payload)
    finally:
        if should_close:
            f.close()
    render_debug_log("dump_image", width=buffer.width, height=buffer.height, bytes=len(payload))


def decode_ppm(data: bytes) -> PixelBuffer:
    """Parse a binary P6 image into an opaque `PixelBuffer`."""
    if not data.startswith(MAGIC):
        raise PpmFormatError(f"bad magic: {data[:2]!r}")
    match = _HEADER_RE.match(data)
    if match is None:
        raise PpmFormatError(f"bad header: {data[:16]!r}")
    width, height, max_value = (int(group) for group in match.groups())
    if max_value != MAX_VALUE:
        raise PpmFormatError(f"unsupported max value: {max_value}")
    rgb = data[match.end() :]
    expected = width * height * 3
    if len(rgb) < expected:
        raise PpmFormatError(f"short pixel data: {len(rgb)} < {expected}")
    out = bytearray(width * height * BYTES_PER_PIXEL)
    out[0::BYTES_PER_PIXEL] = rgb[2:expected:3]
    out[1::BYTES_PER_PIXEL] = rgb[1:expected:3]
    out[2::BYTES_PER_PIXEL] = rgb[0:expected:3]
    out[3::BYTES_PER_PIXEL] = b"\xff" * (width * height)
    return PixelBuffer(width, height, out)


def load_image(path: str | Path) -> PixelBuffer:
    return decode_ppm(Path(path).read_bytes())


def save_buffer(buffer: PixelBuffer, path: str | Path) -> None:
    """Write `.ppm` through `dump_image`; any other suffix goes through Pillow."""
    path = Path(path)
    if path.suffix.lower() in (".ppm", ".pnm"):
        dump_image(buffer, path)
        return
    from PIL import Image

    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise ValueError(f"unsupported output format: {path.suffix or path.name}")
    image = buffer.to_image()
    if fmt == "JPEG":
        image = image.convert("RGB")
    f, should_close = _open_binary(path)
    try:
        image.save(f, format=fmt)
    finally:
        if should_close:
            f.close()


__all__ = [
    "MAGIC",
    "PpmFormatError",
    "decode_ppm",
    "dump_image",
    "encode_ppm",
    "load_image",
    "ppm_header",
    "save_buffer",
]
