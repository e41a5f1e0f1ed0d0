from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .color import Color

if TYPE_CHECKING:
    from PIL import Image

BYTES_PER_PIXEL = 4


@dataclass(slots=True)
class PixelBuffer:
    """`width x height` pixels stored row-major as B,G,R,A bytes."""

    width: int
    height: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"negative buffer size: {self.width}x{self.height}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if not self.data and expected:
            self.data = bytearray(expected)
        elif not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        if len(self.data) != expected:
            raise ValueError(f"buffer size mismatch: {len(self.data)} != {expected}")

    @classmethod
    def filled(cls, width: int, height: int, color: Color) -> PixelBuffer:
        return cls(width, height, bytearray(color.bgra() * (width * height)))

    @classmethod
    def from_colors(cls, width: int, height: int, colors: Sequence[Color]) -> PixelBuffer:
        if len(colors) != width * height:
            raise ValueError(f"expected {width * height} colors, got {len(colors)}")
        data = bytearray()
        for color in colors:
            data += color.bgra()
        return cls(width, height, data)

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        rgba = image.convert("RGBA")
        width, height = rgba.size
        # Pillow's raw "BGRA" packer gives the buffer layout directly.
        return cls(width, height, bytearray(rgba.tobytes("raw", "BGRA")))

    def index(self, x: int, y: int) -> int:
        return (y * self.width + x) * BYTES_PER_PIXEL

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> Color:
        if not self.contains(x, y):
            raise IndexError(f"pixel out of bounds: ({x}, {y})")
        idx = self.index(x, y)
        b, g, r, a = self.data[idx : idx + BYTES_PER_PIXEL]
        return Color(a, r, g, b)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        if not self.contains(x, y):
            raise IndexError(f"pixel out of bounds: ({x}, {y})")
        idx = self.index(x, y)
        self.data[idx : idx + BYTES_PER_PIXEL] = color.bgra()

    def fill(self, color: Color) -> None:
        self.data[:] = color.bgra() * (self.width * self.height)

    def colors(self) -> list[Color]:
        return list(self.iter_colors())

    def iter_colors(self) -> Iterator[Color]:
        data = self.data
        for idx in range(0, len(data), BYTES_PER_PIXEL):
            yield Color(data[idx + 3], data[idx + 2], data[idx + 1], data[idx])

    def to_image(self) -> Image.Image:
        from PIL import Image

        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.data), "raw", "BGRA")

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, bytearray(self.data))


__all__ = [
    "BYTES_PER_PIXEL",
    "PixelBuffer",
]
