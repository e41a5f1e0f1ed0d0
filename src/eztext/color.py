from __future__ import annotations

from dataclasses import dataclass

CHANNEL_MAX = 0xFF


def pack(a: int, r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into `0xAARRGGBB`. Range checks are the caller's job."""
    return ((a & 0xFF) << 24) | ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def unpack(value: int) -> tuple[int, int, int, int]:
    return (
        (value >> 24) & 0xFF,
        (value >> 16) & 0xFF,
        (value >> 8) & 0xFF,
        value & 0xFF,
    )


def blend(alpha: int, src: int, dst: int) -> int:
    # Truncating division; results must match the integer reference bit for bit.
    return (alpha * src + (CHANNEL_MAX - alpha) * dst) // CHANNEL_MAX


def _check_channel(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= CHANNEL_MAX:
        raise ValueError(f"{name} component not in range 0-255")
    return value


@dataclass(slots=True, frozen=True)
class Color:
    a: int = 0xFF
    r: int = 0
    g: int = 0
    b: int = 0

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> Color:
        return cls(0xFF, r, g, b)

    @classmethod
    def checked(cls, a: int, r: int, g: int, b: int) -> Color:
        """Validated constructor for values coming from outside the core."""
        return cls(
            _check_channel("Alpha", a),
            _check_channel("Red", r),
            _check_channel("Green", g),
            _check_channel("Blue", b),
        )

    @classmethod
    def unpack(cls, value: int) -> Color:
        return cls(*unpack(value))

    @classmethod
    def from_argb(cls, value: Color | tuple[int, int, int, int] | list[int]) -> Color:
        if isinstance(value, Color):
            return value
        if len(value) != 4:
            raise ValueError(f"expected 4 channels (a, r, g, b), got {len(value)}")
        return cls.checked(value[0], value[1], value[2], value[3])

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse `RRGGBB` or `AARRGGBB`, with an optional leading `#` or `0x`."""
        raw = text.strip().lower().removeprefix("#").removeprefix("0x")
        if len(raw) not in (6, 8):
            raise ValueError(f"expected RRGGBB or AARRGGBB, got {text!r}")
        try:
            value = int(raw, 16)
        except ValueError as exc:
            raise ValueError(f"invalid hex color: {text!r}") from exc
        if len(raw) == 6:
            value |= 0xFF000000
        return cls.unpack(value)

    def pack(self) -> int:
        return pack(self.a, self.r, self.g, self.b)

    def bgra(self) -> bytes:
        return bytes((self.b, self.g, self.r, self.a))

    def blend(self, other: Color, alpha: int) -> Color:
        """Mix `self` over `other` with weight `alpha` on every channel."""
        return Color(
            blend(alpha, self.a, other.a),
            blend(alpha, self.r, other.r),
            blend(alpha, self.g, other.g),
            blend(alpha, self.b, other.b),
        )

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.a, self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"{self.pack():08x}"

    def replace(
        self,
        *,
        a: int | None = None,
        r: int | None = None,
        g: int | None = None,
        b: int | None = None,
    ) -> Color:
        return Color(
            a=self.a if a is None else int(a),
            r=self.r if r is None else int(r),
            g=self.g if g is None else int(g),
            b=self.b if b is None else int(b),
        )

    def with_alpha(self, alpha: int) -> Color:
        return self.replace(a=alpha)


TRANSPARENT = Color(0, 0, 0, 0)
BLACK = Color.rgb(0, 0, 0)
WHITE = Color.rgb(0xFF, 0xFF, 0xFF)


__all__ = [
    "BLACK",
    "CHANNEL_MAX",
    "Color",
    "TRANSPARENT",
    "WHITE",
    "blend",
    "pack",
    "unpack",
]
