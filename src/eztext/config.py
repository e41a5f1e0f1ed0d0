from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import msgspec

from .buffer import PixelBuffer
from .color import BLACK, TRANSPARENT, WHITE, Color
from .compositor import render_text
from .engine import FontEngine, FreeTypeEngine
from .measure import compute_text_width
from .ppm import save_buffer
from .session import FontSession

FONT_ENV_VAR = "EZTEXT_FONT"
DEFAULT_HEIGHT = 20
DEFAULT_CANVAS_WIDTH = 320
DEFAULT_CANVAS_HEIGHT = 40


class RenderJobError(ValueError):
    pass


def default_font_path() -> Path | None:
    raw = os.environ.get(FONT_ENV_VAR, "").strip()
    if not raw:
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class RenderConfig:
    height: int = DEFAULT_HEIGHT
    front: Color = BLACK
    back: Color = WHITE
    canvas: Color = TRANSPARENT
    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT


def _argb(color: Color) -> list[int]:
    return list(color.to_tuple())


class RenderJob(msgspec.Struct, forbid_unknown_fields=True):
    """One label render, as stored in a `.json` or `.toml` job file.

    Colors are `[a, r, g, b]` lists. A box width/height of `None` means
    "fit": the measured text width and the font height respectively.
    """

    font: str
    text: str
    output: str
    height: int = DEFAULT_HEIGHT
    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT
    x: int = 0
    y: int = 0
    box_width: int | None = None
    box_height: int | None = None
    front: list[int] = msgspec.field(default_factory=lambda: _argb(BLACK))
    back: list[int] = msgspec.field(default_factory=lambda: _argb(WHITE))
    canvas: list[int] = msgspec.field(default_factory=lambda: _argb(TRANSPARENT))

    def colors(self) -> tuple[Color, Color, Color]:
        try:
            return Color.from_argb(self.front), Color.from_argb(self.back), Color.from_argb(self.canvas)
        except ValueError as exc:
            raise RenderJobError(f"invalid color: {exc}") from exc

    def resolved(self, base_dir: Path) -> RenderJob:
        """Return a copy with relative `font`/`output` paths anchored at `base_dir`."""
        font = Path(self.font).expanduser()
        output = Path(self.output).expanduser()
        return msgspec.structs.replace(
            self,
            font=str(font if font.is_absolute() else base_dir / font),
            output=str(output if output.is_absolute() else base_dir / output),
        )


def decode_render_job(data: bytes, *, toml: bool = False) -> RenderJob:
    try:
        if toml:
            return msgspec.toml.decode(data, type=RenderJob)
        return msgspec.json.decode(data, type=RenderJob)
    except msgspec.DecodeError as exc:
        raise RenderJobError(f"invalid render job: {exc}") from exc


def load_render_job(path: Path) -> RenderJob:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise RenderJobError(f"cannot read render job {path}: {exc}") from exc
    job = decode_render_job(data, toml=path.suffix.lower() == ".toml")
    return job.resolved(path.resolve().parent)


def run_render_job(job: RenderJob, *, engine: FontEngine | None = None) -> PixelBuffer:
    front, back, canvas_color = job.colors()
    canvas = PixelBuffer.filled(job.canvas_width, job.canvas_height, canvas_color)
    with FontSession(engine if engine is not None else FreeTypeEngine()) as session:
        session.set_font(job.font, job.height)
        box_w = job.box_width if job.box_width is not None else compute_text_width(session, job.text)
        box_h = job.box_height if job.box_height is not None else job.height
        render_text(session, job.text, front, back, job.x, job.y, max(box_w, 1), box_h, canvas)
    save_buffer(canvas, job.output)
    return canvas


__all__ = [
    "DEFAULT_CANVAS_HEIGHT",
    "DEFAULT_CANVAS_WIDTH",
    "DEFAULT_HEIGHT",
    "FONT_ENV_VAR",
    "RenderConfig",
    "RenderJob",
    "RenderJobError",
    "decode_render_job",
    "default_font_path",
    "load_render_job",
    "run_render_job",
]
