from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .buffer import PixelBuffer
from .color import Color
from .compositor import render_text
from .config import RenderConfig, RenderJobError, default_font_path, load_render_job, run_render_job
from .debug_log import close_render_debug_log, init_render_debug_log
from .engine import FontEngine, FreeTypeEngine
from .errors import TextRenderError
from .measure import compute_text_width
from .ppm import save_buffer
from .session import FontSession

app = typer.Typer(add_completion=False)

_DEFAULTS = RenderConfig()


def make_engine() -> FontEngine:
    return FreeTypeEngine()


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _resolve_font(font: Path | None) -> Path:
    path = font if font is not None else default_font_path()
    if path is None:
        _fail("no font given (pass --font or set EZTEXT_FONT)")
    return path


def _parse_color(text: str) -> Color:
    try:
        return Color.from_hex(text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_pair(text: str, sep: str) -> tuple[int, int]:
    parts = [part.strip() for part in text.lower().split(sep)]
    if len(parts) != 2:
        raise typer.BadParameter(f"expected two integers separated by {sep!r}, got {text!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise typer.BadParameter(f"expected two integers separated by {sep!r}, got {text!r}") from exc


def _start_debug_log(debug_log: Path | None, command: str, font: Path | None, height: int | None) -> None:
    if debug_log is None:
        return
    path = init_render_debug_log(base_dir=debug_log, command=command, font=None if font is None else str(font), height=height)
    typer.echo(f"debug log: {path}", err=True)


@app.command("width")
def cmd_width(
    text: str = typer.Argument(..., help="text to measure"),
    font: Path | None = typer.Option(None, help="font file (default: $EZTEXT_FONT)"),
    height: int = typer.Option(_DEFAULTS.height, help="requested text height in pixels"),
    debug_log: Path | None = typer.Option(None, help="write a render trace log under this directory"),
) -> None:
    """Print the pixel width of TEXT."""
    font_path = _resolve_font(font)
    _start_debug_log(debug_log, "width", font_path, height)
    try:
        with FontSession(make_engine()) as session:
            session.set_font(font_path, height)
            typer.echo(str(compute_text_width(session, text)))
    except TextRenderError as exc:
        _fail(f"error: {exc}")
    finally:
        close_render_debug_log()


@app.command("render")
def cmd_render(
    text: str = typer.Argument(..., help="text to render"),
    out: Path = typer.Option(..., "--out", "-o", help="output image (.ppm, or any format Pillow writes)"),
    font: Path | None = typer.Option(None, help="font file (default: $EZTEXT_FONT)"),
    height: int = typer.Option(_DEFAULTS.height, help="requested text height in pixels"),
    size: str = typer.Option(
        f"{_DEFAULTS.canvas_width}x{_DEFAULTS.canvas_height}",
        help="destination canvas size, WxH",
    ),
    at: str = typer.Option("0,0", help="top-left of the text box on the canvas, X,Y"),
    box: str | None = typer.Option(None, help="text box size WxH (default: measured width x height)"),
    front: str = typer.Option(_DEFAULTS.front.to_hex(), help="text color, AARRGGBB or RRGGBB"),
    back: str = typer.Option(_DEFAULTS.back.to_hex(), help="text box background, AARRGGBB or RRGGBB"),
    canvas: str = typer.Option(_DEFAULTS.canvas.to_hex(), help="canvas fill, AARRGGBB or RRGGBB"),
    debug_log: Path | None = typer.Option(None, help="write a render trace log under this directory"),
) -> None:
    """Render TEXT onto a canvas and write it to --out."""
    font_path = _resolve_font(font)
    canvas_w, canvas_h = _parse_pair(size, "x")
    x, y = _parse_pair(at, ",")
    front_color = _parse_color(front)
    back_color = _parse_color(back)
    canvas_color = _parse_color(canvas)

    _start_debug_log(debug_log, "render", font_path, height)
    try:
        target = PixelBuffer.filled(canvas_w, canvas_h, canvas_color)
        with FontSession(make_engine()) as session:
            session.set_font(font_path, height)
            if box is None:
                box_w, box_h = max(compute_text_width(session, text), 1), height
            else:
                box_w, box_h = _parse_pair(box, "x")
            render_text(session, text, front_color, back_color, x, y, box_w, box_h, target)
        save_buffer(target, out)
    except (TextRenderError, ValueError) as exc:
        _fail(f"error: {exc}")
    finally:
        close_render_debug_log()
    typer.echo(f"wrote {out} ({canvas_w}x{canvas_h})")


@app.command("job")
def cmd_job(
    path: Path = typer.Argument(..., help="render job file (.json or .toml)"),
    debug_log: Path | None = typer.Option(None, help="write a render trace log under this directory"),
) -> None:
    """Run a render job file."""
    try:
        job = load_render_job(path)
    except RenderJobError as exc:
        _fail(f"error: {exc}")
    _start_debug_log(debug_log, "job", Path(job.font), job.height)
    try:
        run_render_job(job, engine=make_engine())
    except (TextRenderError, ValueError) as exc:
        _fail(f"error: {exc}")
    finally:
        close_render_debug_log()
    typer.echo(f"wrote {job.output} ({job.canvas_width}x{job.canvas_height})")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="ez-text", args=argv)


if __name__ == "__main__":
    main()
