from __future__ import annotations

from pathlib import Path

from eztext.compositor import render_text
from eztext.buffer import PixelBuffer
from eztext.color import BLACK, WHITE
from eztext.debug_log import (
    close_render_debug_log,
    code_point,
    init_render_debug_log,
    render_debug_log,
    render_debug_log_path,
)
from eztext.engine import PIXEL_MODE_MONO
from eztext.session import FontSession

from fakes import ScriptedEngine, coverage_glyph


def test_render_debug_log_writes_events_to_file(tmp_path: Path) -> None:
    log_path = init_render_debug_log(base_dir=tmp_path, command="render", font="mono.ttf", height=20)
    render_debug_log("heartbeat", glyphs=3, note="two\nlines")

    assert render_debug_log_path() == log_path
    assert log_path.parent == tmp_path / "logs" / "render"
    text = log_path.read_text(encoding="utf-8")
    assert "event=init" in text
    assert "command=render" in text
    assert "font=mono.ttf" in text
    assert "event=heartbeat" in text
    assert "glyphs=3" in text
    assert "note=\"two\\nlines\"" in text
    assert "#2 event=heartbeat glyphs=3 " in text

    close_render_debug_log()
    assert render_debug_log_path() is None


def test_render_debug_log_without_init_is_noop(tmp_path: Path) -> None:
    render_debug_log("ignored", value=1)

    assert render_debug_log_path() is None
    assert list(tmp_path.iterdir()) == []


def test_skipped_glyphs_and_size_fit_are_traced(tmp_path: Path) -> None:
    log_path = init_render_debug_log(base_dir=tmp_path, command="render")
    engine = ScriptedEngine(
        glyphs={
            "a": coverage_glyph([[255]], advance=2),
            "m": coverage_glyph([[255]], advance=2, pixel_mode=PIXEL_MODE_MONO),
        },
    )
    with FontSession(engine) as session:
        session.set_font("mono.ttf", 20)
        render_text(session, "a?m", BLACK, WHITE, 0, 0, 8, 20, PixelBuffer(8, 20))

    text = log_path.read_text(encoding="utf-8")
    assert "event=session_init" in text
    assert "event=size_fit_try" in text
    assert "event=size_fit_done" in text
    assert "code_point=U+003F" in text
    assert "reason=load_error" in text
    assert "reason=unsupported_pixel_mode" in text
    assert "code_point=U+006D" in text
    assert "event=render_done" in text
    assert "glyphs=1" in text
    assert "event=session_release" in text


def test_render_debug_log_formats_render_fields(tmp_path: Path) -> None:
    log_path = init_render_debug_log(base_dir=tmp_path, command="Render", font=Path("fonts/mono.ttf"))
    render_debug_log(
        "glyph_skip",
        code_point=code_point("é"),
        area=(3, -2, 32, 20),
        error=ValueError("bad outline"),
        empty="",
    )

    assert log_path.name.startswith("render-render-pid")
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert "font=fonts/mono.ttf" in lines[0]
    assert lines[1].split(" ", 2)[1:] == [
        "#2",
        'event=glyph_skip code_point=U+00E9 area=3,-2,32,20 error="ValueError:bad outline" empty=""',
    ]


def test_render_debug_log_after_close_writes_nothing(tmp_path: Path) -> None:
    log_path = init_render_debug_log(base_dir=tmp_path, command="width")
    close_render_debug_log()
    render_debug_log("late", value=1)

    assert "event=late" not in log_path.read_text(encoding="utf-8")
