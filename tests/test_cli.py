from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from eztext.cli import app
from eztext.color import BLACK, WHITE, Color
from eztext.engine import EngineError
from eztext.ppm import load_image

from fakes import ScriptedEngine, coverage_glyph


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch) -> ScriptedEngine:
    scripted = ScriptedEngine(
        glyphs={"A": coverage_glyph([[255, 255], [255, 255]], advance=3, top=15)},
    )
    monkeypatch.setattr("eztext.cli.make_engine", lambda: scripted)
    monkeypatch.delenv("EZTEXT_FONT", raising=False)
    return scripted


def test_width_command_prints_advance_sum(engine: ScriptedEngine) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["width", "AAxA", "--font", "fixed.ttf", "--height", "20"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "9"
    assert engine.opened == ["fixed.ttf"]


def test_width_command_uses_font_from_environment(engine: ScriptedEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EZTEXT_FONT", "env.ttf")
    runner = CliRunner()
    result = runner.invoke(app, ["width", "A"])

    assert result.exit_code == 0, result.output
    assert engine.opened == ["env.ttf"]


def test_width_command_without_font_fails(engine: ScriptedEngine) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["width", "A"])

    assert result.exit_code == 1
    assert "no font given" in result.output


def test_open_failure_reports_error(engine: ScriptedEngine) -> None:
    engine.open_error = EngineError("cannot open resource")
    runner = CliRunner()
    result = runner.invoke(app, ["width", "A", "--font", "missing.ttf"])

    assert result.exit_code == 1
    assert "Error opening font" in result.output


def test_render_command_writes_ppm(engine: ScriptedEngine, tmp_path: Path) -> None:
    out = tmp_path / "label.ppm"
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "render",
            "AA",
            "--font",
            "fixed.ttf",
            "--size",
            "12x24",
            "--at",
            "2,1",
            "--canvas",
            "ff808080",
            "--out",
            str(out),
        ],
    )

    assert result.exit_code == 0, result.output
    image = load_image(out)
    assert (image.width, image.height) == (12, 24)
    assert image.pixel(0, 0) == Color(255, 0x80, 0x80, 0x80)
    assert image.pixel(2, 1) == BLACK
    assert image.pixel(4, 1) == WHITE
    assert image.pixel(5, 2) == BLACK
    assert image.pixel(8, 1) == Color(255, 0x80, 0x80, 0x80)


def test_render_command_with_explicit_box_and_png(engine: ScriptedEngine, tmp_path: Path) -> None:
    out = tmp_path / "label.png"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["render", "A", "--font", "fixed.ttf", "--size", "8x8", "--box", "4x4", "--out", str(out)],
    )

    assert result.exit_code == 0, result.output
    assert out.is_file()


def test_render_command_rejects_bad_size(engine: ScriptedEngine, tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["render", "A", "--font", "fixed.ttf", "--size", "big", "--out", str(tmp_path / "x.ppm")],
    )

    assert result.exit_code != 0


def test_render_command_reports_negative_canvas_size(engine: ScriptedEngine, tmp_path: Path) -> None:
    out = tmp_path / "x.ppm"
    runner = CliRunner()
    result = runner.invoke(app, ["render", "A", "--font", "fixed.ttf", "--size=-5x10", "--out", str(out)])

    assert result.exit_code == 1
    assert "error: negative buffer size: -5x10" in result.output
    assert not isinstance(result.exception, ValueError)
    assert not out.exists()


def test_job_command_with_debug_log(engine: ScriptedEngine, tmp_path: Path) -> None:
    job = tmp_path / "job.json"
    job.write_text(
        json.dumps({"font": "fixed.ttf", "text": "A", "output": "out.ppm", "canvas_width": 6, "canvas_height": 20}),
        encoding="utf-8",
    )
    logs = tmp_path / "trace"
    runner = CliRunner()
    result = runner.invoke(app, ["job", str(job), "--debug-log", str(logs)])

    assert result.exit_code == 0, result.output
    assert load_image(tmp_path / "out.ppm").pixel(0, 0) == BLACK
    log_files = list((logs / "logs" / "render").glob("render-*.log"))
    assert len(log_files) == 1
    assert "event=render_done" in log_files[0].read_text(encoding="utf-8")


def test_job_command_invalid_file(engine: ScriptedEngine, tmp_path: Path) -> None:
    job = tmp_path / "job.json"
    job.write_text('{"font": "fixed.ttf"}', encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["job", str(job)])

    assert result.exit_code == 1
    assert "invalid render job" in result.output
