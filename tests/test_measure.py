from __future__ import annotations

import pytest

from eztext.errors import FontNotSet, NotInitialized
from eztext.measure import compute_text_width
from eztext.session import FontSession

from fakes import ScriptedEngine, coverage_glyph


def _engine() -> ScriptedEngine:
    return ScriptedEngine(
        glyphs={
            "a": coverage_glyph([[255]], advance=7),
            "b": coverage_glyph([[255]], advance=9),
            " ": coverage_glyph([], advance=4),
            "é": coverage_glyph([[255]], advance=8),
        },
    )


def test_empty_text_is_zero_wide() -> None:
    with FontSession(_engine()) as session:
        session.set_font("mono.ttf", 20)
        assert compute_text_width(session, "") == 0


def test_width_is_sum_of_advances() -> None:
    with FontSession(_engine()) as session:
        session.set_font("mono.ttf", 20)
        assert compute_text_width(session, "ab a") == 7 + 9 + 4 + 7
        assert compute_text_width(session, "é") == 8


def test_width_skips_unmapped_and_failing_glyphs() -> None:
    engine = _engine()
    engine.load_errors = frozenset({"b"})
    with FontSession(engine) as session:
        session.set_font("mono.ttf", 20)

        assert compute_text_width(session, "a?b") == 7
        assert compute_text_width(session, "aZ") == 7
        assert compute_text_width(session, "Z") == 0


def test_width_loads_glyphs_without_rendering() -> None:
    engine = _engine()
    with FontSession(engine) as session:
        session.set_font("mono.ttf", 20)
        compute_text_width(session, "ab")

    assert engine.loads == [("a", False), ("b", False)]


def test_width_preconditions() -> None:
    session = FontSession(_engine())
    with pytest.raises(NotInitialized):
        compute_text_width(session, "a")

    session.init()
    with pytest.raises(FontNotSet):
        compute_text_width(session, "a")
