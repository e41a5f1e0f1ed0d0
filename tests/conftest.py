from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-freetype",
        action="store_true",
        default=False,
        help="run tests against the real FreeType engine and a system font",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other installed copy of the package.
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)
    config.addinivalue_line("markers", "freetype: tests needing libfreetype and a system font (opt-in)")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-freetype"):
        return
    skip_freetype = pytest.mark.skip(reason="use --run-freetype to run FreeType engine tests")
    for item in items:
        if "freetype" in item.keywords:
            item.add_marker(skip_freetype)


@pytest.fixture(autouse=True)
def _no_debug_log():
    from eztext.debug_log import close_render_debug_log

    close_render_debug_log()
    yield
    close_render_debug_log()
