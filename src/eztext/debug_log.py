from __future__ import annotations

"""
Render trace log.

One file per command run, under `<base_dir>/logs/render/`. Every line is

    +<elapsed ms> #<seq> event=<name> key=value ...

with fields in the order the caller passed them. Values are written as:
  - int tuples (areas, origins) comma-joined: `area=0,0,32,20`
  - paths in POSIX form
  - exceptions as `TypeName:message`
  - anything holding whitespace or quotes double-quoted and escaped
Use `code_point()` for characters so skipped glyphs read as `U+00E9`.
"""

import datetime as dt
import os
import time
from dataclasses import dataclass
from pathlib import Path
from threading import Lock


@dataclass(slots=True)
class RenderTrace:
    path: Path
    started: float
    seq: int = 0

    def line(self, event: str, fields: dict[str, object]) -> str:
        self.seq += 1
        elapsed_ms = (time.monotonic() - self.started) * 1000.0
        parts = [f"+{elapsed_ms:.3f}ms", f"#{self.seq}", f"event={event.strip()}"]
        parts.extend(f"{key}={_format_value(value)}" for key, value in fields.items())
        return " ".join(parts) + "\n"


_TRACE_LOCK = Lock()
_TRACE: RenderTrace | None = None

_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"})


def code_point(char: str) -> str:
    return f"U+{ord(char):04X}"


def _format_value(value: object) -> str:
    if isinstance(value, BaseException):
        text = f"{type(value).__name__}:{value}"
    elif isinstance(value, Path):
        text = value.as_posix()
    elif isinstance(value, tuple):
        text = ",".join(str(item) for item in value)
    else:
        text = str(value)
    if not text or any(ch.isspace() or ch == '"' for ch in text):
        return f'"{text.translate(_ESCAPES)}"'
    return text


def render_debug_log_path() -> Path | None:
    with _TRACE_LOCK:
        return None if _TRACE is None else _TRACE.path


def init_render_debug_log(
    *,
    base_dir: Path,
    command: str,
    font: str | Path | None = None,
    height: int | None = None,
) -> Path:
    """Start a new trace file for one `command` run and return its path."""
    command_name = str(command).strip().lower() or "unknown"
    now = dt.datetime.now(dt.timezone.utc)
    path = base_dir / "logs" / "render" / f"render-{command_name}-pid{os.getpid()}-{now:%Y%m%dT%H%M%S.%fZ}.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    global _TRACE
    with _TRACE_LOCK:
        _TRACE = RenderTrace(path=path, started=time.monotonic())

    render_debug_log(
        "init",
        command=command_name,
        font="" if font is None else Path(font),
        height=0 if height is None else int(height),
        pid=os.getpid(),
        started=now.isoformat(timespec="milliseconds"),
    )
    return path


def render_debug_log(event: str, **fields: object) -> None:
    with _TRACE_LOCK:
        trace = _TRACE
        if trace is None:
            return
        line = trace.line(event, fields)
        with trace.path.open("a", encoding="utf-8") as handle:
            handle.write(line)


def close_render_debug_log() -> None:
    global _TRACE
    with _TRACE_LOCK:
        _TRACE = None


__all__ = [
    "RenderTrace",
    "close_render_debug_log",
    "code_point",
    "init_render_debug_log",
    "render_debug_log",
    "render_debug_log_path",
]
