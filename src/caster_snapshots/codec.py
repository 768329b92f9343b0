"""Reader/writer for the on-disk snapshot artifact format.

An artifact is a sequence of bindings::

    exports[`<escaped-id>`] = `<escaped-value>`;

Keys and values are held in their escaped form everywhere in the store, so
the reader keeps template bodies verbatim and the writer emits them as-is.
The text is parsed, never evaluated.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from caster_snapshots.errors import SnapshotFormatError

_BINDING_OPEN_RE = re.compile(r"exports\s*\[\s*`")
_BINDING_ASSIGN_RE = re.compile(r"\s*\]\s*=\s*`")
_BINDING_CLOSE_RE = re.compile(r"\s*;")
_TRIVIA_RE = re.compile(r"(?:\s+|//[^\n]*)*")


def template_escape(text: str) -> str:
    """Escape backslashes, backticks and ``${`` for a template body."""

    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def render_snapshot_file(entries: Mapping[str, str]) -> str:
    """Render escaped entries as artifact text, ordered by key."""

    bindings = [f"exports[`{key}`] = `{entries[key]}`;\n" for key in sorted(entries)]
    return "\n".join(bindings)


def parse_snapshot_file(text: str, *, source: str = "<snapshot>") -> dict[str, str]:
    """Parse artifact text into an escaped-id -> escaped-value mapping."""

    entries: dict[str, str] = {}
    pos = _skip_trivia(text, 0)
    while pos < len(text):
        opened = _BINDING_OPEN_RE.match(text, pos)
        if opened is None:
            raise _malformed(source, pos, "expected an exports[`...`] binding")
        key, pos = _read_template(text, opened.end(), source)

        assigned = _BINDING_ASSIGN_RE.match(text, pos)
        if assigned is None:
            raise _malformed(source, pos, "expected '] = `'")
        value, pos = _read_template(text, assigned.end(), source)

        closed = _BINDING_CLOSE_RE.match(text, pos)
        if closed is None:
            raise _malformed(source, pos, "expected ';'")
        if key in entries:
            raise _malformed(source, opened.start(), f"duplicate snapshot id {key!r}")
        entries[key] = value
        pos = _skip_trivia(text, closed.end())
    return entries


def _read_template(text: str, start: int, source: str) -> tuple[str, int]:
    idx = start
    end = len(text)
    while idx < end:
        char = text[idx]
        if char == "\\":
            if idx + 1 >= end:
                break
            idx += 2
            continue
        if char == "`":
            return text[start:idx], idx + 1
        if char == "$" and text.startswith("{", idx + 1):
            raise _malformed(source, idx, "template interpolation is not supported")
        idx += 1
    raise _malformed(source, start, "unterminated template literal")


def _skip_trivia(text: str, pos: int) -> int:
    match = _TRIVIA_RE.match(text, pos)
    return match.end() if match else pos


def _malformed(source: str, pos: int, reason: str) -> SnapshotFormatError:
    return SnapshotFormatError(f"Malformed snapshot file '{source}': {reason} at offset {pos}.")


__all__ = ["parse_snapshot_file", "render_snapshot_file", "template_escape"]
