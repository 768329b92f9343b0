"""Exception types raised by the snapshot store."""

from __future__ import annotations

import difflib
from typing import Any

MISSING_SNAPSHOT_TIP = (
    "Missing snapshots can be generated by rerunning the command with the "
    "--update-snapshots flag."
)


class SnapshotError(Exception):
    """Base class for snapshot store failures."""


class SnapshotArgumentTypeError(SnapshotError, TypeError):
    """Raised when configuration or assertion input has the wrong shape."""

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message)
        self.name = name


class SnapshotArgumentValueError(SnapshotError, ValueError):
    """Raised when configuration or assertion input has an unsupported value."""

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message)
        self.name = name


class SnapshotStateError(SnapshotError, RuntimeError):
    """Raised for store-level failures (read, parse, lookup, write, resolve).

    The structured attributes are populated where they apply so callers can
    build a diagnostic without re-deriving them; the underlying failure is
    chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        filename: Any = None,
        snapshot: str | None = None,
        input: Any = None,  # noqa: A002
    ) -> None:
        super().__init__(message)
        self.filename = filename
        self.snapshot = snapshot
        self.input = input


class SnapshotFileMissingError(SnapshotStateError):
    """Raised when a snapshot artifact does not exist on disk."""


class SnapshotFormatError(SnapshotError, ValueError):
    """Raised when a snapshot artifact is not a well-formed set of bindings."""


class SnapshotMismatchError(AssertionError):
    """Raised when a freshly serialized value differs from the stored one."""

    def __init__(self, *, snapshot: str, filename: str, expected: str, actual: str) -> None:
        diff = "\n".join(
            difflib.unified_diff(
                expected.splitlines(),
                actual.splitlines(),
                fromfile="stored",
                tofile="actual",
                lineterm="",
            )
        )
        super().__init__(f"Snapshot '{snapshot}' does not match '{filename}'.\n{diff}")
        self.snapshot = snapshot
        self.filename = filename
        self.expected = expected
        self.actual = actual


__all__ = [
    "MISSING_SNAPSHOT_TIP",
    "SnapshotError",
    "SnapshotArgumentTypeError",
    "SnapshotArgumentValueError",
    "SnapshotStateError",
    "SnapshotFileMissingError",
    "SnapshotFormatError",
    "SnapshotMismatchError",
]
