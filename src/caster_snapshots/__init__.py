"""Snapshot assertion store: record serialized values once, compare on later runs."""

from caster_snapshots.codec import parse_snapshot_file, render_snapshot_file, template_escape
from caster_snapshots.config import (
    SnapshotConfig,
    current_config,
    default_resolve_snapshot_path,
    reset_snapshot_config,
    set_default_snapshot_serializers,
    set_resolve_snapshot_path,
)
from caster_snapshots.errors import (
    SnapshotArgumentTypeError,
    SnapshotArgumentValueError,
    SnapshotError,
    SnapshotFileMissingError,
    SnapshotFormatError,
    SnapshotMismatchError,
    SnapshotStateError,
)
from caster_snapshots.file import SnapshotFile
from caster_snapshots.manager import SnapshotAssertion, SnapshotManager, SnapshotMode, TestContext
from caster_snapshots.serialization import DEFAULT_SERIALIZERS, serialize

__all__ = [
    "DEFAULT_SERIALIZERS",
    "SnapshotArgumentTypeError",
    "SnapshotArgumentValueError",
    "SnapshotAssertion",
    "SnapshotConfig",
    "SnapshotError",
    "SnapshotFile",
    "SnapshotFileMissingError",
    "SnapshotFormatError",
    "SnapshotManager",
    "SnapshotMismatchError",
    "SnapshotMode",
    "SnapshotStateError",
    "TestContext",
    "current_config",
    "default_resolve_snapshot_path",
    "parse_snapshot_file",
    "render_snapshot_file",
    "reset_snapshot_config",
    "serialize",
    "set_default_snapshot_serializers",
    "set_resolve_snapshot_path",
    "template_escape",
]
