"""Process-wide snapshot configuration.

Managers capture the active :class:`SnapshotConfig` when they are created and
hand it to every file they open, so the setters below only affect managers
constructed after the call.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from threading import Lock
from typing import Any

from caster_snapshots.serialization import DEFAULT_SERIALIZERS, Serializer
from caster_snapshots.validators import validate_callable, validate_serializers

logger = logging.getLogger(__name__)

ResolveSnapshotPath = Callable[[Any], Any]

SNAPSHOT_SUFFIX = ".snapshot"


def default_resolve_snapshot_path(source_file: Any) -> Any:
    """Place the artifact next to its test file; pass through anything that is not a path."""

    if not isinstance(source_file, (str, os.PathLike)):
        return source_file
    return f"{os.fspath(source_file)}{SNAPSHOT_SUFFIX}"


@dataclass(frozen=True, slots=True)
class SnapshotConfig:
    """Path resolver and default serializer chain shared by a manager's files."""

    resolve_path: ResolveSnapshotPath = default_resolve_snapshot_path
    serializers: tuple[Serializer, ...] = DEFAULT_SERIALIZERS


_lock = Lock()
_active = SnapshotConfig()


def current_config() -> SnapshotConfig:
    with _lock:
        return _active


def set_resolve_snapshot_path(fn: ResolveSnapshotPath) -> None:
    """Replace the process-wide snapshot path resolver."""

    global _active
    resolver = validate_callable(fn, "fn")
    with _lock:
        _active = SnapshotConfig(resolve_path=resolver, serializers=_active.serializers)
    logger.debug(
        "snapshot path resolver replaced",
        extra={"data": {"resolver": getattr(resolver, "__qualname__", repr(resolver))}},
    )


def set_default_snapshot_serializers(fns: Sequence[Serializer]) -> None:
    """Replace (not extend) the process-wide default serializer chain."""

    global _active
    serializers = validate_serializers(fns, "fns")
    with _lock:
        _active = SnapshotConfig(resolve_path=_active.resolve_path, serializers=serializers)
    logger.debug(
        "default snapshot serializers replaced",
        extra={"data": {"count": len(serializers)}},
    )


def reset_snapshot_config() -> None:
    global _active
    with _lock:
        _active = SnapshotConfig()


__all__ = [
    "ResolveSnapshotPath",
    "SNAPSHOT_SUFFIX",
    "SnapshotConfig",
    "current_config",
    "default_resolve_snapshot_path",
    "reset_snapshot_config",
    "set_default_snapshot_serializers",
    "set_resolve_snapshot_path",
]
