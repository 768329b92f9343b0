"""Run-scoped snapshot orchestration and the assertion entry point."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from types import MappingProxyType
from typing import Any

from caster_snapshots.codec import template_escape
from caster_snapshots.config import SnapshotConfig, current_config
from caster_snapshots.errors import SnapshotMismatchError, SnapshotStateError
from caster_snapshots.file import SnapshotFile
from caster_snapshots.serialization import Serializer, serialize
from caster_snapshots.validators import validate_assertion_options

logger = logging.getLogger(__name__)

_NO_OPTIONS: Mapping[str, Any] = MappingProxyType({})


class SnapshotMode(str, Enum):
    """Whether a run compares against stored snapshots or rewrites them."""

    VERIFY = "verify"
    RECORD = "record"

    @classmethod
    def from_flag(cls, update_snapshots: bool) -> SnapshotMode:
        return cls.RECORD if update_snapshots else cls.VERIFY


@dataclass(frozen=True, slots=True)
class TestContext:
    """Location and stable name of the test issuing a snapshot assertion."""

    __test__ = False

    source_file: Any
    name: str


class SnapshotAssertion:
    """Snapshot assertion bound to one manager and one running test."""

    __slots__ = ("_manager", "_context")

    def __init__(self, manager: SnapshotManager, context: TestContext) -> None:
        self._manager = manager
        self._context = context

    @property
    def context(self) -> TestContext:
        return self._context

    def __call__(self, actual: Any, options: Mapping[str, Any] = _NO_OPTIONS) -> None:
        serializers = validate_assertion_options(options)
        manager = self._manager
        snapshot_file = manager.resolve_snapshot_file(self._context.source_file)
        value = manager.serialize(actual, serializers)
        snapshot_id = snapshot_file.next_id(self._context.name)

        if manager.mode is SnapshotMode.RECORD:
            snapshot_file.set_snapshot(snapshot_id, value)
            return

        snapshot_file.read_file()
        expected = str(snapshot_file.get_snapshot(template_escape(snapshot_id)))
        if value != expected:
            raise SnapshotMismatchError(
                snapshot=snapshot_id,
                filename=snapshot_file.snapshot_file,
                expected=expected,
                actual=value,
            )


class SnapshotManager:
    """Owns the run mode, configuration and every snapshot file touched in a run."""

    def __init__(self, mode: SnapshotMode, config: SnapshotConfig | None = None) -> None:
        self._mode = SnapshotMode(mode)
        self._config = config if config is not None else current_config()
        self._files: dict[Any, SnapshotFile] = {}
        self._lock = Lock()

    @property
    def mode(self) -> SnapshotMode:
        return self._mode

    @property
    def config(self) -> SnapshotConfig:
        return self._config

    @property
    def files(self) -> Mapping[Any, SnapshotFile]:
        return MappingProxyType(self._files)

    # ------------------------------------------------------------------
    # public API

    def resolve_snapshot_file(self, source_file: Any) -> SnapshotFile:
        """Return the file registered for ``source_file``, opening it on first use."""

        key = os.fspath(source_file) if isinstance(source_file, os.PathLike) else source_file
        with self._lock:
            existing = self._files.get(key)
            if existing is not None:
                return existing

            try:
                resolved = self._config.resolve_path(source_file)
            except Exception as exc:
                raise SnapshotStateError(
                    "Cannot resolve snapshot file.", filename=source_file
                ) from exc
            if not isinstance(resolved, (str, os.PathLike)):
                raise SnapshotStateError("Invalid snapshot filename.", filename=resolved)

            snapshot_file = SnapshotFile(
                os.fspath(resolved), loaded=self._mode is SnapshotMode.RECORD
            )
            self._files[key] = snapshot_file
        logger.debug(
            "snapshot file resolved",
            extra={"data": {"source": str(source_file), "filename": snapshot_file.snapshot_file}},
        )
        return snapshot_file

    def serialize(self, value: Any, serializers: Sequence[Serializer] | None = None) -> str:
        """Serialize ``value`` with ``serializers`` or this manager's default chain."""

        chain = self._config.serializers if serializers is None else serializers
        return serialize(value, chain)

    def create_assert(self, context: TestContext) -> SnapshotAssertion:
        return SnapshotAssertion(self, context)

    def write_snapshot_files(self) -> int:
        """Persist every touched file in record mode; return the number written."""

        if self._mode is SnapshotMode.VERIFY:
            logger.debug(
                "verify mode; snapshot files left untouched",
                extra={"data": {"files": len(self._files)}},
            )
            return 0

        with self._lock:
            files = list(self._files.values())
        for snapshot_file in files:
            snapshot_file.write()
        return len(files)


__all__ = ["SnapshotAssertion", "SnapshotManager", "SnapshotMode", "TestContext"]
