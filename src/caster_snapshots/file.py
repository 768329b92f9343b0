"""In-memory view of one snapshot artifact."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import Lock

from caster_snapshots.codec import parse_snapshot_file, render_snapshot_file, template_escape
from caster_snapshots.errors import (
    MISSING_SNAPSHOT_TIP,
    SnapshotFileMissingError,
    SnapshotFormatError,
    SnapshotStateError,
)

logger = logging.getLogger(__name__)


class SnapshotFile:
    """Snapshots stored for a single test source file.

    ``snapshots`` maps escaped snapshot ids to escaped, newline-wrapped text.
    Files opened in record mode start out ``loaded`` so the artifact on disk
    is never consulted.
    """

    def __init__(self, snapshot_file: str, *, loaded: bool = False) -> None:
        self.snapshot_file = snapshot_file
        self.snapshots: dict[str, object] = {}
        self.loaded = loaded
        self.dirty = False
        self._name_counts: dict[str, int] = {}
        self._lock = Lock()

    def __repr__(self) -> str:
        return f"SnapshotFile({self.snapshot_file!r}, entries={len(self.snapshots)})"

    # ------------------------------------------------------------------
    # ids

    def next_id(self, name: str) -> str:
        """Return ``"<name> <n>"`` and advance the counter for ``name``."""

        with self._lock:
            count = self._name_counts.get(name, 1)
            self._name_counts[name] = count + 1
        return f"{name} {count}"

    # ------------------------------------------------------------------
    # lookup

    def get_snapshot(self, snapshot_id: str) -> object:
        """Return the stored text for an already-escaped id."""

        if snapshot_id not in self.snapshots:
            raise SnapshotStateError(
                f"Snapshot '{snapshot_id}' not found in '{self.snapshot_file}.' "
                f"{MISSING_SNAPSHOT_TIP}",
                snapshot=snapshot_id,
                filename=self.snapshot_file,
            )
        return self.snapshots[snapshot_id]

    def set_snapshot(self, snapshot_id: str, value: object) -> None:
        """Store ``value`` under the escaped form of a raw id."""

        self.snapshots[template_escape(snapshot_id)] = value
        self.dirty = True

    # ------------------------------------------------------------------
    # persistence

    def read_file(self) -> None:
        """Load the artifact from disk once; later calls are no-ops."""

        with self._lock:
            if self.loaded:
                logger.debug(
                    "skipping snapshot read",
                    extra={"data": {"filename": self.snapshot_file}},
                )
                return

            path = Path(self.snapshot_file)
            try:
                source = path.read_text(encoding="utf-8")
            except FileNotFoundError as exc:
                raise SnapshotFileMissingError(
                    f"Cannot read snapshot file '{self.snapshot_file}.' {MISSING_SNAPSHOT_TIP}",
                    filename=self.snapshot_file,
                ) from exc
            except (OSError, UnicodeDecodeError) as exc:
                raise SnapshotStateError(
                    f"Cannot read snapshot file '{self.snapshot_file}.'",
                    filename=self.snapshot_file,
                ) from exc

            try:
                entries = parse_snapshot_file(source, source=self.snapshot_file)
            except SnapshotFormatError as exc:
                raise SnapshotStateError(
                    f"Cannot read snapshot file '{self.snapshot_file}.' The file is corrupt.",
                    filename=self.snapshot_file,
                ) from exc

            self.snapshots.update(entries)
            self.loaded = True
            logger.debug(
                "snapshot file read",
                extra={"data": {"filename": self.snapshot_file, "entries": len(entries)}},
            )

    def write(self) -> None:
        """Persist every stored entry, or nothing if any entry cannot be rendered."""

        try:
            rendered = {key: str(value) for key, value in self.snapshots.items()}
            output = render_snapshot_file(rendered)
            path = Path(self.snapshot_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = Path(f"{path}.tmp")
            try:
                tmp_path.write_text(output, encoding="utf-8")
                os.replace(tmp_path, path)
            finally:
                tmp_path.unlink(missing_ok=True)
        except Exception as exc:
            raise SnapshotStateError(
                f"Cannot write snapshot file '{self.snapshot_file}.'",
                filename=self.snapshot_file,
            ) from exc
        self.dirty = False
        logger.info(
            "snapshot file written",
            extra={"data": {"filename": self.snapshot_file, "entries": len(rendered)}},
        )


__all__ = ["SnapshotFile"]
