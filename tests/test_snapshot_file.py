from __future__ import annotations

from pathlib import Path

import pytest

from caster_snapshots.errors import (
    SnapshotFileMissingError,
    SnapshotFormatError,
    SnapshotStateError,
)
from caster_snapshots.file import SnapshotFile
from caster_snapshots.manager import SnapshotManager, SnapshotMode


def test_next_id_counts_per_name() -> None:
    file = SnapshotFile("unused.snapshot")

    assert file.next_id("foo") == "foo 1"
    assert file.next_id("foo") == "foo 2"
    assert file.next_id("bar") == "bar 1"
    assert file.next_id("baz") == "baz 1"
    assert file.next_id("foo") == "foo 3"
    assert file.next_id("foo`") == "foo` 1"
    assert file.next_id("foo\\") == "foo\\ 1"
    assert file.next_id("foo`${x}`") == "foo`${x}` 1"


def test_next_id_counters_are_scoped_to_one_file() -> None:
    first = SnapshotFile("a.snapshot")
    second = SnapshotFile("b.snapshot")

    first.next_id("foo")
    first.next_id("foo")

    assert second.next_id("foo") == "foo 1"


def test_reads_individual_snapshots(fixtures_dir: Path) -> None:
    manager = SnapshotManager(SnapshotMode.VERIFY)
    file = manager.resolve_snapshot_file(str(fixtures_dir / "simple.py"))

    file.read_file()

    assert file.loaded is True
    assert file.get_snapshot("foo 1") == '\n{\n  "bar": 1,\n  "baz": 2\n}\n'
    assert file.get_snapshot("quoted \\`name\\` 1") == "\na\\${b}\\\\c\n"


def test_read_file_is_memoized(fixtures_dir: Path) -> None:
    manager = SnapshotManager(SnapshotMode.VERIFY)
    file = manager.resolve_snapshot_file(str(fixtures_dir / "simple.py"))
    file.read_file()
    file.snapshots["foo 1"] = "changed"

    file.read_file()

    assert file.get_snapshot("foo 1") == "changed"


def test_snapshot_file_is_not_read_in_record_mode(fixtures_dir: Path) -> None:
    manager = SnapshotManager(SnapshotMode.RECORD)
    file = manager.resolve_snapshot_file(str(fixtures_dir / "simple.py"))

    file.read_file()

    with pytest.raises(SnapshotStateError, match="Snapshot 'foo 1' not found"):
        file.get_snapshot("foo 1")


def test_malformed_snapshot_file_raises(fixtures_dir: Path) -> None:
    manager = SnapshotManager(SnapshotMode.VERIFY)
    file = manager.resolve_snapshot_file(str(fixtures_dir / "malformed.py"))

    with pytest.raises(SnapshotStateError, match="Cannot read snapshot") as excinfo:
        file.read_file()

    assert excinfo.value.filename == file.snapshot_file
    assert isinstance(excinfo.value.__cause__, SnapshotFormatError)
    assert "Malformed snapshot file" in str(excinfo.value.__cause__)
    assert file.loaded is False


def test_missing_snapshot_file_provides_tip(tmp_path: Path) -> None:
    manager = SnapshotManager(SnapshotMode.VERIFY)
    file = manager.resolve_snapshot_file(str(tmp_path / "this-file-should-not-exist.py"))

    with pytest.raises(
        SnapshotFileMissingError,
        match="Missing snapshots can be generated by rerunning the command",
    ) as excinfo:
        file.read_file()

    assert excinfo.value.filename == file.snapshot_file
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_missing_snapshot_id_raises_with_context(fixtures_dir: Path) -> None:
    manager = SnapshotManager(SnapshotMode.VERIFY)
    file = manager.resolve_snapshot_file(str(fixtures_dir / "simple.py"))

    with pytest.raises(SnapshotStateError, match="Snapshot 'does not exist 1' not found") as excinfo:
        file.get_snapshot("does not exist 1")

    assert excinfo.value.snapshot == "does not exist 1"
    assert excinfo.value.filename == file.snapshot_file


def test_snapshot_ids_are_escaped_when_stored() -> None:
    file = SnapshotFile("unused.snapshot")

    file.set_snapshot("foo`${x}` 1", "test")

    assert file.dirty is True
    assert file.get_snapshot("foo\\`\\${x}\\` 1") == "test"
    with pytest.raises(SnapshotStateError):
        file.get_snapshot("foo`${x}` 1")


def test_write_creates_parent_directories(tmp_path: Path) -> None:
    target = tmp_path / "foo" / "bar" / "baz" / "test.py.snapshot"
    file = SnapshotFile(str(target), loaded=True)
    file.set_snapshot("foo 1", "\nfoo value\n")

    file.write()

    assert target.read_text(encoding="utf-8") == "exports[`foo 1`] = `\nfoo value\n`;\n"
    assert file.dirty is False
    assert not Path(f"{target}.tmp").exists()


def test_written_file_reads_back(tmp_path: Path) -> None:
    target = tmp_path / "round.py.snapshot"
    writer = SnapshotFile(str(target), loaded=True)
    writer.set_snapshot("a`b 1", "\nx\\`y\n")
    writer.set_snapshot("plain 1", "\nplain\n")
    writer.write()

    reader = SnapshotFile(str(target))
    reader.read_file()

    assert reader.snapshots == {"a\\`b 1": "\nx\\`y\n", "plain 1": "\nplain\n"}


def test_write_failure_leaves_no_file(tmp_path: Path) -> None:
    target = tmp_path / "test4.py.snapshot"
    error = RuntimeError("boom")

    class Exploding:
        def __str__(self) -> str:
            raise error

    file = SnapshotFile(str(target), loaded=True)
    file.set_snapshot("ok 1", "\nfine\n")
    file.snapshots["foo 1"] = Exploding()

    with pytest.raises(SnapshotStateError, match="Cannot write snapshot file") as excinfo:
        file.write()

    assert excinfo.value.filename == str(target)
    assert excinfo.value.__cause__ is error
    assert not target.exists()


def test_failed_replace_leaves_no_temporary_file(tmp_path: Path) -> None:
    target = tmp_path / "t.py.snapshot"
    target.mkdir()
    file = SnapshotFile(str(target), loaded=True)
    file.set_snapshot("foo 1", "\nfoo value\n")

    with pytest.raises(SnapshotStateError, match="Cannot write snapshot file") as excinfo:
        file.write()

    assert excinfo.value.filename == str(target)
    assert sorted(entry.name for entry in tmp_path.iterdir()) == ["t.py.snapshot"]
    assert target.is_dir()
    assert file.dirty is True
