"""pytest integration: ``--update-snapshots`` flag, ``snapshot`` fixture, end-of-run flush."""

from __future__ import annotations

import logging

import pytest

from caster_snapshots.manager import SnapshotAssertion, SnapshotManager, SnapshotMode, TestContext
from caster_snapshots.observability.logging import configure_logging
from caster_snapshots.settings import SnapshotSettings

logger = logging.getLogger(__name__)

_MODE_KEY = pytest.StashKey[SnapshotMode]()
_MANAGER_KEY = pytest.StashKey[SnapshotManager]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("snapshots")
    group.addoption(
        "--update-snapshots",
        action="store_true",
        default=None,
        dest="update_snapshots",
        help="Regenerate snapshot files instead of comparing against them.",
    )


def pytest_configure(config: pytest.Config) -> None:
    settings = SnapshotSettings.load()
    configure_logging(level=settings.log_level, json_payload=settings.log_json)

    flag = config.getoption("update_snapshots", default=None)
    update_snapshots = settings.update_snapshots if flag is None else bool(flag)
    config.stash[_MODE_KEY] = SnapshotMode.from_flag(update_snapshots)


def pytest_report_header(config: pytest.Config) -> str:
    return f"snapshots: {config.stash[_MODE_KEY].value} mode"


def get_snapshot_manager(config: pytest.Config) -> SnapshotManager:
    """Return the session's manager, creating it on first use.

    Creation is deferred so configuration set from conftest modules is
    picked up by the manager.
    """

    manager = config.stash.get(_MANAGER_KEY, None)
    if manager is None:
        manager = SnapshotManager(config.stash[_MODE_KEY])
        config.stash[_MANAGER_KEY] = manager
        logger.debug("snapshot manager created", extra={"data": {"mode": manager.mode.value}})
    return manager


def _stable_test_name(node: pytest.Item) -> str:
    _, sep, name = node.nodeid.partition("::")
    return name if sep else node.name


@pytest.fixture
def snapshot(request: pytest.FixtureRequest) -> SnapshotAssertion:
    """Assert that a value matches the snapshot stored for the current test."""

    manager = get_snapshot_manager(request.config)
    context = TestContext(source_file=str(request.node.path), name=_stable_test_name(request.node))
    return manager.create_assert(context)


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    manager = session.config.stash.get(_MANAGER_KEY, None)
    if manager is None:
        return
    written = manager.write_snapshot_files()
    if written:
        logger.info(
            "snapshot files written",
            extra={"data": {"files": written, "exitstatus": int(exitstatus)}},
        )


__all__ = ["get_snapshot_manager", "snapshot"]
