from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from caster_snapshots.config import reset_snapshot_config

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    reset_snapshot_config()
    yield
    reset_snapshot_config()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES
