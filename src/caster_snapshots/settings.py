"""Environment-driven settings for snapshot runs."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SnapshotSettings(BaseSettings):
    """Snapshot run configuration resolved from the environment.

    The command-line ``--update-snapshots`` flag takes precedence over
    ``update_snapshots``; the logging fields feed ``configure_logging``.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    update_snapshots: bool = Field(default=False, alias="CASTER_SNAPSHOTS_UPDATE")
    log_level: str = Field(default="WARNING", alias="CASTER_SNAPSHOTS_LOG_LEVEL")
    log_json: bool = Field(
        default=False,
        alias="CASTER_SNAPSHOTS_LOG_JSON",
        description="Emit log lines as JSON payloads instead of plain text.",
    )

    @classmethod
    def load(cls) -> SnapshotSettings:
        instance = cls()
        logger = logging.getLogger("caster_snapshots.settings")
        logger.info("snapshot settings loaded: %r", instance)
        return instance


__all__ = ["SnapshotSettings"]
