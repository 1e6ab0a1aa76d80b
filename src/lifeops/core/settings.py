"""Environment-driven settings for lifeops.

Every knob can be overridden with an environment variable prefixed with
``LIFEOPS_`` or through a ``.env`` file in the working directory.

Examples:
    >>> from lifeops.core.settings import LifeOpsSettings
    >>> s = LifeOpsSettings(pipeline_interval_minutes=15)
    >>> s.pipeline_interval.total_seconds()
    900.0

Tags:
    settings, configuration, pydantic, environment, lifeops
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LifeOpsSettings(BaseSettings):
    """Settings shared by the CLI, the API and the pipeline operations.

    Fields
    ──────
    database_path            : SQLite file holding every lifeops table
    job_name                 : Name under which pipeline runs are recorded
    pipeline_interval_minutes: External scheduler cadence (advisory ``next_due_at``)
    health_window_hours      : Trailing window for run-health queries
    log_level / json_logs    : Structlog configuration
    host / port / api_prefix : HTTP transport
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFEOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_path: Path = Field(
        default_factory=lambda: Path.home() / ".lifeops" / "lifeops.db",
        description="SQLite database file",
    )

    # ── Pipeline ─────────────────────────────────────────────────
    job_name: str = "lifeops_pipeline"
    pipeline_interval_minutes: int = Field(default=30, gt=0)
    health_window_hours: int = Field(default=24, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── HTTP ─────────────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = 8030
    api_prefix: str = "/api/v1"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def pipeline_interval(self) -> timedelta:
        return timedelta(minutes=self.pipeline_interval_minutes)

    @property
    def health_window(self) -> timedelta:
        return timedelta(hours=self.health_window_hours)


@lru_cache(maxsize=1)
def get_settings() -> LifeOpsSettings:
    """Cached settings, loaded once per process."""
    return LifeOpsSettings()
