"""Import pipeline and scheduler defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from .env import optional_env_int

DEFAULT_STALENESS_MINUTES = 30
DEFAULT_MAX_RUN_MINUTES = 15
DEFAULT_STATUS_RETENTION = timedelta(hours=24)
DEFAULT_ALIAS_TTL = timedelta(hours=1)
DEFAULT_IMPORT_WORKERS = 4
DEFAULT_MAX_PENDING_IMPORTS = 32
DEFAULT_SEED_SONG_COUNT = 5


@dataclass(frozen=True, slots=True)
class StepRetryConfig:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    multiplier: float = 2.0
    max_delay_seconds: float = 30.0


@dataclass(frozen=True, slots=True)
class ImportConfig:
    staleness_window: timedelta = timedelta(minutes=DEFAULT_STALENESS_MINUTES)
    max_run_duration: timedelta = timedelta(minutes=DEFAULT_MAX_RUN_MINUTES)
    status_retention: timedelta = DEFAULT_STATUS_RETENTION
    alias_ttl: timedelta = DEFAULT_ALIAS_TTL
    step_retry: StepRetryConfig = field(default_factory=StepRetryConfig)
    worker_count: int = DEFAULT_IMPORT_WORKERS
    max_pending: int = DEFAULT_MAX_PENDING_IMPORTS
    seed_song_count: int = DEFAULT_SEED_SONG_COUNT


@dataclass(frozen=True, slots=True)
class SyncJobConfig:
    """Schedule and batch selection for one recurring job."""

    name: str
    cron: str
    freshness: timedelta
    batch_size: int
    sync_catalog: bool = True
    sync_events: bool = True
    create_defaults: bool = True
    cleanup: bool = False


DEFAULT_SYNC_JOBS: tuple[SyncJobConfig, ...] = (
    SyncJobConfig(
        name="daily-full-sync",
        cron="0 3 * * *",
        freshness=timedelta(hours=24),
        batch_size=25,
    ),
    SyncJobConfig(
        name="hourly-light-sync",
        cron="0 * * * *",
        freshness=timedelta(hours=1),
        batch_size=10,
        sync_catalog=False,
    ),
    SyncJobConfig(
        name="import-status-cleanup",
        cron="*/30 * * * *",
        freshness=timedelta(0),
        batch_size=0,
        sync_catalog=False,
        sync_events=False,
        create_defaults=False,
        cleanup=True,
    ),
)


def get_import_config() -> ImportConfig:
    staleness = optional_env_int("SETLISTSYNC_STALENESS_MINUTES", DEFAULT_STALENESS_MINUTES)
    max_run = optional_env_int("SETLISTSYNC_MAX_RUN_MINUTES", DEFAULT_MAX_RUN_MINUTES)
    return ImportConfig(
        staleness_window=timedelta(minutes=staleness),
        max_run_duration=timedelta(minutes=max_run),
        worker_count=optional_env_int("SETLISTSYNC_IMPORT_WORKERS", DEFAULT_IMPORT_WORKERS),
        max_pending=optional_env_int(
            "SETLISTSYNC_MAX_PENDING_IMPORTS", DEFAULT_MAX_PENDING_IMPORTS
        ),
    )
