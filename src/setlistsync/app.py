"""Application wiring: build the import service and the sync scheduler."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.adapters.spotify import SpotifyCatalogProvider
from setlistsync.adapters.sqlalchemy import (
    SqlAlchemyArtistDatastore,
    SqlAlchemyImportStatusStore,
    is_started,
    startup,
)
from setlistsync.adapters.ticketmaster import TicketmasterTicketingProvider
from setlistsync.config import DEFAULT_SYNC_JOBS, get_import_config
from setlistsync.domain.identity import IdentityResolver
from setlistsync.domain.import_pipeline import ConcurrencyGuard, ImportOrchestrator, ImportSteps
from setlistsync.domain.import_service import ImportService, WorkerPool
from setlistsync.domain.model import ImportOptions
from setlistsync.domain.retry import RetryPolicy
from setlistsync.domain.scheduling import (
    SyncScheduler,
    build_cleanup_handler,
    build_stale_artist_handler,
)
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from setlistsync.config import ImportConfig, StepRetryConfig, SyncJobConfig
    from setlistsync.domain.ports import (
        ArtistDatastore,
        CatalogProvider,
        ImportStatusStore,
        JobTrigger,
        TicketingProvider,
    )
    from setlistsync.domain.retry import Sleep
    from setlistsync.domain.time_windows import Clock

log = getLogger(__name__)


def retry_policy_from_config(config: StepRetryConfig) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=config.max_attempts,
        base_delay=config.base_delay_seconds,
        multiplier=config.multiplier,
        max_delay=config.max_delay_seconds,
    )


def build_import_service(
    *,
    catalog: CatalogProvider | None = None,
    ticketing: TicketingProvider | None = None,
    datastore: ArtistDatastore | None = None,
    status_store: ImportStatusStore | None = None,
    config: ImportConfig | None = None,
    sleep: Sleep = time.sleep,
    clock: Clock = utcnow,
) -> ImportService:
    """Assemble the import service from configured adapters.

    Any collaborator can be injected; the defaults are the Spotify catalog, the
    Ticketmaster discovery API and the SQL datastore, which is started on demand.
    """

    effective_config = config or get_import_config()
    if (datastore is None or status_store is None) and not is_started():
        startup()
    effective_datastore = datastore or SqlAlchemyArtistDatastore()
    effective_store = status_store or SqlAlchemyImportStatusStore()
    effective_catalog = catalog or SpotifyCatalogProvider()
    effective_ticketing = ticketing or TicketmasterTicketingProvider()
    retry_policy = retry_policy_from_config(effective_config.step_retry)

    resolver = IdentityResolver(
        catalog=effective_catalog,
        ticketing=effective_ticketing,
        datastore=effective_datastore,
        retry_policy=retry_policy,
        sleep=sleep,
        clock=clock,
    )
    steps = ImportSteps(
        catalog=effective_catalog,
        ticketing=effective_ticketing,
        datastore=effective_datastore,
        retry_policy=retry_policy,
        sleep=sleep,
        clock=clock,
        seed_song_count=effective_config.seed_song_count,
    )
    guard = ConcurrencyGuard(
        effective_store,
        staleness_window=effective_config.staleness_window,
        clock=clock,
    )
    orchestrator = ImportOrchestrator(
        resolver=resolver,
        steps=steps,
        guard=guard,
        max_run_duration=effective_config.max_run_duration,
        clock=clock,
    )
    pool = WorkerPool(
        max_workers=effective_config.worker_count,
        max_pending=effective_config.max_pending,
    )
    log.debug(
        "Import service ready: workers=%s, max_pending=%s, staleness=%s",
        effective_config.worker_count,
        effective_config.max_pending,
        effective_config.staleness_window,
    )
    return ImportService(
        orchestrator=orchestrator,
        pool=pool,
        status_retention=effective_config.status_retention,
        alias_ttl=effective_config.alias_ttl,
        clock=clock,
    )


def build_sync_scheduler(
    service: ImportService,
    *,
    datastore: ArtistDatastore | None = None,
    jobs: Iterable[SyncJobConfig] = DEFAULT_SYNC_JOBS,
    trigger: JobTrigger | None = None,
    clock: Clock = utcnow,
) -> SyncScheduler:
    """Register the recurring jobs on a scheduler that is not yet started."""

    effective_datastore = datastore or service.orchestrator.steps.datastore
    scheduler = SyncScheduler(trigger=trigger, clock=clock)
    for job in jobs:
        if job.cleanup:
            handler = build_cleanup_handler(service)
        else:
            handler = build_stale_artist_handler(
                datastore=effective_datastore,
                orchestrator=service.orchestrator,
                freshness=job.freshness,
                batch_size=job.batch_size,
                options=ImportOptions(
                    sync_catalog=job.sync_catalog,
                    sync_events=job.sync_events,
                    create_defaults=job.create_defaults,
                ),
                clock=clock,
            )
        scheduler.register_job(job.name, job.cron, handler)
    return scheduler
