"""Registry of recurring sync jobs and the batch handlers they run."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.domain.errors import JobAlreadyRunningError, UnknownJobError
from setlistsync.domain.model import RunReport, SchedulerState, permanent_import_key
from setlistsync.domain.time_windows import FreshnessWindow, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, timedelta

    from setlistsync.domain.import_pipeline import ImportOrchestrator
    from setlistsync.domain.import_service import ImportService
    from setlistsync.domain.model import ImportOptions
    from setlistsync.domain.ports import ArtistDatastore, JobTrigger
    from setlistsync.domain.time_windows import Clock

log = getLogger(__name__)

type JobHandler = Callable[[], list[RunReport]]


@dataclass(slots=True)
class SyncJob:
    name: str
    schedule: str
    handler: JobHandler
    enabled: bool = True
    running: bool = False
    run_count: int = 0
    last_run_at: datetime | None = None
    last_finished_at: datetime | None = None
    last_error: str | None = None
    last_reports: list[RunReport] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class JobStatus:
    name: str
    schedule: str
    enabled: bool
    running: bool
    run_count: int
    last_run_at: datetime | None
    last_finished_at: datetime | None
    last_error: str | None
    last_processed: int
    last_failed: int


@dataclass(slots=True, frozen=True)
class SchedulerHealth:
    state: SchedulerState
    running_job_count: int
    last_run_at: datetime | None
    last_error: str | None
    job_count: int
    enabled_job_count: int


class SyncScheduler:
    """Explicit, injectable job registry with an ``init -> running -> stopped`` lifecycle.

    Timing is delegated to an optional ``JobTrigger``; without one, jobs only run
    through ``run_now``. A job never overlaps itself, but different jobs run
    independently of each other.
    """

    def __init__(self, *, trigger: JobTrigger | None = None, clock: Clock = utcnow) -> None:
        self._trigger = trigger
        self._clock = clock
        self._jobs: dict[str, SyncJob] = {}
        self._lock = threading.Lock()
        self._state = SchedulerState.INIT

    @property
    def state(self) -> SchedulerState:
        return self._state

    def register_job(
        self,
        name: str,
        schedule: str,
        handler: JobHandler,
        *,
        enabled: bool = True,
    ) -> None:
        with self._lock:
            if name in self._jobs:
                raise ValueError(f"Sync job {name} is already registered")
            self._jobs[name] = SyncJob(name=name, schedule=schedule, handler=handler, enabled=enabled)
        if enabled and self._state is SchedulerState.RUNNING:
            self._arm(name, schedule)
        log.debug("Registered sync job %s (%s)", name, schedule)

    def enable(self, name: str) -> None:
        with self._lock:
            job = self._get(name)
            job.enabled = True
            schedule = job.schedule
        if self._state is SchedulerState.RUNNING:
            self._arm(name, schedule)
        log.info("Enabled sync job %s", name)

    def disable(self, name: str) -> None:
        with self._lock:
            self._get(name).enabled = False
        if self._state is SchedulerState.RUNNING and self._trigger is not None:
            self._trigger.unschedule(name)
        log.info("Disabled sync job %s", name)

    def update_schedule(self, name: str, schedule: str) -> None:
        with self._lock:
            job = self._get(name)
            job.schedule = schedule
            enabled = job.enabled
        if enabled and self._state is SchedulerState.RUNNING:
            self._arm(name, schedule)
        log.info("Rescheduled sync job %s to %s", name, schedule)

    def run_now(self, name: str) -> list[RunReport]:
        """Run a job in the calling thread, regardless of its enabled flag."""

        with self._lock:
            job = self._get(name)
            if job.running:
                raise JobAlreadyRunningError(name)
            job.running = True
            job.last_run_at = self._clock()
            handler = job.handler

        log.info("Sync job %s started", name)
        try:
            reports = handler()
        except Exception as exc:
            with self._lock:
                job.running = False
                job.run_count += 1
                job.last_finished_at = self._clock()
                job.last_error = str(exc)
                job.last_reports = []
            log.exception("Sync job %s failed", name)
            raise

        failed = [report for report in reports if not report.success and not report.already_running]
        with self._lock:
            job.running = False
            job.run_count += 1
            job.last_finished_at = self._clock()
            job.last_reports = reports
            job.last_error = (
                f"{len(failed)} of {len(reports)} imports failed" if failed else None
            )
        log.info(
            "Sync job %s finished: %d processed, %d failed", name, len(reports), len(failed)
        )
        return reports

    def list_jobs(self) -> list[JobStatus]:
        with self._lock:
            return [_job_status(job) for job in self._jobs.values()]

    def health_status(self) -> SchedulerHealth:
        with self._lock:
            jobs = list(self._jobs.values())
            run_times = [job.last_run_at for job in jobs if job.last_run_at is not None]
            failing = [job for job in jobs if job.last_error and job.last_finished_at]
            latest_error = max(
                failing,
                key=lambda job: job.last_finished_at,  # pyright: ignore[reportArgumentType]
                default=None,
            )
            return SchedulerHealth(
                state=self._state,
                running_job_count=sum(1 for job in jobs if job.running),
                last_run_at=max(run_times, default=None),
                last_error=(
                    f"{latest_error.name}: {latest_error.last_error}" if latest_error else None
                ),
                job_count=len(jobs),
                enabled_job_count=sum(1 for job in jobs if job.enabled),
            )

    def start(self) -> None:
        if self._state is not SchedulerState.INIT:
            raise RuntimeError(f"Cannot start a scheduler in state {self._state}")
        self._state = SchedulerState.RUNNING
        with self._lock:
            armed = [(job.name, job.schedule) for job in self._jobs.values() if job.enabled]
        for name, schedule in armed:
            self._arm(name, schedule)
        if self._trigger is not None:
            self._trigger.start()
        log.info("Scheduler started with %d enabled jobs", len(armed))

    def stop(self, *, wait: bool = True) -> None:
        if self._state is SchedulerState.STOPPED:
            return
        self._state = SchedulerState.STOPPED
        if self._trigger is not None:
            self._trigger.shutdown(wait=wait)
        log.info("Scheduler stopped")

    def fire(self, name: str) -> None:
        """Entry point for the trigger backend."""

        with self._lock:
            job = self._jobs.get(name)
            if job is None or not job.enabled:
                return
        if self._state is not SchedulerState.RUNNING:
            return
        try:
            self.run_now(name)
        except JobAlreadyRunningError:
            log.warning("Skipping %s: previous run still in progress", name)
        except Exception:  # noqa: BLE001
            # already recorded on the job and logged by run_now
            return

    def _arm(self, name: str, schedule: str) -> None:
        if self._trigger is None:
            return
        self._trigger.schedule(name, schedule, lambda: self.fire(name))

    def _get(self, name: str) -> SyncJob:
        try:
            return self._jobs[name]
        except KeyError:
            raise UnknownJobError(name) from None


def _job_status(job: SyncJob) -> JobStatus:
    return JobStatus(
        name=job.name,
        schedule=job.schedule,
        enabled=job.enabled,
        running=job.running,
        run_count=job.run_count,
        last_run_at=job.last_run_at,
        last_finished_at=job.last_finished_at,
        last_error=job.last_error,
        last_processed=len(job.last_reports),
        last_failed=sum(
            1 for report in job.last_reports if not report.success and not report.already_running
        ),
    )


def build_stale_artist_handler(
    *,
    datastore: ArtistDatastore,
    orchestrator: ImportOrchestrator,
    freshness: timedelta,
    batch_size: int,
    options: ImportOptions,
    clock: Clock = utcnow,
) -> JobHandler:
    """Handler that re-imports the artists whose last sync is older than ``freshness``.

    Each artist runs in isolation: an exception for one is logged, recorded as a
    failed report and the batch moves on.
    """

    window = FreshnessWindow(freshness)

    def handler() -> list[RunReport]:
        stale = datastore.list_stale_entities(
            synced_before=window.cutoff(clock=clock),
            limit=batch_size,
            full=options.sync_catalog,
        )
        reports: list[RunReport] = []
        for record in stale:
            try:
                report = orchestrator.run(record.identifiers, options, entity_id=record.id)
            except Exception as exc:  # noqa: BLE001
                log.exception("Scheduled import of %s (%s) crashed", record.name, record.id)
                report = RunReport(
                    import_key=permanent_import_key(record.id),
                    identifiers=record.identifiers,
                    entity_id=record.id,
                    error=str(exc),
                )
            reports.append(report)
        return reports

    return handler


def build_cleanup_handler(service: ImportService) -> JobHandler:
    def handler() -> list[RunReport]:
        service.cleanup()
        return []

    return handler
