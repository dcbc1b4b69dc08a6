"""Caller-facing import surface and the bounded pool that runs imports."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from logging import getLogger
from threading import BoundedSemaphore
from typing import TYPE_CHECKING

from setlistsync.domain.errors import WorkerPoolSaturatedError
from setlistsync.domain.model import ImportTicket, derive_import_key
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta
    from uuid import UUID

    from setlistsync.domain.import_pipeline import ImportOrchestrator
    from setlistsync.domain.model import (
        ExternalIdentifierSet,
        ImportOptions,
        ImportStatus,
        RunReport,
    )
    from setlistsync.domain.ports import ImportStatusStore
    from setlistsync.domain.time_windows import Clock

log = getLogger(__name__)


class WorkerPool:
    """Thread pool with a hard cap on queued plus running work.

    ``submit`` never blocks: when every admission slot is taken it raises
    ``WorkerPoolSaturatedError``. Failures of submitted work are logged.
    """

    def __init__(
        self,
        *,
        max_workers: int,
        max_pending: int,
        thread_name_prefix: str = "setlistsync-import",
    ) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )
        self._slots = BoundedSemaphore(max_workers + max_pending)
        self.capacity = max_workers + max_pending

    def submit[T](self, func: Callable[..., T], /, *args: object, **kwargs: object) -> Future[T]:
        if not self._slots.acquire(blocking=False):
            raise WorkerPoolSaturatedError(
                f"import queue is full ({self.capacity} imports running or queued)"
            )
        try:
            future = self._executor.submit(func, *args, **kwargs)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(self._on_done)
        return future

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _on_done(self, future: Future[object]) -> None:
        self._slots.release()
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.error("Background import failed", exc_info=exc)


class ImportService:
    """Start, run and observe imports."""

    def __init__(
        self,
        *,
        orchestrator: ImportOrchestrator,
        pool: WorkerPool,
        status_retention: timedelta,
        alias_ttl: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        self.orchestrator = orchestrator
        self.pool = pool
        self.status_retention = status_retention
        self.alias_ttl = alias_ttl
        self._clock = clock

    @property
    def store(self) -> ImportStatusStore:
        return self.orchestrator.guard.store

    def start_import(
        self,
        identifiers: ExternalIdentifierSet,
        options: ImportOptions | None = None,
    ) -> ImportTicket:
        """Admit an import and hand it to the worker pool.

        Returns a ticket naming the key to poll. If a run for the same artist is
        already live the ticket is not accepted and carries that run's status.
        """

        entity_id = self._known_entity_id(identifiers)
        import_key = derive_import_key(identifiers, entity_id=entity_id)
        admission = self.orchestrator.guard.begin_run(import_key)
        if not admission.proceed:
            return ImportTicket(
                accepted=False,
                import_key=admission.import_key,
                existing_status=admission.status,
            )
        try:
            self.pool.submit(
                self.orchestrator.run,
                identifiers,
                options,
                entity_id=entity_id,
                admitted=admission.status,
            )
        except WorkerPoolSaturatedError as exc:
            self.store.write(admission.status.fail(str(exc), now=self._clock()))
            raise
        log.info("Accepted import %s", import_key)
        return ImportTicket(accepted=True, import_key=import_key)

    def run_import(
        self,
        identifiers: ExternalIdentifierSet,
        options: ImportOptions | None = None,
    ) -> RunReport:
        """Run an import in the calling thread, still guarded against duplicates."""

        entity_id = self._known_entity_id(identifiers)
        return self.orchestrator.run(identifiers, options, entity_id=entity_id)

    def get_status(self, import_key: str) -> ImportStatus | None:
        return self.store.read(import_key)

    def list_active(self) -> list[ImportStatus]:
        return self.store.list_active()

    def cleanup(self) -> int:
        now = self._clock()
        removed = self.store.purge(
            finished_before=now - self.status_retention,
            aliases_before=now - self.alias_ttl,
        )
        if removed:
            log.info("Purged %d expired import statuses", removed)
        return removed

    def shutdown(self, *, wait: bool = True) -> None:
        self.pool.shutdown(wait=wait)

    def _known_entity_id(self, identifiers: ExternalIdentifierSet) -> UUID | None:
        if identifiers.is_empty:
            raise ValueError("At least one of catalog id, ticketing id or name is required")
        record = self.orchestrator.resolver.lookup_local(identifiers)
        return record.id if record is not None else None
