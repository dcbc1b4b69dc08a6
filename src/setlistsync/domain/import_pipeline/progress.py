"""Status bookkeeping for one run."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.domain.model import StepName

if TYPE_CHECKING:
    from uuid import UUID

    from setlistsync.domain.model import ImportOptions, ImportStage, ImportStatus
    from setlistsync.domain.ports import ImportStatusStore
    from setlistsync.domain.time_windows import Clock

log = getLogger(__name__)


class StatusTracker:
    """Write the run's status to the store after every transition.

    Progress is ``finished / total * 100`` where the total counts resolution, core
    sync and each enabled optional step; skipped steps count as finished.
    """

    def __init__(
        self,
        store: ImportStatusStore,
        status: ImportStatus,
        *,
        options: ImportOptions,
        clock: Clock,
    ) -> None:
        self._store = store
        self._status = status
        self._clock = clock
        self.total_steps = 1 + sum(1 for name in StepName if options.is_enabled(name))
        self.finished_steps = 0

    @property
    def status(self) -> ImportStatus:
        return self._status

    @property
    def progress(self) -> float:
        return self.finished_steps / self.total_steps * 100

    def replace(self, status: ImportStatus) -> None:
        """Adopt a status written elsewhere (e.g. by a key promotion)."""

        self._status = status

    def step_finished(self) -> None:
        self.finished_steps = min(self.finished_steps + 1, self.total_steps)

    def advance(
        self, stage: ImportStage, message: str, *, entity_id: UUID | None = None
    ) -> ImportStatus:
        self._status = self._status.advance(
            stage,
            progress=self.progress,
            message=message,
            now=self._clock(),
            entity_id=entity_id,
        )
        self._store.write(self._status)
        log.info(
            "[%s] %s (%d%%): %s",
            self._status.import_key,
            stage,
            self._status.progress_percent,
            message,
        )
        return self._status

    def complete(self, message: str, *, entity_id: UUID | None = None) -> ImportStatus:
        self._status = self._status.complete(
            now=self._clock(), message=message, entity_id=entity_id
        )
        self._store.write(self._status)
        log.info("[%s] completed: %s", self._status.import_key, message)
        return self._status

    def fail(self, error: str) -> ImportStatus:
        stage = self._status.stage
        self._status = self._status.fail(error, now=self._clock())
        self._store.write(self._status)
        log.error("[%s] failed at %s: %s", self._status.import_key, stage, error)
        return self._status
