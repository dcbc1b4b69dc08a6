"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    SPOTIFY = "spotify"
    TICKETMASTER = "ticketmaster"
    SETLISTFM = "setlistfm"


class ImportStage(StrEnum):
    """Stages of one import run, in the order a run passes through them."""

    INITIALIZING = "initializing"
    RESOLVING = "resolving"
    SYNCING_CORE = "syncing-core"
    SYNCING_CATALOG = "syncing-catalog"
    SYNCING_EVENTS = "syncing-events"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportStage.COMPLETED, ImportStage.FAILED)

    @property
    def rank(self) -> int:
        return _STAGE_RANK[self]

    def can_move_to(self, target: ImportStage) -> bool:
        """Return whether a status at this stage may be rewritten at ``target``."""

        if self.is_terminal:
            return False
        if target is ImportStage.FAILED:
            return True
        return target.rank >= self.rank


_STAGE_RANK: dict[ImportStage, int] = {
    ImportStage.INITIALIZING: 0,
    ImportStage.RESOLVING: 1,
    ImportStage.SYNCING_CORE: 2,
    ImportStage.SYNCING_CATALOG: 3,
    ImportStage.SYNCING_EVENTS: 4,
    ImportStage.FINALIZING: 5,
    ImportStage.COMPLETED: 6,
    ImportStage.FAILED: 6,
}


class StepName(StrEnum):
    SYNC_CORE = "sync-core"
    SYNC_CATALOG = "sync-catalog"
    SYNC_EVENTS = "sync-events"
    CREATE_DEFAULTS = "create-defaults"


class StepStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SchedulerState(StrEnum):
    INIT = "init"
    RUNNING = "running"
    STOPPED = "stopped"
