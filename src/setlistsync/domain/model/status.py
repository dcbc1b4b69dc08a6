"""Import status records and their state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .enums import ImportStage

if TYPE_CHECKING:
    from datetime import datetime, timedelta
    from uuid import UUID


class InvalidStatusTransitionError(ValueError):
    """Raised when a status update would move a run backwards or past a terminal state."""


def clamp_progress(value: float) -> int:
    return int(max(0, min(100, round(value))))


@dataclass(slots=True, frozen=True)
class ImportStatus:
    """Latest known state of one import run.

    ``alias_of`` is set on a promoted status and names the provisional key that now
    resolves to it.
    """

    import_key: str
    stage: ImportStage
    progress_percent: int
    message: str
    started_at: datetime
    updated_at: datetime
    error: str | None = None
    completed_at: datetime | None = None
    entity_id: UUID | None = None
    alias_of: str | None = None

    @classmethod
    def initial(
        cls,
        import_key: str,
        *,
        now: datetime,
        message: str = "Import queued",
    ) -> ImportStatus:
        return cls(
            import_key=import_key,
            stage=ImportStage.INITIALIZING,
            progress_percent=0,
            message=message,
            started_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        return self.stage.is_terminal

    def is_stale(self, now: datetime, window: timedelta) -> bool:
        """A non-terminal run older than ``window`` is considered abandoned."""

        return not self.is_terminal and now - self.started_at > window

    def advance(
        self,
        stage: ImportStage,
        *,
        progress: float,
        message: str,
        now: datetime,
        entity_id: UUID | None = None,
    ) -> ImportStatus:
        if stage.is_terminal:
            raise InvalidStatusTransitionError(
                f"Use complete() or fail() to reach {stage}; got advance({stage})"
            )
        self._check_transition(stage)
        percent = clamp_progress(progress)
        if percent < self.progress_percent:
            raise InvalidStatusTransitionError(
                f"{self.import_key}: progress cannot decrease "
                f"({self.progress_percent} -> {percent})"
            )
        return replace(
            self,
            stage=stage,
            progress_percent=percent,
            message=message,
            updated_at=now,
            entity_id=entity_id or self.entity_id,
        )

    def complete(
        self,
        *,
        now: datetime,
        message: str = "Import completed",
        entity_id: UUID | None = None,
    ) -> ImportStatus:
        self._check_transition(ImportStage.COMPLETED)
        return replace(
            self,
            stage=ImportStage.COMPLETED,
            progress_percent=100,
            message=message,
            updated_at=now,
            completed_at=now,
            entity_id=entity_id or self.entity_id,
        )

    def fail(self, error: str, *, now: datetime, message: str | None = None) -> ImportStatus:
        self._check_transition(ImportStage.FAILED)
        return replace(
            self,
            stage=ImportStage.FAILED,
            message=message or f"Import failed: {error}",
            error=error,
            updated_at=now,
            completed_at=now,
        )

    def rekey(self, import_key: str, *, alias_of: str | None = None) -> ImportStatus:
        return replace(self, import_key=import_key, alias_of=alias_of)

    def estimated_seconds_remaining(self, now: datetime) -> float | None:
        """Linear estimate from elapsed time and progress; ``None`` before any progress."""

        if self.is_terminal:
            return 0.0
        if self.progress_percent <= 0:
            return None
        elapsed = (now - self.started_at).total_seconds()
        total = elapsed / (self.progress_percent / 100)
        return max(0.0, total - elapsed)

    def _check_transition(self, target: ImportStage) -> None:
        if not self.stage.can_move_to(target):
            raise InvalidStatusTransitionError(
                f"{self.import_key}: cannot move from {self.stage} to {target}"
            )
