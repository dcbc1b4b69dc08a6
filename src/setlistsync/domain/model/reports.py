"""Run options, per-step results and the run report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import StepName, StepStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .identifiers import ExternalIdentifierSet
    from .status import ImportStatus


@dataclass(slots=True, frozen=True)
class ImportOptions:
    """Which optional steps a run executes."""

    sync_catalog: bool = True
    sync_events: bool = True
    create_defaults: bool = True

    @classmethod
    def full(cls) -> ImportOptions:
        return cls()

    @classmethod
    def light(cls) -> ImportOptions:
        """Refresh events and defaults only; the catalog rarely changes hour to hour."""

        return cls(sync_catalog=False)

    def is_enabled(self, step: StepName) -> bool:
        match step:
            case StepName.SYNC_CORE:
                return True
            case StepName.SYNC_CATALOG:
                return self.sync_catalog
            case StepName.SYNC_EVENTS:
                return self.sync_events
            case StepName.CREATE_DEFAULTS:
                return self.create_defaults


@dataclass(slots=True)
class StepResult:
    name: StepName
    status: StepStatus = StepStatus.PENDING
    started_at: datetime | None = None
    ended_at: datetime | None = None
    error: str | None = None
    payload: dict[str, object] = field(default_factory=dict)

    def start(self, now: datetime) -> None:
        self.status = StepStatus.RUNNING
        self.started_at = now

    def complete(self, now: datetime, payload: dict[str, object] | None = None) -> None:
        self.status = StepStatus.COMPLETED
        self.ended_at = now
        if payload:
            self.payload.update(payload)

    def fail(self, now: datetime, error: str) -> None:
        self.status = StepStatus.FAILED
        self.ended_at = now
        self.error = error

    def skip(self, now: datetime, reason: str) -> None:
        self.status = StepStatus.SKIPPED
        self.ended_at = now
        self.payload["reason"] = reason

    @property
    def is_finished(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED)


def _default_steps() -> list[StepResult]:
    return [StepResult(name=name) for name in StepName]


@dataclass(slots=True)
class RunReport:
    """Audit trail of one orchestrated run."""

    import_key: str
    identifiers: ExternalIdentifierSet
    success: bool = False
    entity_id: UUID | None = None
    steps: list[StepResult] = field(default_factory=_default_steps)
    error: str | None = None
    already_running: bool = False
    existing_status: ImportStatus | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None

    def step(self, name: StepName) -> StepResult:
        for result in self.steps:
            if result.name is name:
                return result
        raise KeyError(name)

    @property
    def step_statuses(self) -> list[StepStatus]:
        return [result.status for result in self.steps]

    def skip_pending(self, now: datetime, reason: str) -> None:
        for result in self.steps:
            if result.status is StepStatus.PENDING:
                result.skip(now, reason)


@dataclass(slots=True, frozen=True)
class ImportTicket:
    """Answer to a start-import request."""

    accepted: bool
    import_key: str
    existing_status: ImportStatus | None = None
