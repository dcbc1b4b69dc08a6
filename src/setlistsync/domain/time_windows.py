"""Clock abstraction and the freshness/staleness windows used by sync decisions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Timestamps must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True)
class FreshnessWindow:
    """An entity synced within ``max_age`` of now is fresh; older ones are due."""

    max_age: timedelta

    def __post_init__(self) -> None:
        if self.max_age < timedelta(0):
            raise ValueError("Freshness window must be non-negative")

    def cutoff(self, *, clock: Clock = utcnow) -> datetime:
        """Return the timestamp before which a last sync counts as stale."""

        return ensure_aware(clock()) - self.max_age

    def is_due(self, last_synced_at: datetime | None, *, clock: Clock = utcnow) -> bool:
        if last_synced_at is None:
            return True
        return ensure_aware(last_synced_at) < self.cutoff(clock=clock)


@dataclass(frozen=True)
class Deadline:
    """Wall-clock budget for one run."""

    expires_at: datetime

    @classmethod
    def after(cls, budget: timedelta, *, clock: Clock = utcnow) -> Deadline:
        return cls(expires_at=ensure_aware(clock()) + budget)

    def remaining(self, *, clock: Clock = utcnow) -> timedelta:
        return self.expires_at - ensure_aware(clock())

    def expired(self, *, clock: Clock = utcnow) -> bool:
        return self.remaining(clock=clock) <= timedelta(0)


__all__ = ["Clock", "Deadline", "FreshnessWindow", "ensure_aware", "utcnow"]
