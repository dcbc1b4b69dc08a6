"""Port for the backend that fires scheduled jobs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable


@runtime_checkable
class JobTrigger(Protocol):
    """Timer backend; it only decides *when* a job runs, never what it does."""

    def schedule(self, name: str, cron: str, callback: Callable[[], object]) -> None: ...

    def unschedule(self, name: str) -> None: ...

    def start(self) -> None: ...

    def shutdown(self, *, wait: bool = True) -> None: ...
