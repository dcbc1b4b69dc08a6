"""Port for the out-of-band import status store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from setlistsync.domain.model import ImportStatus


@runtime_checkable
class ImportStatusStore(Protocol):
    """Key-value store of import statuses.

    ``claim`` is the only compound operation and must be atomic per key: it writes
    ``status`` unless a live (non-terminal, not stale) run already holds the key, in
    which case it returns that run's status and writes nothing.
    """

    def write(self, status: ImportStatus) -> None: ...

    def read(self, import_key: str) -> ImportStatus | None:
        """Return the status under ``import_key``, following an alias if one exists."""
        ...

    def list_active(self) -> list[ImportStatus]: ...

    def claim(self, status: ImportStatus, *, stale_before: datetime) -> ImportStatus | None: ...

    def alias(self, alias_key: str, target_key: str, *, now: datetime) -> None: ...

    def purge(self, *, finished_before: datetime, aliases_before: datetime) -> int:
        """Delete terminal statuses and aliases older than the cutoffs; return the count."""
        ...
