"""In-process import status store."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from setlistsync.domain.model import ImportStatus
    from setlistsync.domain.ports import ImportStatusStore


@dataclass(slots=True, frozen=True)
class _Alias:
    target_key: str
    created_at: datetime


class InMemoryImportStatusStore:
    """Dictionary-backed store; one lock makes ``claim`` atomic for every key.

    Only suitable when every caller lives in the same process.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, ImportStatus] = {}
        self._aliases: dict[str, _Alias] = {}
        self._lock = threading.Lock()

    def write(self, status: ImportStatus) -> None:
        with self._lock:
            self._aliases.pop(status.import_key, None)
            self._statuses[status.import_key] = status

    def read(self, import_key: str) -> ImportStatus | None:
        with self._lock:
            return self._read(import_key)

    def list_active(self) -> list[ImportStatus]:
        with self._lock:
            active = [status for status in self._statuses.values() if not status.is_terminal]
        return sorted(active, key=lambda status: status.started_at)

    def claim(self, status: ImportStatus, *, stale_before: datetime) -> ImportStatus | None:
        with self._lock:
            current = self._read(status.import_key)
            if (
                current is not None
                and not current.is_terminal
                and current.started_at >= stale_before
            ):
                return current
            self._aliases.pop(status.import_key, None)
            self._statuses[status.import_key] = status
            return None

    def alias(self, alias_key: str, target_key: str, *, now: datetime) -> None:
        with self._lock:
            self._statuses.pop(alias_key, None)
            self._aliases[alias_key] = _Alias(target_key=target_key, created_at=now)

    def purge(self, *, finished_before: datetime, aliases_before: datetime) -> int:
        with self._lock:
            expired = [
                key
                for key, status in self._statuses.items()
                if status.is_terminal and status.updated_at < finished_before
            ]
            for key in expired:
                del self._statuses[key]
            stale_aliases = [
                key for key, alias in self._aliases.items() if alias.created_at < aliases_before
            ]
            for key in stale_aliases:
                del self._aliases[key]
            return len(expired) + len(stale_aliases)

    def _read(self, import_key: str) -> ImportStatus | None:
        alias = self._aliases.get(import_key)
        if alias is not None:
            return self._statuses.get(alias.target_key)
        return self._statuses.get(import_key)


if TYPE_CHECKING:
    _store_check: ImportStatusStore = InMemoryImportStatusStore()
