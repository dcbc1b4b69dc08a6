"""At-most-one live run per import key."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.domain.model import ImportStatus
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from datetime import timedelta

    from setlistsync.domain.ports import ImportStatusStore
    from setlistsync.domain.time_windows import Clock

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RunAdmission:
    """Outcome of asking the guard for a run.

    With ``proceed`` the status is the one just written for the caller; otherwise it
    is the live run the caller should poll instead.
    """

    proceed: bool
    import_key: str
    status: ImportStatus


class ConcurrencyGuard:
    def __init__(
        self,
        store: ImportStatusStore,
        *,
        staleness_window: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.staleness_window = staleness_window
        self._clock = clock

    def begin_run(self, import_key: str, *, message: str = "Import queued") -> RunAdmission:
        now = self._clock()
        fresh = ImportStatus.initial(import_key, now=now, message=message)
        existing = self.store.claim(fresh, stale_before=now - self.staleness_window)
        if existing is not None:
            log.info(
                "Import %s already running (stage=%s, %d%%)",
                existing.import_key,
                existing.stage,
                existing.progress_percent,
            )
            return RunAdmission(proceed=False, import_key=existing.import_key, status=existing)
        return RunAdmission(proceed=True, import_key=import_key, status=fresh)

    def promote(self, current: ImportStatus, permanent_key: str) -> RunAdmission:
        """Move a run from its provisional key onto the permanent one.

        The provisional key is left as an alias of whichever run ends up holding the
        permanent key, so pollers of either key observe the same status.
        """

        if current.import_key == permanent_key:
            return RunAdmission(proceed=True, import_key=permanent_key, status=current)

        now = self._clock()
        moved = current.rekey(permanent_key, alias_of=current.import_key)
        existing = self.store.claim(moved, stale_before=now - self.staleness_window)
        self.store.alias(current.import_key, permanent_key, now=now)
        if existing is not None:
            log.info(
                "Import %s yields to live run %s", current.import_key, existing.import_key
            )
            return RunAdmission(proceed=False, import_key=existing.import_key, status=existing)
        log.info("Import %s promoted to %s", current.import_key, permanent_key)
        return RunAdmission(proceed=True, import_key=permanent_key, status=moved)
