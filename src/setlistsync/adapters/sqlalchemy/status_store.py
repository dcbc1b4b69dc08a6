"""Import status store persisted in the ``import_status`` table."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from setlistsync.adapters.sqlalchemy.datastore import translate_datastore_errors
from setlistsync.adapters.sqlalchemy.mappings import import_status_table
from setlistsync.adapters.sqlalchemy.unit_of_work import require_engine
from setlistsync.domain.model import ImportStage, ImportStatus

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

    from setlistsync.domain.ports import ImportStatusStore

log = getLogger(__name__)

_TERMINAL = (ImportStage.COMPLETED, ImportStage.FAILED)


def _status_values(status: ImportStatus) -> dict[str, object]:
    return {
        "stage": status.stage,
        "progress_percent": status.progress_percent,
        "message": status.message,
        "error": status.error,
        "started_at": status.started_at,
        "updated_at": status.updated_at,
        "completed_at": status.completed_at,
        "entity_id": status.entity_id,
        "alias_of": status.alias_of,
        "redirect_to": None,
    }


def _status_from_row(row: Row[Any]) -> ImportStatus:
    return ImportStatus(
        import_key=row.import_key,
        stage=ImportStage(row.stage),
        progress_percent=row.progress_percent,
        message=row.message,
        started_at=row.started_at,
        updated_at=row.updated_at,
        error=row.error,
        completed_at=row.completed_at,
        entity_id=row.entity_id,
        alias_of=row.alias_of,
    )


class SqlAlchemyImportStatusStore:
    """Statuses shared by every process pointed at the same database.

    ``claim`` first tries a plain insert, which the primary key makes atomic. When
    the key exists it takes the row over with an ``UPDATE`` conditioned on the row
    being unchanged since it was read, so two processes cannot both win.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or require_engine()

    def write(self, status: ImportStatus) -> None:
        table = import_status_table
        with translate_datastore_errors("status write"), self.engine.begin() as conn:
            result = conn.execute(
                update(table)
                .where(table.c.import_key == status.import_key)
                .values(**_status_values(status))
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(table).values(import_key=status.import_key, **_status_values(status))
                )

    def read(self, import_key: str) -> ImportStatus | None:
        with translate_datastore_errors("status read"), self.engine.connect() as conn:
            return self._read(conn, import_key)

    def list_active(self) -> list[ImportStatus]:
        table = import_status_table
        stmt = (
            select(table)
            .where(table.c.redirect_to.is_(None))
            .where(table.c.stage.not_in(_TERMINAL))
            .order_by(table.c.started_at)
        )
        with translate_datastore_errors("status listing"), self.engine.connect() as conn:
            return [_status_from_row(row) for row in conn.execute(stmt)]

    def claim(self, status: ImportStatus, *, stale_before: datetime) -> ImportStatus | None:
        table = import_status_table
        values = _status_values(status)
        with translate_datastore_errors("status claim"):
            try:
                with self.engine.begin() as conn:
                    conn.execute(insert(table).values(import_key=status.import_key, **values))
            except IntegrityError:
                log.debug("Status %s exists; checking whether it is live", status.import_key)
            else:
                return None

            with self.engine.begin() as conn:
                row = conn.execute(
                    select(table).where(table.c.import_key == status.import_key)
                ).first()
                if row is None:
                    conn.execute(insert(table).values(import_key=status.import_key, **values))
                    return None
                blocking = self._live_status(conn, row, stale_before)
                if blocking is not None:
                    return blocking
                result = conn.execute(
                    update(table)
                    .where(
                        and_(
                            table.c.import_key == status.import_key,
                            table.c.updated_at == row.updated_at,
                            table.c.stage == row.stage,
                        )
                    )
                    .values(**values)
                )
                if result.rowcount == 1:
                    if row.stage not in _TERMINAL and row.redirect_to is None:
                        log.warning(
                            "Taking over stale import %s (started %s)",
                            status.import_key,
                            row.started_at,
                        )
                    return None
                return self._read(conn, status.import_key)

    def alias(self, alias_key: str, target_key: str, *, now: datetime) -> None:
        table = import_status_table
        with translate_datastore_errors("status alias"), self.engine.begin() as conn:
            result = conn.execute(
                update(table)
                .where(table.c.import_key == alias_key)
                .values(redirect_to=target_key, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(table).values(
                        import_key=alias_key,
                        stage=ImportStage.INITIALIZING,
                        progress_percent=0,
                        message=f"Moved to {target_key}",
                        started_at=now,
                        updated_at=now,
                        redirect_to=target_key,
                    )
                )

    def purge(self, *, finished_before: datetime, aliases_before: datetime) -> int:
        table = import_status_table
        with translate_datastore_errors("status purge"), self.engine.begin() as conn:
            finished = conn.execute(
                delete(table)
                .where(table.c.redirect_to.is_(None))
                .where(table.c.stage.in_(_TERMINAL))
                .where(table.c.updated_at < finished_before)
            )
            aliases = conn.execute(
                delete(table)
                .where(table.c.redirect_to.is_not(None))
                .where(table.c.updated_at < aliases_before)
            )
            return finished.rowcount + aliases.rowcount

    def _read(self, conn: Connection, import_key: str) -> ImportStatus | None:
        table = import_status_table
        row = conn.execute(select(table).where(table.c.import_key == import_key)).first()
        if row is not None and row.redirect_to is not None:
            row = conn.execute(
                select(table).where(table.c.import_key == row.redirect_to)
            ).first()
        return _status_from_row(row) if row is not None else None

    def _live_status(
        self, conn: Connection, row: Row[Any], stale_before: datetime
    ) -> ImportStatus | None:
        target = self._read(conn, row.import_key) if row.redirect_to is not None else None
        current = target if row.redirect_to is not None else _status_from_row(row)
        if current is None or current.is_terminal or current.started_at < stale_before:
            return None
        return current


if TYPE_CHECKING:
    _store_check: ImportStatusStore = SqlAlchemyImportStatusStore()
