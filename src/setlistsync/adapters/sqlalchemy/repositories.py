"""Repository implementations backed by SQLAlchemy sessions (Core statements)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, insert, or_, select, update

from setlistsync.adapters.sqlalchemy.mappings import (
    artist_table,
    catalog_item_table,
    prediction_list_entry_table,
    prediction_list_table,
    scheduled_event_table,
)
from setlistsync.domain.model import (
    ArtistRecord,
    CatalogItem,
    ExternalIdentifierSet,
    ScheduledEvent,
    UpsertOutcome,
    normalize_name,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date
    from uuid import UUID

    from sqlalchemy import ColumnElement, Row
    from sqlalchemy.orm import Session


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _artist_from_row(row: Row[Any]) -> ArtistRecord:
    return ArtistRecord(
        id=row.id,
        name=row.name,
        slug=row.slug,
        identifiers=ExternalIdentifierSet(
            catalog_id=row.catalog_id,
            ticketing_id=row.ticketing_id,
            other_provider_id=row.other_provider_id,
            display_name=row.name,
        ),
        genres=tuple(row.genres or ()),
        popularity=row.popularity,
        followers=row.followers,
        image_url=row.image_url,
        last_synced_at=row.last_synced_at,
        last_full_sync_at=row.last_full_sync_at,
    )


def _artist_values(entity: ArtistRecord) -> dict[str, object]:
    return {
        "name": entity.name,
        "slug": entity.slug,
        "normalized_name": normalize_name(entity.name),
        "catalog_id": entity.identifiers.catalog_id,
        "ticketing_id": entity.identifiers.ticketing_id,
        "other_provider_id": entity.identifiers.other_provider_id,
        "genres": list(entity.genres),
        "popularity": entity.popularity,
        "followers": entity.followers,
        "image_url": entity.image_url,
        "last_synced_at": entity.last_synced_at,
        "last_full_sync_at": entity.last_full_sync_at,
    }


class SqlAlchemyArtistRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ArtistRecord) -> None:
        now = _utcnow()
        self.session.execute(
            insert(artist_table).values(
                id=entity.id, created_at=now, updated_at=now, **_artist_values(entity)
            )
        )

    def update(self, entity: ArtistRecord) -> None:
        self.session.execute(
            update(artist_table)
            .where(artist_table.c.id == entity.id)
            .values(updated_at=_utcnow(), **_artist_values(entity))
        )

    def get(self, entity_id: UUID) -> ArtistRecord | None:
        return self._first(artist_table.c.id == entity_id)

    def find_by_catalog_id(self, catalog_id: str) -> ArtistRecord | None:
        return self._first(artist_table.c.catalog_id == catalog_id)

    def find_by_ticketing_id(self, ticketing_id: str) -> ArtistRecord | None:
        return self._first(artist_table.c.ticketing_id == ticketing_id)

    def find_by_other_provider_id(self, other_id: str) -> ArtistRecord | None:
        return self._first(artist_table.c.other_provider_id == other_id)

    def find_by_normalized_name(self, normalized_name: str) -> ArtistRecord | None:
        return self._first(artist_table.c.normalized_name == normalized_name)

    def list_stale(
        self, *, synced_before: datetime, limit: int, full: bool = False
    ) -> list[ArtistRecord]:
        column = artist_table.c.last_full_sync_at if full else artist_table.c.last_synced_at
        stmt = (
            select(artist_table)
            .where(or_(column.is_(None), column < synced_before))
            .order_by(
                artist_table.c.popularity.desc().nulls_last(),
                artist_table.c.followers.desc().nulls_last(),
                artist_table.c.name,
            )
            .limit(limit)
        )
        return [_artist_from_row(row) for row in self.session.execute(stmt)]

    def _first(self, condition: ColumnElement[bool]) -> ArtistRecord | None:
        stmt = select(artist_table).where(condition).order_by(artist_table.c.created_at).limit(1)
        row = self.session.execute(stmt).first()
        return _artist_from_row(row) if row is not None else None


class SqlAlchemyCatalogItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_many(self, artist_id: UUID, items: Sequence[CatalogItem]) -> UpsertOutcome:
        table = catalog_item_table
        existing = set(
            self.session.execute(
                select(table.c.catalog_id).where(table.c.artist_id == artist_id)
            ).scalars()
        )
        now = _utcnow()
        inserted = updated = 0
        seen: set[str] = set()
        for item in items:
            if item.catalog_id in seen:
                continue
            seen.add(item.catalog_id)
            values = {
                "title": item.title,
                "album_title": item.album_title,
                "album_type": item.album_type,
                "duration_ms": item.duration_ms,
                "popularity": item.popularity,
                "isrc": item.isrc,
                "preview_url": item.preview_url,
                "updated_at": now,
            }
            if item.catalog_id in existing:
                self.session.execute(
                    update(table)
                    .where(
                        and_(table.c.artist_id == artist_id, table.c.catalog_id == item.catalog_id)
                    )
                    .values(**values)
                )
                updated += 1
            else:
                self.session.execute(
                    insert(table).values(artist_id=artist_id, catalog_id=item.catalog_id, **values)
                )
                inserted += 1
        return UpsertOutcome(inserted=inserted, updated=updated)

    def count_for_artist(self, artist_id: UUID) -> int:
        stmt = select(func.count()).where(catalog_item_table.c.artist_id == artist_id)
        return self.session.execute(stmt).scalar_one()

    def list_for_artist(self, artist_id: UUID) -> list[CatalogItem]:
        table = catalog_item_table
        stmt = select(table).where(table.c.artist_id == artist_id).order_by(table.c.id)
        return [
            CatalogItem(
                catalog_id=row.catalog_id,
                title=row.title,
                album_title=row.album_title,
                album_type=row.album_type,
                duration_ms=row.duration_ms,
                popularity=row.popularity,
                isrc=row.isrc,
                preview_url=row.preview_url,
            )
            for row in self.session.execute(stmt)
        ]


class SqlAlchemyScheduledEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_many(self, artist_id: UUID, events: Sequence[ScheduledEvent]) -> UpsertOutcome:
        table = scheduled_event_table
        existing = set(
            self.session.execute(
                select(table.c.ticketing_id).where(table.c.artist_id == artist_id)
            ).scalars()
        )
        now = _utcnow()
        inserted = updated = 0
        seen: set[str] = set()
        for event in events:
            if event.ticketing_id in seen:
                continue
            seen.add(event.ticketing_id)
            values = {
                "name": event.name,
                "starts_on": event.starts_on,
                "starts_at": event.starts_at,
                "venue_name": event.venue_name,
                "city": event.city,
                "country": event.country,
                "url": event.url,
                "status": event.status,
                "updated_at": now,
            }
            if event.ticketing_id in existing:
                self.session.execute(
                    update(table)
                    .where(
                        and_(
                            table.c.artist_id == artist_id,
                            table.c.ticketing_id == event.ticketing_id,
                        )
                    )
                    .values(**values)
                )
                updated += 1
            else:
                self.session.execute(
                    insert(table).values(
                        artist_id=artist_id, ticketing_id=event.ticketing_id, **values
                    )
                )
                inserted += 1
        return UpsertOutcome(inserted=inserted, updated=updated)

    def count_for_artist(self, artist_id: UUID) -> int:
        stmt = select(func.count()).where(scheduled_event_table.c.artist_id == artist_id)
        return self.session.execute(stmt).scalar_one()

    def upcoming_for_artist(self, artist_id: UUID, *, today: date) -> list[ScheduledEvent]:
        table = scheduled_event_table
        stmt = (
            select(table)
            .where(table.c.artist_id == artist_id)
            .where(or_(table.c.starts_on.is_(None), table.c.starts_on >= today))
            .order_by(table.c.starts_on.nulls_last(), table.c.id)
        )
        return [
            ScheduledEvent(
                ticketing_id=row.ticketing_id,
                name=row.name,
                starts_on=row.starts_on,
                starts_at=row.starts_at,
                venue_name=row.venue_name,
                city=row.city,
                country=row.country,
                url=row.url,
                status=row.status,
            )
            for row in self.session.execute(stmt)
        ]


class SqlAlchemyPredictionListRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, artist_id: UUID, event_id: str | None) -> bool:
        table = prediction_list_table
        event_clause = table.c.event_id.is_(None) if event_id is None else table.c.event_id == event_id
        stmt = select(table.c.id).where(table.c.artist_id == artist_id).where(event_clause).limit(1)
        return self.session.execute(stmt).first() is not None

    def add(
        self,
        artist_id: UUID,
        event_id: str | None,
        items: Sequence[CatalogItem],
        *,
        created_at: datetime,
    ) -> None:
        result = self.session.execute(
            insert(prediction_list_table).values(
                artist_id=artist_id, event_id=event_id, created_at=created_at
            )
        )
        list_id = result.inserted_primary_key[0]  # pyright: ignore[reportOptionalSubscript]
        if items:
            self.session.execute(
                insert(prediction_list_entry_table),
                [
                    {
                        "prediction_list_id": list_id,
                        "catalog_id": item.catalog_id,
                        "title": item.title,
                        "position": position,
                    }
                    for position, item in enumerate(items, start=1)
                ],
            )
