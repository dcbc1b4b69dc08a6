"""``ArtistDatastore`` implemented on top of the SQLAlchemy unit of work."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from setlistsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyArtistUnitOfWork
from setlistsync.domain.errors import DatastoreError
from setlistsync.domain.import_pipeline.steps import select_default_songs
from setlistsync.domain.model import (
    ArtistRecord,
    ContentCounts,
    ExternalIdentifierSet,
    slugify,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from datetime import date

    from setlistsync.domain.model import (
        ArtistProfile,
        CatalogItem,
        ScheduledEvent,
        UpsertOutcome,
    )
    from setlistsync.domain.ports import ArtistDatastore, ArtistRepository, ArtistUnitOfWork

log = getLogger(__name__)


@contextmanager
def translate_datastore_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.exception("Datastore %s failed", operation)
        raise DatastoreError(f"datastore {operation} failed: {exc}") from exc


def lookup_artist(
    artists: ArtistRepository, identifiers: ExternalIdentifierSet
) -> ArtistRecord | None:
    """Find an artist by each known id in turn, then by normalized name.

    The name is only consulted when no catalog id was supplied, so a different
    artist that happens to share a name is never matched against an explicit id.
    """

    if identifiers.catalog_id and (found := artists.find_by_catalog_id(identifiers.catalog_id)):
        return found
    if identifiers.ticketing_id and (
        found := artists.find_by_ticketing_id(identifiers.ticketing_id)
    ):
        return found
    if identifiers.other_provider_id and (
        found := artists.find_by_other_provider_id(identifiers.other_provider_id)
    ):
        return found
    if identifiers.catalog_id is None and identifiers.normalized_name:
        return artists.find_by_normalized_name(identifiers.normalized_name)
    return None


def _drop_foreign_ids(
    artists: ArtistRepository, identifiers: ExternalIdentifierSet, owner: uuid.UUID
) -> ExternalIdentifierSet:
    """Remove secondary ids that already belong to another artist."""

    ticketing_id = identifiers.ticketing_id
    if ticketing_id and (holder := artists.find_by_ticketing_id(ticketing_id)):
        if holder.id != owner:
            log.warning(
                "Ticketing id %s already belongs to %s; not attaching it to %s",
                ticketing_id,
                holder.id,
                owner,
            )
            ticketing_id = None
    other_id = identifiers.other_provider_id
    if other_id and (holder := artists.find_by_other_provider_id(other_id)):
        if holder.id != owner:
            other_id = None
    return replace(identifiers, ticketing_id=ticketing_id, other_provider_id=other_id)


class SqlAlchemyArtistDatastore:
    """Each call runs in its own unit of work and commits on success."""

    def __init__(self, uow_factory: Callable[[], ArtistUnitOfWork] | None = None) -> None:
        self._uow_factory = uow_factory or SqlAlchemyArtistUnitOfWork

    @contextmanager
    def _unit(self, operation: str) -> Iterator[ArtistUnitOfWork]:
        with translate_datastore_errors(operation), self._uow_factory() as uow:
            yield uow

    def find_entity(self, identifiers: ExternalIdentifierSet) -> ArtistRecord | None:
        with self._unit("lookup") as uow:
            return lookup_artist(uow.repositories.artists, identifiers)

    def get_entity(self, entity_id: uuid.UUID) -> ArtistRecord | None:
        with self._unit("get") as uow:
            return uow.repositories.artists.get(entity_id)

    def upsert_entity(
        self,
        profile: ArtistProfile,
        identifiers: ExternalIdentifierSet,
        *,
        synced_at: datetime,
    ) -> uuid.UUID:
        with self._unit("artist upsert") as uow:
            artists = uow.repositories.artists
            supplied = ExternalIdentifierSet(catalog_id=profile.catalog_id).merge(identifiers)
            existing = lookup_artist(artists, supplied)
            entity_id = existing.id if existing else uuid.uuid4()
            merged = existing.identifiers.merge(supplied) if existing else supplied
            merged = _drop_foreign_ids(artists, merged, entity_id)
            record = ArtistRecord(
                id=entity_id,
                name=profile.name,
                slug=slugify(profile.name),
                identifiers=replace(merged, display_name=profile.name),
                genres=profile.genres,
                popularity=profile.popularity,
                followers=profile.followers,
                image_url=profile.image_url,
                last_synced_at=synced_at,
                last_full_sync_at=existing.last_full_sync_at if existing else None,
            )
            if existing is None:
                artists.add(record)
                log.info("Created artist %s (%s)", record.name, entity_id)
            else:
                artists.update(record)
                log.debug("Updated artist %s (%s)", record.name, entity_id)
            uow.commit()
            return entity_id

    def upsert_catalog_items(
        self, entity_id: uuid.UUID, items: Sequence[CatalogItem]
    ) -> UpsertOutcome:
        with self._unit("catalog upsert") as uow:
            outcome = uow.repositories.catalog_items.upsert_many(entity_id, items)
            uow.commit()
            return outcome

    def upsert_events(
        self, entity_id: uuid.UUID, events: Sequence[ScheduledEvent]
    ) -> UpsertOutcome:
        with self._unit("event upsert") as uow:
            outcome = uow.repositories.events.upsert_many(entity_id, events)
            uow.commit()
            return outcome

    def create_default_records(self, entity_id: uuid.UUID, *, song_count: int, today: date) -> int:
        """Seed a prediction list per upcoming event lacking one.

        With no upcoming events a single artist-level list is seeded instead. Lists
        are only created when there are songs to put in them.
        """

        with self._unit("default records") as uow:
            repos = uow.repositories
            songs = select_default_songs(repos.catalog_items.list_for_artist(entity_id), song_count)
            if not songs:
                return 0
            upcoming = repos.events.upcoming_for_artist(entity_id, today=today)
            targets: list[str | None] = [event.ticketing_id for event in upcoming] or [None]
            created = 0
            for event_id in targets:
                if repos.prediction_lists.exists(entity_id, event_id):
                    continue
                repos.prediction_lists.add(
                    entity_id, event_id, songs, created_at=datetime.now(UTC)
                )
                created += 1
            uow.commit()
            return created

    def content_counts(self, entity_id: uuid.UUID) -> ContentCounts:
        with self._unit("content count") as uow:
            return ContentCounts(
                catalog_items=uow.repositories.catalog_items.count_for_artist(entity_id),
                events=uow.repositories.events.count_for_artist(entity_id),
            )

    def list_stale_entities(
        self, *, synced_before: datetime, limit: int, full: bool = False
    ) -> list[ArtistRecord]:
        with self._unit("stale listing") as uow:
            return uow.repositories.artists.list_stale(
                synced_before=synced_before, limit=limit, full=full
            )

    def mark_synced(
        self, entity_id: uuid.UUID, *, at: datetime, full: bool, partial: bool = False
    ) -> None:
        with self._unit("sync bookkeeping") as uow:
            artists = uow.repositories.artists
            record = artists.get(entity_id)
            if record is None:
                raise DatastoreError(f"artist {entity_id} disappeared during import")
            artists.update(
                replace(
                    record,
                    last_synced_at=record.last_synced_at if partial else at,
                    last_full_sync_at=at if full else record.last_full_sync_at,
                )
            )
            uow.commit()


if TYPE_CHECKING:
    _datastore_check: ArtistDatastore = SqlAlchemyArtistDatastore()
