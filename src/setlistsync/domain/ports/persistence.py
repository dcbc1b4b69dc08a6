"""Ports for persisting artists and their derived content."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date, datetime
    from uuid import UUID

    from setlistsync.domain.model import (
        ArtistProfile,
        ArtistRecord,
        CatalogItem,
        ContentCounts,
        ExternalIdentifierSet,
        ScheduledEvent,
        UpsertOutcome,
    )


@runtime_checkable
class ArtistDatastore(Protocol):
    """Datastore contract the import steps read and write through.

    Implementations raise ``DatastoreError`` for any storage failure.
    """

    def find_entity(self, identifiers: ExternalIdentifierSet) -> ArtistRecord | None: ...

    def get_entity(self, entity_id: UUID) -> ArtistRecord | None: ...

    def upsert_entity(
        self,
        profile: ArtistProfile,
        identifiers: ExternalIdentifierSet,
        *,
        synced_at: datetime,
    ) -> UUID: ...

    def upsert_catalog_items(
        self, entity_id: UUID, items: Sequence[CatalogItem]
    ) -> UpsertOutcome: ...

    def upsert_events(self, entity_id: UUID, events: Sequence[ScheduledEvent]) -> UpsertOutcome: ...

    def create_default_records(self, entity_id: UUID, *, song_count: int, today: date) -> int: ...

    def content_counts(self, entity_id: UUID) -> ContentCounts: ...

    def list_stale_entities(
        self, *, synced_before: datetime, limit: int, full: bool = False
    ) -> Sequence[ArtistRecord]:
        """Artists last synced (or, with ``full``, catalog-synced) before ``synced_before``."""
        ...

    def mark_synced(
        self, entity_id: UUID, *, at: datetime, full: bool, partial: bool = False
    ) -> None:
        """Record a finished run; ``full`` stamps the catalog sync too.

        A ``partial`` run (some step failed) only records the catalog sync.
        """
        ...


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ArtistRepository(Repository["ArtistRecord"], Protocol):
    def get(self, entity_id: UUID) -> ArtistRecord | None: ...

    def find_by_catalog_id(self, catalog_id: str) -> ArtistRecord | None: ...

    def find_by_ticketing_id(self, ticketing_id: str) -> ArtistRecord | None: ...

    def find_by_other_provider_id(self, other_id: str) -> ArtistRecord | None: ...

    def find_by_normalized_name(self, normalized_name: str) -> ArtistRecord | None: ...

    def update(self, entity: ArtistRecord) -> None: ...

    def list_stale(
        self, *, synced_before: datetime, limit: int, full: bool = False
    ) -> list[ArtistRecord]: ...


@runtime_checkable
class CatalogItemRepository(Protocol):
    def upsert_many(self, artist_id: UUID, items: Sequence[CatalogItem]) -> UpsertOutcome: ...

    def count_for_artist(self, artist_id: UUID) -> int: ...

    def list_for_artist(self, artist_id: UUID) -> list[CatalogItem]: ...

@runtime_checkable
class ScheduledEventRepository(Protocol):
    def upsert_many(
        self, artist_id: UUID, events: Sequence[ScheduledEvent]
    ) -> UpsertOutcome: ...

    def count_for_artist(self, artist_id: UUID) -> int: ...

    def upcoming_for_artist(self, artist_id: UUID, *, today: date) -> list[ScheduledEvent]: ...


@runtime_checkable
class PredictionListRepository(Protocol):
    """Placeholder prediction lists; ``event_id`` of ``None`` is the artist-level list."""

    def exists(self, artist_id: UUID, event_id: str | None) -> bool: ...

    def add(
        self,
        artist_id: UUID,
        event_id: str | None,
        items: Sequence[CatalogItem],
        *,
        created_at: datetime,
    ) -> None: ...
