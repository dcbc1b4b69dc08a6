"""Provider-facing value objects and the local artist record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from .enums import Provider
    from .identifiers import ExternalIdentifierSet


@dataclass(slots=True, frozen=True)
class ArtistCandidate:
    """One search hit returned by a provider."""

    provider: Provider
    provider_id: str
    name: str
    popularity: int | None = None
    followers: int | None = None


@dataclass(slots=True, frozen=True)
class ArtistProfile:
    """Core artist attributes as reported by the catalog provider."""

    catalog_id: str
    name: str
    genres: tuple[str, ...] = ()
    popularity: int | None = None
    followers: int | None = None
    image_url: str | None = None
    external_url: str | None = None


@dataclass(slots=True, frozen=True)
class CatalogItem:
    catalog_id: str
    title: str
    album_title: str | None = None
    album_type: str | None = None
    duration_ms: int | None = None
    popularity: int = 0
    isrc: str | None = None
    preview_url: str | None = None
    is_live: bool = False


@dataclass(slots=True, frozen=True)
class ScheduledEvent:
    ticketing_id: str
    name: str
    starts_on: date | None = None
    starts_at: datetime | None = None
    venue_name: str | None = None
    city: str | None = None
    country: str | None = None
    url: str | None = None
    status: str | None = None


@dataclass(slots=True, frozen=True)
class ArtistRecord:
    """The local canonical artist as stored by the datastore."""

    id: UUID
    name: str
    slug: str
    identifiers: ExternalIdentifierSet
    genres: tuple[str, ...] = ()
    popularity: int | None = None
    followers: int | None = None
    image_url: str | None = None
    last_synced_at: datetime | None = None
    last_full_sync_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class ContentCounts:
    catalog_items: int = 0
    events: int = 0

    @property
    def has_content(self) -> bool:
        return self.catalog_items > 0 or self.events > 0


@dataclass(slots=True, frozen=True)
class UpsertOutcome:
    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated
