"""Step executors: each one syncs a single slice of an artist's data."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.domain.errors import ResolutionError
from setlistsync.domain.model import CatalogItem, normalize_name
from setlistsync.domain.retry import RetryPolicy, call_with_retry
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from uuid import UUID

    from setlistsync.domain.model import ExternalIdentifierSet
    from setlistsync.domain.ports import ArtistDatastore, CatalogProvider, TicketingProvider
    from setlistsync.domain.retry import Sleep
    from setlistsync.domain.time_windows import Clock, Deadline

log = getLogger(__name__)

DEFAULT_SEED_SONG_COUNT = 5

_LIVE_TITLE = re.compile(
    r"(?:[(\[]\s*|\s-\s)(?:live|acoustic|unplugged|session)\b", re.IGNORECASE
)
_LIVE_ALBUM = re.compile(
    r"\b(live at|live from|live in|in concert|unplugged|sessions?)\b", re.IGNORECASE
)


def is_live_recording(item: CatalogItem) -> bool:
    if item.is_live or _LIVE_TITLE.search(item.title):
        return True
    return bool(item.album_title and _LIVE_ALBUM.search(item.album_title))


@dataclass(slots=True)
class CuratedCatalog:
    items: list[CatalogItem] = field(default_factory=list)
    skipped_live: int = 0
    deduplicated: int = 0


def curate_catalog(items: Iterable[CatalogItem]) -> CuratedCatalog:
    """Keep studio recordings only, one per ISRC (or per title when ISRC is unknown).

    Among duplicates the most popular recording wins; first-seen order is kept.
    """

    curated = CuratedCatalog()
    chosen: dict[str, CatalogItem] = {}
    for item in items:
        if is_live_recording(item):
            curated.skipped_live += 1
            continue
        key = f"isrc:{item.isrc.upper()}" if item.isrc else f"title:{normalize_name(item.title)}"
        current = chosen.get(key)
        if current is None:
            chosen[key] = item
            continue
        curated.deduplicated += 1
        if item.popularity > current.popularity:
            chosen[key] = item
    curated.items = list(chosen.values())
    return curated


def select_default_songs(
    items: Sequence[CatalogItem], count: int = DEFAULT_SEED_SONG_COUNT
) -> list[CatalogItem]:
    """Most popular ``count`` items; ties keep catalog order."""

    ranked = sorted(enumerate(items), key=lambda pair: (-pair[1].popularity, pair[0]))
    return [item for _, item in ranked[:count]]


class ImportSteps:
    """The four sync steps, sharing retry and clock configuration.

    Each method returns the payload recorded on the step's result.
    """

    def __init__(
        self,
        *,
        catalog: CatalogProvider,
        ticketing: TicketingProvider,
        datastore: ArtistDatastore,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep = time.sleep,
        clock: Clock = utcnow,
        seed_song_count: int = DEFAULT_SEED_SONG_COUNT,
    ) -> None:
        self.catalog = catalog
        self.ticketing = ticketing
        self.datastore = datastore
        self.retry_policy = retry_policy or RetryPolicy()
        self.seed_song_count = seed_song_count
        self._sleep = sleep
        self._clock = clock

    def sync_core(
        self, identifiers: ExternalIdentifierSet, *, deadline: Deadline | None = None
    ) -> tuple[UUID, dict[str, object]]:
        catalog_id = identifiers.catalog_id
        if catalog_id is None:
            raise ResolutionError("no catalog id resolved")
        profile = self._call(
            lambda: self.catalog.get_by_id(catalog_id),
            label=f"catalog profile {catalog_id}",
            deadline=deadline,
        )
        entity_id = self.datastore.upsert_entity(profile, identifiers, synced_at=self._clock())
        return entity_id, {"name": profile.name, "genres": len(profile.genres)}

    def sync_catalog(
        self,
        entity_id: UUID,
        identifiers: ExternalIdentifierSet,
        *,
        deadline: Deadline | None = None,
    ) -> dict[str, object]:
        catalog_id = identifiers.catalog_id
        if catalog_id is None:
            raise ResolutionError("no catalog id resolved")
        raw = self._call(
            lambda: self.catalog.list_catalog(catalog_id),
            label=f"catalog listing {catalog_id}",
            deadline=deadline,
        )
        curated = curate_catalog(raw)
        outcome = self.datastore.upsert_catalog_items(entity_id, curated.items)
        return {
            "items": len(curated.items),
            "inserted": outcome.inserted,
            "updated": outcome.updated,
            "skipped_live": curated.skipped_live,
            "deduplicated": curated.deduplicated,
        }

    def sync_events(
        self,
        entity_id: UUID,
        ticketing_id: str,
        *,
        deadline: Deadline | None = None,
    ) -> dict[str, object]:
        events = self._call(
            lambda: self.ticketing.get_events(ticketing_id),
            label=f"ticketing events {ticketing_id}",
            deadline=deadline,
        )
        outcome = self.datastore.upsert_events(entity_id, events)
        return {"events": len(events), "inserted": outcome.inserted, "updated": outcome.updated}

    def create_defaults(self, entity_id: UUID) -> dict[str, object]:
        created = self.datastore.create_default_records(
            entity_id, song_count=self.seed_song_count, today=self._clock().date()
        )
        return {"created": created}

    def _call[T](self, func: Callable[[], T], *, label: str, deadline: Deadline | None) -> T:
        return call_with_retry(
            func,
            policy=self.retry_policy,
            label=label,
            sleep=self._sleep,
            deadline=deadline,
            clock=self._clock,
        )
