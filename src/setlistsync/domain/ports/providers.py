"""Ports for the third-party data providers consumed by the import pipeline.

Every method may raise ``TransientProviderError`` or ``PermanentProviderError``;
adapters translate their library exceptions into one of the two.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from setlistsync.domain.model import (
        ArtistCandidate,
        ArtistProfile,
        CatalogItem,
        ScheduledEvent,
    )


@runtime_checkable
class CatalogProvider(Protocol):
    """Primary music catalog (artist profiles and their recordings)."""

    def search_by_name(self, name: str, *, limit: int = 10) -> Sequence[ArtistCandidate]: ...

    def get_by_id(self, catalog_id: str) -> ArtistProfile: ...

    def list_catalog(self, catalog_id: str) -> Sequence[CatalogItem]: ...


@runtime_checkable
class TicketingProvider(Protocol):
    """Ticketing service that knows attractions and their upcoming events."""

    def search_attractions(self, name: str, *, limit: int = 10) -> Sequence[ArtistCandidate]: ...

    def get_attraction(self, ticketing_id: str) -> ArtistCandidate: ...

    def get_events(self, ticketing_id: str) -> Sequence[ScheduledEvent]: ...
