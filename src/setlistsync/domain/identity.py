"""Cross-provider identity resolution."""

from __future__ import annotations

import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from setlistsync.domain.errors import PermanentProviderError, ProviderError, ResolutionError
from setlistsync.domain.model import (
    ExternalIdentifierSet,
    is_exact_name_match,
    names_match,
)
from setlistsync.domain.retry import RetryPolicy, call_with_retry
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from setlistsync.domain.model import ArtistCandidate, ArtistRecord
    from setlistsync.domain.ports import ArtistDatastore, CatalogProvider, TicketingProvider
    from setlistsync.domain.retry import Sleep
    from setlistsync.domain.time_windows import Clock, Deadline

log = getLogger(__name__)


def pick_best_candidate(
    name: str,
    candidates: Sequence[ArtistCandidate],
    *,
    require_match: bool = False,
) -> ArtistCandidate | None:
    """Choose the candidate for ``name``.

    An exact case-insensitive match wins, then the first fuzzy match. Without
    ``require_match`` the provider's top hit is the last resort.
    """

    if not candidates:
        return None
    for candidate in candidates:
        if is_exact_name_match(candidate.name, name):
            return candidate
    for candidate in candidates:
        if names_match(candidate.name, name):
            return candidate
    if require_match:
        return None
    return candidates[0]


@dataclass(slots=True, frozen=True)
class ResolvedIdentity:
    identifiers: ExternalIdentifierSet
    entity_id: UUID | None = None

    @classmethod
    def from_record(
        cls, record: ArtistRecord, supplied: ExternalIdentifierSet
    ) -> ResolvedIdentity:
        return cls(identifiers=record.identifiers.merge(supplied), entity_id=record.id)


class IdentityResolver:
    """Complete a partial identifier set from the local store and the providers."""

    def __init__(
        self,
        *,
        catalog: CatalogProvider,
        ticketing: TicketingProvider,
        datastore: ArtistDatastore,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep = time.sleep,
        clock: Clock = utcnow,
    ) -> None:
        self._catalog = catalog
        self._ticketing = ticketing
        self._datastore = datastore
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock

    def lookup_local(self, identifiers: ExternalIdentifierSet) -> ArtistRecord | None:
        return self._datastore.find_entity(identifiers)

    def resolve(
        self,
        partial: ExternalIdentifierSet,
        *,
        deadline: Deadline | None = None,
    ) -> ResolvedIdentity:
        if partial.is_empty:
            raise ResolutionError("no identifiers supplied")

        record = self.lookup_local(partial)
        if record is not None:
            log.debug("Resolved %s from local record %s", partial, record.id)
            return ResolvedIdentity.from_record(record, partial)

        identifiers = partial
        if identifiers.ticketing_id and not (identifiers.catalog_id or identifiers.display_name):
            identifiers = identifiers.merge(
                self._name_from_attraction(identifiers.ticketing_id, deadline)
            )

        if identifiers.catalog_id is None:
            identifiers = identifiers.merge(self._search_catalog(identifiers, deadline))

        if identifiers.ticketing_id is None and identifiers.display_name:
            identifiers = identifiers.merge(self._search_ticketing(identifiers, deadline))

        record = self.lookup_local(identifiers)
        if record is not None:
            return ResolvedIdentity.from_record(record, identifiers)
        return ResolvedIdentity(identifiers=identifiers)

    def _name_from_attraction(
        self, ticketing_id: str, deadline: Deadline | None
    ) -> ExternalIdentifierSet:
        try:
            attraction = self._call(
                lambda: self._ticketing.get_attraction(ticketing_id),
                label=f"ticketing attraction {ticketing_id}",
                deadline=deadline,
            )
        except PermanentProviderError as exc:
            log.info("Ticketing id %s not recognised: %s", ticketing_id, exc)
            raise ResolutionError from exc
        return ExternalIdentifierSet(display_name=attraction.name)

    def _search_catalog(
        self, identifiers: ExternalIdentifierSet, deadline: Deadline | None
    ) -> ExternalIdentifierSet:
        name = identifiers.display_name
        if not name:
            raise ResolutionError
        candidates = self._call(
            lambda: self._catalog.search_by_name(name),
            label=f"catalog search {name!r}",
            deadline=deadline,
        )
        best = pick_best_candidate(name, candidates)
        if best is None:
            log.info("Catalog search for %r returned no candidates", name)
            raise ResolutionError
        return ExternalIdentifierSet(catalog_id=best.provider_id, display_name=best.name)

    def _search_ticketing(
        self, identifiers: ExternalIdentifierSet, deadline: Deadline | None
    ) -> ExternalIdentifierSet:
        name = identifiers.display_name or ""
        try:
            candidates = self._call(
                lambda: self._ticketing.search_attractions(name),
                label=f"ticketing search {name!r}",
                deadline=deadline,
            )
        except ProviderError as exc:
            log.warning("Ticketing lookup for %r failed, continuing without it: %s", name, exc)
            return ExternalIdentifierSet()
        best = pick_best_candidate(name, candidates, require_match=True)
        if best is None:
            log.info("No ticketing attraction matches %r", name)
            return ExternalIdentifierSet()
        return ExternalIdentifierSet(ticketing_id=best.provider_id)

    def _call[T](self, func: Callable[[], T], *, label: str, deadline: Deadline | None) -> T:
        return call_with_retry(
            func,
            policy=self._retry_policy,
            label=label,
            sleep=self._sleep,
            deadline=deadline,
            clock=self._clock,
        )
