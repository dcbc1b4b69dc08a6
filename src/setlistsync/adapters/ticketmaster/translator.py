"""Translate Ticketmaster payloads into domain value objects."""

from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING

from setlistsync.domain.model import ArtistCandidate, Provider, ScheduledEvent

if TYPE_CHECKING:
    from .schema import Attraction, Event


def translate_attraction(attraction: Attraction) -> ArtistCandidate:
    return ArtistCandidate(
        provider=Provider.TICKETMASTER,
        provider_id=attraction.id,
        name=attraction.name,
    )


def translate_event(event: Event) -> ScheduledEvent:
    start = event.dates.start if event.dates else None
    starts_at = start.date_time if start else None
    if starts_at is not None and starts_at.tzinfo is None:
        starts_at = starts_at.replace(tzinfo=UTC)
    starts_on = start.local_date if start else None
    if starts_on is None and starts_at is not None:
        starts_on = starts_at.date()
    venue = event.venue
    status = event.dates.status.code if event.dates and event.dates.status else None
    return ScheduledEvent(
        ticketing_id=event.id,
        name=event.name,
        starts_on=starts_on,
        starts_at=starts_at,
        venue_name=venue.name if venue else None,
        city=venue.city.name if venue and venue.city else None,
        country=venue.country.country_code if venue and venue.country else None,
        url=event.url,
        status=status,
    )
