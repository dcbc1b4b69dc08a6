"""Ticketmaster as the ticketing provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .client import TicketmasterClient
from .translator import translate_attraction, translate_event

if TYPE_CHECKING:
    from setlistsync.domain.model import ArtistCandidate, ScheduledEvent
    from setlistsync.domain.ports import TicketingProvider


@dataclass(slots=True)
class TicketmasterTicketingProvider:
    client: TicketmasterClient = field(default_factory=TicketmasterClient)

    def search_attractions(self, name: str, *, limit: int = 10) -> list[ArtistCandidate]:
        return [
            translate_attraction(item) for item in self.client.search_attractions(name, limit=limit)
        ]

    def get_attraction(self, ticketing_id: str) -> ArtistCandidate:
        return translate_attraction(self.client.get_attraction(ticketing_id))

    def get_events(self, ticketing_id: str) -> list[ScheduledEvent]:
        return [translate_event(event) for event in self.client.get_events(ticketing_id)]


if TYPE_CHECKING:
    _provider_check: TicketingProvider = TicketmasterTicketingProvider()
