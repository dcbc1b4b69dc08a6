"""Ticketmaster Discovery API adapter package."""

from __future__ import annotations

from .client import TicketmasterClient, classify_status
from .provider import TicketmasterTicketingProvider
from .schema import Attraction, AttractionSearchResponse, Event, EventSearchResponse
from .translator import translate_attraction, translate_event

__all__ = [
    "Attraction",
    "AttractionSearchResponse",
    "Event",
    "EventSearchResponse",
    "TicketmasterClient",
    "TicketmasterTicketingProvider",
    "classify_status",
    "translate_attraction",
    "translate_event",
]
