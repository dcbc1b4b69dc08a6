"""Minimal Pydantic models for the Ticketmaster Discovery API."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class TicketmasterBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PageInfo(TicketmasterBaseModel):
    size: int = 0
    total_elements: int = Field(default=0, alias="totalElements")
    total_pages: int = Field(default=0, alias="totalPages")
    number: int = 0


class Attraction(TicketmasterBaseModel):
    id: str
    name: str
    type: str | None = None
    url: str | None = None


class AttractionsEmbedded(TicketmasterBaseModel):
    attractions: list[Attraction] = Field(default_factory=list["Attraction"])


class AttractionSearchResponse(TicketmasterBaseModel):
    embedded: AttractionsEmbedded | None = Field(default=None, alias="_embedded")
    page: PageInfo | None = None

    @property
    def attractions(self) -> list[Attraction]:
        return self.embedded.attractions if self.embedded else []


class EventStart(TicketmasterBaseModel):
    local_date: date | None = Field(default=None, alias="localDate")
    date_time: datetime | None = Field(default=None, alias="dateTime")


class EventStatus(TicketmasterBaseModel):
    code: str | None = None


class EventDates(TicketmasterBaseModel):
    start: EventStart | None = None
    status: EventStatus | None = None


class VenueCity(TicketmasterBaseModel):
    name: str | None = None


class VenueCountry(TicketmasterBaseModel):
    name: str | None = None
    country_code: str | None = Field(default=None, alias="countryCode")


class Venue(TicketmasterBaseModel):
    id: str | None = None
    name: str | None = None
    city: VenueCity | None = None
    country: VenueCountry | None = None


class EventEmbedded(TicketmasterBaseModel):
    venues: list[Venue] = Field(default_factory=list["Venue"])


class Event(TicketmasterBaseModel):
    id: str
    name: str
    url: str | None = None
    dates: EventDates | None = None
    embedded: EventEmbedded | None = Field(default=None, alias="_embedded")

    @property
    def venue(self) -> Venue | None:
        if self.embedded and self.embedded.venues:
            return self.embedded.venues[0]
        return None


class EventsEmbedded(TicketmasterBaseModel):
    events: list[Event] = Field(default_factory=list["Event"])


class EventSearchResponse(TicketmasterBaseModel):
    embedded: EventsEmbedded | None = Field(default=None, alias="_embedded")
    page: PageInfo | None = None

    @property
    def events(self) -> list[Event]:
        return self.embedded.events if self.embedded else []
