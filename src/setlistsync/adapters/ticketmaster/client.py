"""HTTP client for the Ticketmaster Discovery API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from setlistsync.adapters.http_resilience import ResilientClient
from setlistsync.config.ticketmaster import TICKETMASTER_BASE_URL, get_ticketmaster_config
from setlistsync.domain.errors import PermanentProviderError, TransientProviderError
from setlistsync.domain.model import Provider

from .schema import Attraction, AttractionSearchResponse, Event, EventSearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from setlistsync.config.http_resilience import ResilienceConfig
    from setlistsync.config.ticketmaster import TicketmasterConfig

log = getLogger(__name__)

MUSIC_SEGMENT = "music"
EVENT_PAGE_SIZE = 200
MAX_EVENT_PAGES = 5


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def classify_status(status_code: int) -> type[TransientProviderError | PermanentProviderError]:
    if status_code == 429 or status_code >= 500:
        return TransientProviderError
    return PermanentProviderError


@dataclass(slots=True)
class TicketmasterClient:
    config: TicketmasterConfig = field(default_factory=get_ticketmaster_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def search_attractions(self, keyword: str, *, limit: int = 10) -> list[Attraction]:
        params = {"keyword": keyword, "classificationName": MUSIC_SEGMENT, "size": limit}
        payload = asyncio.run(self._get_json("attractions.json", params))
        return self._validate(AttractionSearchResponse, payload).attractions

    def get_attraction(self, attraction_id: str) -> Attraction:
        payload = asyncio.run(self._get_json(f"attractions/{attraction_id}.json", {}))
        return self._validate(Attraction, payload)

    def get_events(self, attraction_id: str) -> list[Event]:
        return asyncio.run(self._get_events_async(attraction_id))

    async def _get_events_async(self, attraction_id: str) -> list[Event]:
        events: list[Event] = []
        async with self.client_factory(self.config.resilience) as client:
            for page in range(MAX_EVENT_PAGES):
                params = {
                    "attractionId": attraction_id,
                    "size": EVENT_PAGE_SIZE,
                    "page": page,
                    "sort": "date,asc",
                }
                payload = await self._request(client, "events.json", params)
                response = self._validate(EventSearchResponse, payload)
                events.extend(response.events)
                if response.page is None or page + 1 >= response.page.total_pages:
                    break
        return events

    async def _get_json(self, path: str, params: dict[str, str | int]) -> object:
        async with self.client_factory(self.config.resilience) as client:
            return await self._request(client, path, params)

    async def _request(
        self,
        client: ResilientClient,
        path: str,
        params: dict[str, str | int],
    ) -> object:
        base_url = self.config.resilience.base_url or TICKETMASTER_BASE_URL
        query = httpx.QueryParams({**params, "apikey": self.config.api_key})
        try:
            response = await client.get(f"{base_url.rstrip('/')}/{path}", params=query)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            raise TransientProviderError(
                Provider.TICKETMASTER, f"Ticketmaster request to {path} failed: {exc}"
            ) from exc

        if response.is_error:
            error_type = classify_status(response.status_code)
            log.warning("Ticketmaster %s returned HTTP %d", path, response.status_code)
            raise error_type(
                Provider.TICKETMASTER,
                f"Ticketmaster {path} returned HTTP {response.status_code}",
            )
        try:
            return response.json()
        except ValueError as exc:
            raise PermanentProviderError(
                Provider.TICKETMASTER, f"Ticketmaster {path} returned invalid JSON"
            ) from exc

    @staticmethod
    def _validate[M: BaseModel](model: type[M], payload: object) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise PermanentProviderError(
                Provider.TICKETMASTER, f"Unexpected Ticketmaster payload: {exc}"
            ) from exc
