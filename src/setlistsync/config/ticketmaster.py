"""Ticketmaster Discovery API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, HttpRetryPolicy, RateLimit, ResilienceConfig

TICKETMASTER_BASE_URL = "https://app.ticketmaster.com/discovery/v2/"
TICKETMASTER_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class TicketmasterConfig:
    api_key: str
    resilience: ResilienceConfig


def get_ticketmaster_config(*, resilience: ResilienceConfig | None = None) -> TicketmasterConfig:
    values = require_env_vars(("TICKETMASTER_API_KEY",))
    return TicketmasterConfig(
        api_key=values["TICKETMASTER_API_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="ticketmaster",
            base_url=TICKETMASTER_BASE_URL,
            timeout_seconds=TICKETMASTER_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            retry=HttpRetryPolicy(total=2),
            cache=CacheConfig(backend="sqlite", default_ttl_seconds=300.0),
            default_headers={"Accept": "application/json"},
        ),
    )
