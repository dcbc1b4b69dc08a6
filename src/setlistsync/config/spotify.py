"""Spotify configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars

DEFAULT_SPOTIFY_MARKET = "US"
SPOTIFY_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class SpotifyConfig:
    """Client-credentials settings; the catalog lookups need no user scope."""

    client_id: str
    client_secret: str
    market: str = DEFAULT_SPOTIFY_MARKET
    requests_timeout: int = SPOTIFY_TIMEOUT_SECONDS
    # spotipy's own urllib3 retries; step-level retries sit above this
    retries: int = 0


def get_spotify_config() -> SpotifyConfig:
    values = require_env_vars(("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET"))
    return SpotifyConfig(
        client_id=values["SPOTIFY_CLIENT_ID"],
        client_secret=values["SPOTIFY_CLIENT_SECRET"],
        market=os.getenv("SPOTIFY_MARKET") or DEFAULT_SPOTIFY_MARKET,
    )
