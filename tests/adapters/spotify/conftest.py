"""Shared fixtures for Spotify adapter tests."""

from __future__ import annotations

import pytest

from setlistsync.adapters.spotify.client import SpotifyClient
from setlistsync.config.spotify import SpotifyConfig

from tests.support.spotify_payloads import FakeSpotipyClient


@pytest.fixture
def fake_spotipy() -> FakeSpotipyClient:
    return FakeSpotipyClient()


@pytest.fixture
def spotify_config() -> SpotifyConfig:
    return SpotifyConfig(client_id="x", client_secret="y", market="DE")  # noqa: S106


@pytest.fixture
def spotify_client(spotify_config: SpotifyConfig, fake_spotipy: FakeSpotipyClient) -> SpotifyClient:
    return SpotifyClient(config=spotify_config, client=fake_spotipy)  # pyright: ignore[reportArgumentType]
