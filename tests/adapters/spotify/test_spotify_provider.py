"""Catalog provider behavior and error classification."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import requests
from spotipy.exceptions import SpotifyException

from setlistsync.adapters.spotify import SpotifyCatalogProvider
from setlistsync.domain.errors import PermanentProviderError, TransientProviderError

from tests.support.spotify_payloads import ARTIST_ID

if TYPE_CHECKING:
    from setlistsync.adapters.spotify.client import SpotifyClient

    from tests.support.spotify_payloads import FakeSpotipyClient


@pytest.fixture
def provider(spotify_client: SpotifyClient) -> SpotifyCatalogProvider:
    return SpotifyCatalogProvider(client=spotify_client)


def test_list_catalog_keeps_only_tracks_credited_to_the_artist(
    provider: SpotifyCatalogProvider,
) -> None:
    items = provider.list_catalog(ARTIST_ID)

    assert sorted(item.catalog_id for item in items) == ["trk-nude", "trk-reckoner"]
    # first album a track appears on wins
    assert {item.album_title for item in items} == {"In Rainbows"}


def test_get_by_id_and_search(provider: SpotifyCatalogProvider) -> None:
    profile = provider.get_by_id(ARTIST_ID)
    candidates = provider.search_by_name("Radiohead")

    assert profile.name == "Radiohead"
    assert [candidate.provider_id for candidate in candidates] == [ARTIST_ID]


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (SpotifyException(429, -1, "rate limited"), TransientProviderError),
        (SpotifyException(503, -1, "unavailable"), TransientProviderError),
        (SpotifyException(404, -1, "non existing id"), PermanentProviderError),
        (requests.ConnectionError("reset"), TransientProviderError),
        (requests.Timeout("slow"), TransientProviderError),
    ],
)
def test_failures_are_classified(
    provider: SpotifyCatalogProvider,
    fake_spotipy: FakeSpotipyClient,
    error: Exception,
    expected: type[Exception],
) -> None:
    fake_spotipy.error = error

    with pytest.raises(expected):
        provider.get_by_id(ARTIST_ID)


def test_malformed_payload_is_permanent(
    provider: SpotifyCatalogProvider, fake_spotipy: FakeSpotipyClient
) -> None:
    fake_spotipy.artists[ARTIST_ID] = {"id": ARTIST_ID}

    with pytest.raises(PermanentProviderError, match="payload"):
        provider.get_by_id(ARTIST_ID)
