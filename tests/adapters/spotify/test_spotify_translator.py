"""Translator tests for Spotify payloads."""

from __future__ import annotations

from setlistsync.adapters.spotify.schema import SpotifyAlbum, SpotifyArtist, SpotifyTrack
from setlistsync.adapters.spotify.translator import (
    translate_candidate,
    translate_profile,
    translate_track,
)
from setlistsync.domain.model import Provider

from tests.support.spotify_payloads import (
    ARTIST_ID,
    album_payload,
    artist_payload,
    full_track_payload,
)


def test_translate_profile_keeps_largest_image_and_link() -> None:
    artist = SpotifyArtist.model_validate(artist_payload())

    profile = translate_profile(artist)

    assert profile.catalog_id == ARTIST_ID
    assert profile.genres == ("art rock", "alternative rock")
    assert profile.followers == 9_100_000
    assert profile.image_url == "https://i.scdn.co/image/large"
    assert profile.external_url == f"https://open.spotify.com/artist/{ARTIST_ID}"


def test_translate_profile_tolerates_sparse_payload() -> None:
    artist = SpotifyArtist.model_validate({"id": "x", "name": "Unknown"})

    profile = translate_profile(artist)

    assert profile.image_url is None
    assert profile.followers is None
    assert profile.genres == ()


def test_translate_candidate() -> None:
    candidate = translate_candidate(SpotifyArtist.model_validate(artist_payload()))

    assert candidate.provider is Provider.SPOTIFY
    assert candidate.provider_id == ARTIST_ID
    assert candidate.popularity == 79


def test_translate_track_uses_given_album_and_uppercases_isrc() -> None:
    track = SpotifyTrack.model_validate(full_track_payload("trk-1", "Reckoner", popularity=70))
    single = SpotifyAlbum.model_validate(album_payload("alb-single", "Nude", "single"))

    item = translate_track(track, album=single)

    assert item.album_title == "Nude"
    assert item.album_type == "single"
    assert item.isrc == "GBAYE0700001"
    assert item.popularity == 70
