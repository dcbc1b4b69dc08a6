"""Spotipy-based client wrapper for the Spotify catalog endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from .schema import (
    ArtistSearchResponse,
    SeveralTracksResponse,
    SpotifyAlbum,
    SpotifyAlbumPage,
    SpotifyArtist,
    SpotifySimplifiedTrack,
    SpotifyTrack,
    SpotifyTrackPage,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from setlistsync.config.spotify import SpotifyConfig

ALBUM_GROUPS = "album,single"
MAX_PAGE_SIZE = 50
MAX_TRACKS_PER_REQUEST = 50


class SpotifyClient:
    """Small wrapper around spotipy.Spotify with paging helpers and typed payloads."""

    def __init__(self, *, config: SpotifyConfig, client: spotipy.Spotify | None = None) -> None:
        if client is None:
            auth_manager = SpotifyClientCredentials(
                client_id=config.client_id,
                client_secret=config.client_secret,
            )
            client = spotipy.Spotify(
                auth_manager=auth_manager,
                requests_timeout=config.requests_timeout,
                retries=config.retries,
                status_retries=config.retries,
            )
        self._client = client
        self.market = config.market

    def search_artists(self, name: str, *, limit: int = 10) -> list[SpotifyArtist]:
        raw_payload = self._client.search(q=f"artist:{name}", type="artist", limit=limit)  # pyright: ignore[reportUnknownMemberType]
        return ArtistSearchResponse.model_validate(raw_payload).artists.items

    def get_artist(self, artist_id: str) -> SpotifyArtist:
        raw_payload = self._client.artist(artist_id)  # pyright: ignore[reportUnknownMemberType]
        return SpotifyArtist.model_validate(raw_payload)

    def iter_artist_albums(
        self,
        artist_id: str,
        *,
        max_items: int | None = None,
    ) -> Iterable[SpotifyAlbum]:
        offset = 0
        yielded = 0
        while True:
            raw_payload = self._client.artist_albums(  # pyright: ignore[reportUnknownMemberType]
                artist_id,
                include_groups=ALBUM_GROUPS,
                country=self.market,
                limit=MAX_PAGE_SIZE,
                offset=offset,
            )
            payload = SpotifyAlbumPage.model_validate(raw_payload)
            if not payload.items:
                return
            for item in payload.items:
                yield item
                yielded += 1
                if max_items is not None and yielded >= max_items:
                    return
            if payload.next is None:
                return
            offset += len(payload.items)

    def iter_album_tracks(self, album_id: str) -> Iterable[SpotifySimplifiedTrack]:
        offset = 0
        while True:
            raw_payload = self._client.album_tracks(  # pyright: ignore[reportUnknownMemberType]
                album_id, limit=MAX_PAGE_SIZE, offset=offset, market=self.market
            )
            payload = SpotifyTrackPage.model_validate(raw_payload)
            if not payload.items:
                return
            yield from payload.items
            if payload.next is None:
                return
            offset += len(payload.items)

    def get_tracks(self, track_ids: Sequence[str]) -> list[SpotifyTrack]:
        tracks: list[SpotifyTrack] = []
        for start in range(0, len(track_ids), MAX_TRACKS_PER_REQUEST):
            chunk = list(track_ids[start : start + MAX_TRACKS_PER_REQUEST])
            raw_payload = self._client.tracks(chunk, market=self.market)  # pyright: ignore[reportUnknownMemberType]
            payload = SeveralTracksResponse.model_validate(raw_payload)
            tracks.extend(track for track in payload.tracks if track is not None)
        return tracks
