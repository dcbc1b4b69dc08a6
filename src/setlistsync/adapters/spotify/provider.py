"""Spotify as the primary catalog provider."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import requests
from pydantic import ValidationError
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from setlistsync.config.spotify import get_spotify_config
from setlistsync.domain.errors import PermanentProviderError, TransientProviderError
from setlistsync.domain.model import Provider

from .client import SpotifyClient
from .translator import translate_candidate, translate_profile, translate_track

if TYPE_CHECKING:
    from collections.abc import Iterator

    from setlistsync.domain.model import ArtistCandidate, ArtistProfile, CatalogItem
    from setlistsync.domain.ports import CatalogProvider

    from .schema import SpotifyAlbum

log = getLogger(__name__)

DEFAULT_MAX_ALBUMS = 50


def _default_client() -> SpotifyClient:
    return SpotifyClient(config=get_spotify_config())


@contextmanager
def translate_spotify_errors(operation: str) -> Iterator[None]:
    """Map spotipy/requests/pydantic failures onto transient or permanent provider errors."""

    try:
        yield
    except SpotifyException as exc:
        status = exc.http_status
        message = f"Spotify {operation} failed ({status}): {exc.msg}"
        if status == 429 or (status is not None and status >= 500):
            raise TransientProviderError(Provider.SPOTIFY, message) from exc
        raise PermanentProviderError(Provider.SPOTIFY, message) from exc
    except (requests.ConnectionError, requests.Timeout) as exc:
        raise TransientProviderError(Provider.SPOTIFY, f"Spotify {operation}: {exc}") from exc
    except SpotifyOauthError as exc:
        raise PermanentProviderError(
            Provider.SPOTIFY, f"Spotify authentication failed: {exc}"
        ) from exc
    except ValidationError as exc:
        raise PermanentProviderError(
            Provider.SPOTIFY, f"Unexpected Spotify {operation} payload: {exc}"
        ) from exc


@dataclass(slots=True)
class SpotifyCatalogProvider:
    client: SpotifyClient = field(default_factory=_default_client)
    max_albums: int = DEFAULT_MAX_ALBUMS

    def search_by_name(self, name: str, *, limit: int = 10) -> list[ArtistCandidate]:
        with translate_spotify_errors("artist search"):
            artists = self.client.search_artists(name, limit=limit)
        return [translate_candidate(artist) for artist in artists]

    def get_by_id(self, catalog_id: str) -> ArtistProfile:
        with translate_spotify_errors("artist lookup"):
            artist = self.client.get_artist(catalog_id)
        return translate_profile(artist)

    def list_catalog(self, catalog_id: str) -> list[CatalogItem]:
        """Every track credited to the artist on their albums and singles."""

        with translate_spotify_errors("catalog listing"):
            albums = list(self.client.iter_artist_albums(catalog_id, max_items=self.max_albums))
            track_album: dict[str, SpotifyAlbum] = {}
            for album in albums:
                for track in self.client.iter_album_tracks(album.id):
                    if any(artist.id == catalog_id for artist in track.artists):
                        track_album.setdefault(track.id, album)
            tracks = self.client.get_tracks(list(track_album))
        log.debug(
            "Spotify catalog for %s: %d albums, %d tracks", catalog_id, len(albums), len(tracks)
        )
        items: list[CatalogItem] = []
        for track in tracks:
            source_album = track_album.get(track.id) or track.album
            if source_album is not None:
                items.append(translate_track(track, album=source_album))
        return items


if TYPE_CHECKING:
    _provider_check: CatalogProvider = SpotifyCatalogProvider()
