"""Translate Spotify payloads into domain value objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from setlistsync.domain.model import ArtistCandidate, ArtistProfile, CatalogItem, Provider

if TYPE_CHECKING:
    from .schema import SpotifyAlbum, SpotifyArtist, SpotifyTrack


def translate_candidate(artist: SpotifyArtist) -> ArtistCandidate:
    return ArtistCandidate(
        provider=Provider.SPOTIFY,
        provider_id=artist.id,
        name=artist.name,
        popularity=artist.popularity,
        followers=artist.followers.total if artist.followers else None,
    )


def translate_profile(artist: SpotifyArtist) -> ArtistProfile:
    # Spotify lists images largest first
    image_url = artist.images[0].url if artist.images else None
    return ArtistProfile(
        catalog_id=artist.id,
        name=artist.name,
        genres=tuple(artist.genres),
        popularity=artist.popularity,
        followers=artist.followers.total if artist.followers else None,
        image_url=image_url,
        external_url=artist.external_urls.get("spotify"),
    )


def translate_track(track: SpotifyTrack, *, album: SpotifyAlbum) -> CatalogItem:
    isrc = track.external_ids.get("isrc")
    return CatalogItem(
        catalog_id=track.id,
        title=track.name,
        album_title=album.name,
        album_type=album.album_type,
        duration_ms=track.duration_ms,
        popularity=track.popularity or 0,
        isrc=isrc.upper() if isrc else None,
        preview_url=track.preview_url,
    )
