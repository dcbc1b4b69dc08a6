"""Spotify adapter package."""

from __future__ import annotations

from .client import SpotifyClient
from .provider import SpotifyCatalogProvider, translate_spotify_errors
from .schema import SpotifyAlbum, SpotifyArtist, SpotifyTrack
from .translator import translate_candidate, translate_profile, translate_track

__all__ = [
    "SpotifyAlbum",
    "SpotifyArtist",
    "SpotifyCatalogProvider",
    "SpotifyClient",
    "SpotifyTrack",
    "translate_candidate",
    "translate_profile",
    "translate_spotify_errors",
    "translate_track",
]
