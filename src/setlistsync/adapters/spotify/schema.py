"""Minimal Pydantic models for the Spotify Web API catalog endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SpotifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SpotifyImage(SpotifyBaseModel):
    url: str
    height: int | None = None
    width: int | None = None


class SpotifyFollowers(SpotifyBaseModel):
    total: int | None = None


class SpotifyArtistRef(SpotifyBaseModel):
    id: str
    name: str


class SpotifyArtist(SpotifyArtistRef):
    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    followers: SpotifyFollowers | None = None
    images: list[SpotifyImage] = Field(default_factory=list["SpotifyImage"])
    external_urls: dict[str, str] = Field(default_factory=dict)


class SpotifyPage(SpotifyBaseModel):
    href: str | None = None
    limit: int | None = None
    next: str | None = None
    offset: int | None = None
    total: int | None = None


class SpotifyArtistPage(SpotifyPage):
    items: list[SpotifyArtist] = Field(default_factory=list["SpotifyArtist"])


class ArtistSearchResponse(SpotifyBaseModel):
    artists: SpotifyArtistPage


class SpotifyAlbum(SpotifyBaseModel):
    id: str
    name: str
    album_type: str | None = None
    album_group: str | None = None
    release_date: str | None = None
    artists: list[SpotifyArtistRef] = Field(default_factory=list["SpotifyArtistRef"])


class SpotifyAlbumPage(SpotifyPage):
    items: list[SpotifyAlbum] = Field(default_factory=list["SpotifyAlbum"])


class SpotifySimplifiedTrack(SpotifyBaseModel):
    id: str
    name: str
    duration_ms: int | None = None
    preview_url: str | None = None
    artists: list[SpotifyArtistRef] = Field(default_factory=list["SpotifyArtistRef"])


class SpotifyTrackPage(SpotifyPage):
    items: list[SpotifySimplifiedTrack] = Field(default_factory=list["SpotifySimplifiedTrack"])


class SpotifyTrack(SpotifySimplifiedTrack):
    popularity: int | None = None
    external_ids: dict[str, str] = Field(default_factory=dict)
    album: SpotifyAlbum | None = None


class SeveralTracksResponse(SpotifyBaseModel):
    tracks: list[SpotifyTrack | None] = Field(default_factory=list)
