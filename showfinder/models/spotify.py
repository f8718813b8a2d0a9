"""Spotify artist models."""

from pydantic import BaseModel, Field

from showfinder.models.base import CamelModel


class SpotifyArtistInfo(CamelModel):
    """Artist profile from Spotify."""

    id: str
    name: str = ""
    followers: int = 0
    popularity: int = Field(default=0, ge=0, le=100)
    genres: list[str] = Field(default_factory=list)
    spotify_url: str | None = None
    image: str | None = None


class SpotifyAlbumInfo(CamelModel):
    """Album summary from Spotify."""

    id: str = ""
    name: str = ""
    release_date: str | None = None
    total_tracks: int | None = None
    spotify_url: str | None = None
    image: str | None = None


class SpotifyArtistResponse(CamelModel):
    """Artist lookup result. `artist` is None when nothing matched."""

    artist: SpotifyArtistInfo | None = None
    albums: list[SpotifyAlbumInfo] = Field(default_factory=list)


class SpotifyToken(BaseModel):
    """Access token handed to the browser."""

    access_token: str
