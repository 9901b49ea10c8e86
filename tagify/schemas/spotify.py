# ============================================================================
# FILE: tagify/schemas/spotify.py
# Spotify Web API payloads, trimmed to the fields the app reads
# ============================================================================
from pydantic import BaseModel, BeforeValidator
from typing import Optional, List
from typing_extensions import Annotated

class SpotifyImage(BaseModel):
    """Image object (playlist cover or user avatar)"""
    url: str
    height: Optional[int] = None
    width: Optional[int] = None

# Spotify sends `images: null` for playlists without a cover
ImageList = Annotated[List[SpotifyImage], BeforeValidator(lambda value: value or [])]

class RemoteUser(BaseModel):
    """Spotify user profile"""
    id: str
    display_name: Optional[str] = None
    images: ImageList = []

class RemotePlaylistSummary(BaseModel):
    """Playlist summary as returned by /me/playlists and /playlists/{id}"""
    id: str
    name: str
    description: Optional[str] = None
    images: ImageList = []  # first one is the canonical thumbnail
    owner: RemoteUser

class TrackArtist(BaseModel):
    id: Optional[str] = None
    name: str

class TrackAlbum(BaseModel):
    id: Optional[str] = None
    name: str
    images: ImageList = []

class Track(BaseModel):
    id: Optional[str] = None  # local files have no id
    name: str
    duration_ms: int = 0
    artists: List[TrackArtist] = []
    album: Optional[TrackAlbum] = None

class PlaylistTrackItem(BaseModel):
    added_at: Optional[str] = None
    track: Optional[Track] = None  # null for tracks removed from the catalogue

class PlaylistTracks(BaseModel):
    items: List[PlaylistTrackItem] = []
    total: int = 0
    next: Optional[str] = None

class RemotePlaylistFull(RemotePlaylistSummary):
    """Full playlist including its first page of tracks"""
    tracks: PlaylistTracks = PlaylistTracks()

class RemotePage(BaseModel):
    """One raw page of /me/playlists"""
    items: List[RemotePlaylistSummary] = []
    offset: int = 0
    next_offset: Optional[int] = None  # None once the remote list is exhausted
