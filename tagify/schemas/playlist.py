# ============================================================================
# FILE: tagify/schemas/playlist.py
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional, List
from tagify.schemas.spotify import RemotePlaylistFull, RemotePlaylistSummary

class PlaylistCreate(BaseModel):
    """Schema for submitting one of your Spotify playlists"""
    id: str = Field(..., min_length=1, description="Spotify playlist id")
    tags: List[str] = Field(..., min_length=1)

class PlaylistUpdate(BaseModel):
    """Schema for replacing the tags of a submitted playlist"""
    tags: List[str] = Field(..., min_length=1)

class PlaylistRow(RemotePlaylistSummary):
    """Spotify summary enriched with the local tag names"""
    tags: List[str] = []

class PlaylistPage(BaseModel):
    """Local-store driven page; cursor is the id of the last row"""
    data: List[PlaylistRow]
    cursor: Optional[str] = None

class SubmittablePage(BaseModel):
    """Remote driven page; cursor is the next Spotify offset to examine"""
    data: List[RemotePlaylistSummary]
    cursor: Optional[int] = None

class PlaylistDetail(RemotePlaylistFull):
    """Full playlist with tracks plus its tags"""
    tags: List[str] = []

class PlaylistDetailResponse(BaseModel):
    data: PlaylistDetail

class TagList(BaseModel):
    data: List[str]
