# ============================================================================
# FILE: tagify/api/v1/endpoints/playlist.py
# ============================================================================
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from tagify.db.session import get_db
from tagify.api.dependencies import (
    get_app_credential,
    get_playlist_service,
    get_user_credential,
    require_current_user,
)
from tagify.schemas.playlist import (
    PlaylistCreate,
    PlaylistDetailResponse,
    PlaylistPage,
    PlaylistUpdate,
)
from tagify.schemas.spotify import RemoteUser
from tagify.services.playlist_service import PlaylistService
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=PlaylistPage)
async def list_playlists(
    limit: int = Query(10, description="Page size (1-10)"),
    cursor: Optional[str] = Query(None, description="Cursor returned by the previous page"),
    tags: Optional[List[str]] = Query(None, description="Only playlists with at least one of these tags"),
    db: Session = Depends(get_db),
    credential: str = Depends(get_app_credential),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Discover submitted playlists, newest first
    Available to all users (authenticated and anonymous)
    """
    return await service.list_discovery(db, credential, limit, cursor, tags)

@router.get("/{playlist_id}", response_model=PlaylistDetailResponse)
async def get_playlist(
    playlist_id: str,
    db: Session = Depends(get_db),
    credential: str = Depends(get_app_credential),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Get a submitted playlist with its tracks and tags
    Available to all users (authenticated and anonymous)
    """
    playlist = await service.get_playlist(db, credential, playlist_id)
    return {"data": playlist}

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_playlist(
    playlist_data: PlaylistCreate,
    db: Session = Depends(get_db),
    credential: str = Depends(get_user_credential),
    current_user: RemoteUser = Depends(require_current_user),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Submit one of your Spotify playlists with its tags
    Requires authentication and Spotify ownership
    """
    await service.create_playlist(db, credential, current_user.id, playlist_data.id, playlist_data.tags)
    return {"message": "Playlist submitted"}

@router.put("/{playlist_id}")
async def update_playlist(
    playlist_id: str,
    update_data: PlaylistUpdate,
    db: Session = Depends(get_db),
    current_user: RemoteUser = Depends(require_current_user),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Replace the tags of a submitted playlist
    Requires authentication and ownership
    """
    service.update_playlist(db, current_user.id, playlist_id, update_data.tags)
    return {"message": "Playlist updated"}

@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: str,
    db: Session = Depends(get_db),
    current_user: RemoteUser = Depends(require_current_user),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Remove a playlist from discovery (soft delete)
    Requires authentication and ownership
    """
    service.delete_playlist(db, current_user.id, playlist_id)
    return {"message": "Playlist deleted successfully"}
