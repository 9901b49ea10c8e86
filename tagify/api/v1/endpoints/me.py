# ============================================================================
# FILE: tagify/api/v1/endpoints/me.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from tagify.db.session import get_db
from tagify.api.dependencies import get_playlist_service, get_user_credential, require_current_user
from tagify.schemas.playlist import PlaylistPage, SubmittablePage
from tagify.schemas.spotify import RemoteUser
from tagify.services.playlist_service import PlaylistService

router = APIRouter()

@router.get("/playlists", response_model=SubmittablePage)
async def get_submittable_playlists(
    limit: int = Query(5, description="Page size (1-5)"),
    cursor: Optional[int] = Query(None, description="Spotify offset returned by the previous page"),
    db: Session = Depends(get_db),
    credential: str = Depends(get_user_credential),
    current_user: RemoteUser = Depends(require_current_user),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Your own Spotify playlists that have not been submitted yet
    Requires authentication
    """
    return await service.list_submittable(db, credential, current_user.id, limit, cursor)

@router.get("/submitted-playlists", response_model=PlaylistPage)
async def get_submitted_playlists(
    limit: int = Query(10, description="Page size (1-10)"),
    cursor: Optional[str] = Query(None, description="Cursor returned by the previous page"),
    db: Session = Depends(get_db),
    credential: str = Depends(get_user_credential),
    current_user: RemoteUser = Depends(require_current_user),
    service: PlaylistService = Depends(get_playlist_service),
):
    """
    Playlists you have submitted, newest first
    Requires authentication
    """
    return await service.list_submitted(db, credential, current_user.id, limit, cursor)
