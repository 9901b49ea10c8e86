# ============================================================================
# FILE: tagify/api/dependencies.py
# ============================================================================
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from tagify.core.credentials import app_credentials
from tagify.core.exceptions import Unauthenticated
from tagify.core.spotify_client import SpotifyClient, spotify_client
from tagify.schemas.spotify import RemoteUser
from tagify.services.playlist_service import PlaylistService, playlist_service
from tagify.services.tag_service import TagService, tag_service
from typing import AsyncIterator, Optional

bearer_scheme = HTTPBearer(auto_error=False)

def get_spotify_client() -> SpotifyClient:
    return spotify_client

def get_playlist_service() -> PlaylistService:
    return playlist_service

def get_tag_service() -> TagService:
    return tag_service

def get_user_credential(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """
    Spotify access token of the signed-in user, taken from the Bearer header
    Raises Unauthenticated (401) when missing
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing bearer token", "get_user_credential")
    return credentials.credentials

async def require_current_user(
    credential: str = Depends(get_user_credential),
    client: SpotifyClient = Depends(get_spotify_client),
) -> RemoteUser:
    """
    Resolve the bearer token to the Spotify user it belongs to
    Spotify answers 401 for expired or revoked tokens, which surfaces as 401 here
    """
    return await client.get_current_user(credential)

async def get_app_credential() -> AsyncIterator[str]:
    """
    Application token for endpoints that work without a signed-in user
    A 401 from Spotify while the request runs evicts the cached token
    """
    token = await app_credentials.get_access_token()
    try:
        yield token
    except Unauthenticated:
        app_credentials.invalidate()
        raise
