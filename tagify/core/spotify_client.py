# ============================================================================
# FILE: tagify/core/spotify_client.py
# Spotify Web API client for playlist summaries, details and user profiles
# ============================================================================
import httpx
from pydantic import ValidationError as PayloadError
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse
from tagify.config import settings
from tagify.core.exceptions import NotFound, Unauthenticated, UpstreamError
from tagify.schemas.spotify import (
    RemotePage,
    RemotePlaylistFull,
    RemotePlaylistSummary,
    RemoteUser,
)
import logging

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = "id,name,description,images,owner"


def parse_next_offset(next_url: Optional[str]) -> Optional[int]:
    """Extract the `offset` query parameter from a Spotify `next` link"""
    if not next_url:
        return None
    values = parse_qs(urlparse(next_url).query).get("offset")
    if not values:
        raise UpstreamError(f"Malformed next link: {next_url}", operation="list_owned_playlists")
    try:
        return int(values[0])
    except ValueError:
        raise UpstreamError(f"Malformed next link: {next_url}", operation="list_owned_playlists")


class SpotifyClient:
    """
    Async Spotify Web API client
    Only the endpoints the tagging core needs; every call takes its bearer
    credential explicitly
    """

    def __init__(
        self,
        base_url: str = None,
        token_url: str = None,
        timeout: float = None,
    ):
        self.base_url = (base_url or settings.SPOTIFY_API_BASE_URL).rstrip("/")
        self.token_url = token_url or settings.SPOTIFY_TOKEN_URL
        self.timeout = timeout or settings.SPOTIFY_TIMEOUT_SECONDS
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (created lazily inside the running loop)"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(
        self,
        path: str,
        credential: str,
        operation: str,
        resource_id: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        GET a Spotify API path and return the decoded JSON body

        Raises:
            Unauthenticated: on 401
            NotFound: on 404
            UpstreamError: on transport errors, other non-2xx or non-JSON bodies
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"
        logger.debug(f"Spotify GET {path} params={params}")

        try:
            response = await client.get(
                url,
                params=params,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {credential}",
                },
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Spotify request failed: {e}", operation, resource_id) from e

        if response.status_code == 401:
            raise Unauthenticated("Spotify rejected the access token", operation, resource_id)
        if response.status_code == 404:
            raise NotFound("Spotify resource not found", operation, resource_id)
        if response.status_code >= 400:
            raise UpstreamError(
                f"Spotify returned HTTP {response.status_code}", operation, resource_id
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Spotify returned a non-JSON body", operation, resource_id) from e

    async def list_owned_playlists(self, limit: int, offset: int, credential: str) -> RemotePage:
        """
        Get one page of the current user's playlists (/me/playlists)

        Despite the name the page also contains playlists the user follows;
        ownership filtering is up to the caller.

        Args:
            limit: Page size requested from Spotify
            offset: Index of the first playlist to return
            credential: User bearer token

        Returns:
            RemotePage with the items and the offset of the next page (None when exhausted)
        """
        data = await self._get(
            "/me/playlists",
            credential,
            operation="list_owned_playlists",
            params={"limit": limit, "offset": offset},
        )
        try:
            return RemotePage(
                items=data.get("items") or [],
                offset=offset,
                next_offset=parse_next_offset(data.get("next")),
            )
        except PayloadError as e:
            raise UpstreamError(f"Malformed playlist page: {e}", "list_owned_playlists") from e

    async def get_playlist_detail(self, playlist_id: str, credential: str) -> RemotePlaylistSummary:
        """Get the summary fields of one playlist (no tracks)"""
        data = await self._get(
            f"/playlists/{playlist_id}",
            credential,
            operation="get_playlist_detail",
            resource_id=playlist_id,
            params={"fields": SUMMARY_FIELDS},
        )
        try:
            return RemotePlaylistSummary.model_validate(data)
        except PayloadError as e:
            raise UpstreamError(f"Malformed playlist: {e}", "get_playlist_detail", playlist_id) from e

    async def get_playlist_full(self, playlist_id: str, credential: str) -> RemotePlaylistFull:
        """
        Get a playlist with its first page of tracks and the owner's avatar

        The playlist endpoint does not include owner images, so the owner's
        public profile is fetched as well.
        """
        data = await self._get(
            f"/playlists/{playlist_id}",
            credential,
            operation="get_playlist_full",
            resource_id=playlist_id,
        )
        try:
            playlist = RemotePlaylistFull.model_validate(data)
        except PayloadError as e:
            raise UpstreamError(f"Malformed playlist: {e}", "get_playlist_full", playlist_id) from e

        owner = await self.get_user(playlist.owner.id, credential)
        playlist.owner.images = owner.images
        return playlist

    async def get_playlist_owner_id(self, playlist_id: str, credential: str) -> str:
        """Get only the owner id of a playlist"""
        data = await self._get(
            f"/playlists/{playlist_id}",
            credential,
            operation="get_playlist_owner",
            resource_id=playlist_id,
            params={"fields": "owner.id"},
        )
        owner_id = (data.get("owner") or {}).get("id")
        if not owner_id:
            raise UpstreamError("Playlist owner missing", "get_playlist_owner", playlist_id)
        return owner_id

    async def get_user(self, user_id: str, credential: str) -> RemoteUser:
        """Get a user's public profile"""
        data = await self._get(f"/users/{user_id}", credential, operation="get_user", resource_id=user_id)
        try:
            return RemoteUser.model_validate(data)
        except PayloadError as e:
            raise UpstreamError(f"Malformed user: {e}", "get_user", user_id) from e

    async def get_current_user(self, credential: str) -> RemoteUser:
        """Get the profile of the user the bearer token belongs to"""
        data = await self._get("/me", credential, operation="get_current_user")
        try:
            return RemoteUser.model_validate(data)
        except PayloadError as e:
            raise UpstreamError(f"Malformed user: {e}", "get_current_user") from e

    async def refresh_access_token(self, refresh_token: str) -> Dict[str, Any]:
        """
        Exchange a refresh token for a new access token

        Returns:
            Token response with access_token, token_type and expires_in
        """
        client = await self._get_client()
        try:
            response = await client.post(
                self.token_url,
                data={"grant_type": "refresh_token", "refresh_token": refresh_token},
                auth=(settings.SPOTIFY_CLIENT_ID, settings.SPOTIFY_CLIENT_SECRET),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Token refresh failed: {e}", "refresh_access_token") from e

        if response.status_code in (400, 401, 403):
            raise Unauthenticated(
                f"Spotify refused the refresh token (HTTP {response.status_code})",
                "refresh_access_token",
            )
        if response.status_code >= 400:
            raise UpstreamError(f"Token endpoint returned HTTP {response.status_code}", "refresh_access_token")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Token endpoint returned a non-JSON body", "refresh_access_token") from e
        if not data.get("access_token"):
            raise UpstreamError("Token response without access_token", "refresh_access_token")
        return data


# Singleton instance
spotify_client = SpotifyClient()
