# ============================================================================
# FILE: tagify/core/credentials.py
# Application-level Spotify token for anonymous reads
# ============================================================================
from typing import Optional
from tagify.config import settings
from tagify.core.cache import RedisCache, cache
from tagify.core.exceptions import Unauthenticated
from tagify.core.spotify_client import SpotifyClient, spotify_client
import logging

logger = logging.getLogger(__name__)

# Refresh a little before Spotify says the token expires
EXPIRY_MARGIN_SECONDS = 60


class AppCredentialProvider:
    """
    Hands out a non-expired bearer token owned by the application itself
    Used where no user is signed in (discovery listing, playlist page)
    """

    def __init__(
        self,
        client: SpotifyClient = None,
        token_cache: RedisCache = None,
        refresh_token: Optional[str] = None,
    ):
        self.client = client or spotify_client
        self.cache = token_cache or cache
        self.refresh_token = refresh_token if refresh_token is not None else settings.SPOTIFY_REFRESH_TOKEN

    @property
    def cache_key(self) -> str:
        return f"spotify:app_token:{settings.SPOTIFY_CLIENT_ID}"

    async def get_access_token(self) -> str:
        """Return a cached app token, refreshing it when missing or expired"""
        if not self.refresh_token:
            raise Unauthenticated("No Spotify refresh token configured", "get_app_access_token")

        cached = self.cache.get_cache(self.cache_key)
        if cached:
            return cached

        data = await self.client.refresh_access_token(self.refresh_token)
        token = data["access_token"]
        expires_in = int(data.get("expires_in") or settings.CACHE_EXPIRE_SECONDS)
        ttl = max(expires_in - EXPIRY_MARGIN_SECONDS, 1)
        self.cache.set_cache(self.cache_key, token, ttl)
        logger.info(f"Refreshed Spotify app token (valid for {expires_in}s)")
        return token

    def invalidate(self) -> bool:
        """Drop the cached app token so the next call refreshes it"""
        logger.warning("Spotify rejected the app token; clearing it from the cache")
        return self.cache.delete_cache(self.cache_key)


# Singleton instance
app_credentials = AppCredentialProvider()
