# ============================================================================
# FILE: tagify/config.py
# ============================================================================
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    """Application configuration using Pydantic BaseSettings"""

    # App settings
    APP_NAME: str = "Tagify"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tagify.db"  # Change to PostgreSQL in production

    # Redis cache (application access token only)
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_EXPIRE_SECONDS: int = 3600

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Spotify Web API
    SPOTIFY_API_BASE_URL: str = "https://api.spotify.com/v1"
    SPOTIFY_TOKEN_URL: str = "https://accounts.spotify.com/api/token"
    SPOTIFY_CLIENT_ID: str = ""
    SPOTIFY_CLIENT_SECRET: str = ""
    SPOTIFY_REFRESH_TOKEN: Optional[str] = None
    SPOTIFY_TIMEOUT_SECONDS: float = 30.0

    # Paging
    DISCOVERY_PAGE_MAX: int = 10
    SUBMITTED_PAGE_MAX: int = 10
    SUBMITTABLE_PAGE_MAX: int = 5
    MAX_REMOTE_PAGE_REQUESTS: int = 20
    TAG_SEARCH_LIMIT: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
