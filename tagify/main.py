# ============================================================================
# FILE: tagify/main.py
# ============================================================================
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tagify.api.v1.router import api_router
from tagify.core.exceptions import TagifyError
from tagify.core.logging import setup_logging
from tagify.core.spotify_client import spotify_client
from tagify.config import settings
import logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="Tagify API",
    description="Tag Spotify playlists and discover them by tag",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API v1 router
app.include_router(api_router, prefix="/api/v1")

@app.exception_handler(TagifyError)
async def tagify_error_handler(request: Request, exc: TagifyError):
    """Map core errors to HTTP responses without leaking upstream detail"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message}, headers=headers)

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed unexpectedly")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting Tagify API")
    # Create database tables if using SQLite
    from tagify.db.base import Base
    from tagify.db.session import engine
    import tagify.db.models  # noqa: F401  registers the tables
    Base.metadata.create_all(bind=engine)

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Tagify API")
    await spotify_client.close()

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
