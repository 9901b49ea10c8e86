# ============================================================================
# FILE: tagify/api/v1/router.py
# ============================================================================
from fastapi import APIRouter
from tagify.api.v1.endpoints import me, playlist, tags

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(playlist.router, prefix="/playlists", tags=["playlists"])
api_router.include_router(me.router, prefix="/me", tags=["me"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
