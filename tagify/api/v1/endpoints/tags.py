# ============================================================================
# FILE: tagify/api/v1/endpoints/tags.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from tagify.db.session import get_db
from tagify.api.dependencies import get_tag_service
from tagify.schemas.playlist import TagList
from tagify.services.tag_service import TagService

router = APIRouter()

@router.get("", response_model=TagList)
async def search_tags(
    q: Optional[str] = Query(None, description="Substring to look for"),
    db: Session = Depends(get_db),
    service: TagService = Depends(get_tag_service),
):
    """Tag name suggestions for the tag picker"""
    return {"data": service.search_tags(db, q)}
