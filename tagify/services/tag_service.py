# ============================================================================
# FILE: tagify/services/tag_service.py
# Tag reconciliation: resolve names to rows and swap playlist tag sets
# ============================================================================
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from tagify.config import settings
from tagify.core.exceptions import Forbidden, NotFound, ValidationError
from tagify.db.models.playlist import Playlist, Tag
from tagify.services.playlist_store import PlaylistStore, playlist_store
import logging

logger = logging.getLogger(__name__)


def validate_tag_names(names: Iterable[str]) -> List[str]:
    """
    Normalise surrounding whitespace and reject empty or duplicate input

    Duplicates are an input error, never silently merged.
    """
    cleaned = [name.strip() for name in names]
    if not cleaned:
        raise ValidationError("at least one tag is required", operation="validate_tags")
    if any(not name for name in cleaned):
        raise ValidationError("tag names must not be blank", operation="validate_tags")
    if len(set(cleaned)) != len(cleaned):
        raise ValidationError("tag names must be unique", operation="validate_tags")
    return cleaned


class TagService:
    """Service layer for tag operations"""

    def __init__(self, store: PlaylistStore = None):
        self.store = store or playlist_store

    def resolve_tags(self, db: Session, names: List[str]) -> List[Tag]:
        """Map names to Tag rows, creating the missing ones (exact name match)"""
        existing = {tag.name: tag for tag in db.query(Tag).filter(Tag.name.in_(names)).all()}
        tags = []
        for name in names:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name)
                db.add(tag)
                existing[name] = tag
                logger.debug(f"Tag created: {name}")
            tags.append(tag)
        return tags

    def _get_owned_active(self, db: Session, playlist_id: str, requesting_user_id: str, operation: str) -> Playlist:
        playlist = self.store.get_active(db, playlist_id)
        if playlist is None:
            raise NotFound("Playlist not found", operation, playlist_id)
        if playlist.user_id != requesting_user_id:
            raise Forbidden("Playlist belongs to another user", operation, playlist_id)
        return playlist

    def create_or_restore_playlist(
        self, db: Session, playlist_id: str, owner_user_id: str, names: Iterable[str]
    ) -> Playlist:
        """Create or restore the record and give it exactly these tags"""
        names = validate_tag_names(names)
        try:
            tags = self.resolve_tags(db, names)
            playlist = self.store.upsert_playlist(db, playlist_id, owner_user_id, tags)
            db.commit()
            db.refresh(playlist)
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error submitting playlist {playlist_id}: {e}")
            raise

    def set_tags(self, db: Session, playlist_id: str, names: Iterable[str], requesting_user_id: str) -> Playlist:
        """Replace the full tag set of an active playlist in one transaction"""
        names = validate_tag_names(names)
        playlist = self._get_owned_active(db, playlist_id, requesting_user_id, "set_tags")
        try:
            tags = self.resolve_tags(db, names)
            self.store.replace_tags(db, playlist, tags)
            db.commit()
            db.refresh(playlist)
            logger.info(f"Playlist tags updated: {playlist_id} -> {names}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating tags of {playlist_id}: {e}")
            raise

    def soft_delete(self, db: Session, playlist_id: str, requesting_user_id: str) -> None:
        """Soft-delete an active playlist owned by the requesting user"""
        playlist = self._get_owned_active(db, playlist_id, requesting_user_id, "soft_delete")
        try:
            self.store.soft_delete_playlist(db, playlist)
            db.commit()
            logger.info(f"Playlist deleted: {playlist_id}")
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting playlist {playlist_id}: {e}")
            raise

    def search_tags(self, db: Session, query: Optional[str] = None, limit: int = None) -> List[str]:
        """Tag names containing `query`, alphabetically"""
        tags = db.query(Tag.name)
        if query:
            tags = tags.filter(Tag.name.contains(query, autoescape=True))
        rows = tags.order_by(Tag.name.asc()).limit(limit or settings.TAG_SEARCH_LIMIT).all()
        return [row.name for row in rows]


# Create singleton instance
tag_service = TagService()
