# ============================================================================
# FILE: tagify/services/playlist_store.py
# Local playlist store: queries and writes against the relational database
# ============================================================================
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Set
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload
from tagify.db.models.playlist import Playlist, Tag, utcnow
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaylistFilter:
    """Filter for active playlists; empty tag set means any tags"""
    tag_names: FrozenSet[str] = frozenset()
    owner_user_id: Optional[str] = None


class PlaylistStore:
    """Read/write contract the aggregator and tag reconciliation rely on"""

    def _active_query(self, db: Session):
        return db.query(Playlist).filter(Playlist.deleted_at.is_(None))

    def get(self, db: Session, playlist_id: str) -> Optional[Playlist]:
        """Get a playlist record, including soft-deleted ones"""
        return db.get(Playlist, playlist_id)

    def get_active(self, db: Session, playlist_id: str) -> Optional[Playlist]:
        """Get a playlist record unless it is soft-deleted"""
        return self._active_query(db).filter(Playlist.id == playlist_id).first()

    def find_active_by_filter(
        self,
        db: Session,
        playlist_filter: PlaylistFilter,
        cursor: Optional[str],
        limit: int,
    ) -> List[Playlist]:
        """
        Active playlists matching the filter, ordered by (updated_at desc, id asc)

        Rows start strictly after the record whose id is `cursor`; an unknown
        cursor id yields an empty list.
        """
        query = self._active_query(db).options(selectinload(Playlist.tags))

        if playlist_filter.owner_user_id is not None:
            query = query.filter(Playlist.user_id == playlist_filter.owner_user_id)
        if playlist_filter.tag_names:
            query = query.filter(Playlist.tags.any(Tag.name.in_(sorted(playlist_filter.tag_names))))

        if cursor is not None:
            anchor = self.get(db, cursor)
            if anchor is None:
                logger.info(f"Unknown cursor {cursor}, returning empty page")
                return []
            query = query.filter(
                or_(
                    Playlist.updated_at < anchor.updated_at,
                    and_(Playlist.updated_at == anchor.updated_at, Playlist.id > anchor.id),
                )
            )

        return (
            query.order_by(Playlist.updated_at.desc(), Playlist.id.asc())
            .limit(limit)
            .all()
        )

    def existing_active_ids(self, db: Session, owner_user_id: str) -> Set[str]:
        """Ids of the user's playlists that are submitted and not deleted"""
        rows = (
            db.query(Playlist.id)
            .filter(Playlist.user_id == owner_user_id, Playlist.deleted_at.is_(None))
            .all()
        )
        return {row.id for row in rows}

    def upsert_playlist(self, db: Session, playlist_id: str, owner_user_id: str, tags: List[Tag]) -> Playlist:
        """
        Create the record, or restore an existing one (soft-deleted or not)

        An existing record keeps its original owner. Does not commit.
        """
        playlist = self.get(db, playlist_id)
        if playlist is None:
            playlist = Playlist(id=playlist_id, user_id=owner_user_id, deleted_at=None)
            db.add(playlist)
            logger.info(f"Playlist created: {playlist_id} for user {owner_user_id}")
        else:
            if playlist.deleted_at is not None:
                logger.info(f"Playlist restored: {playlist_id}")
            playlist.deleted_at = None
        self.replace_tags(db, playlist, tags)
        return playlist

    def replace_tags(self, db: Session, playlist: Playlist, tags: List[Tag]) -> None:
        """Swap the whole association set. Does not commit."""
        playlist.tags = list(tags)
        playlist.updated_at = utcnow()

    def soft_delete_playlist(self, db: Session, playlist: Playlist) -> None:
        """Mark the record deleted; the row and its tags stay. Does not commit."""
        playlist.deleted_at = utcnow()


# Create singleton instance
playlist_store = PlaylistStore()
