# ============================================================================
# FILE: tagify/db/models/playlist.py
# ============================================================================
from sqlalchemy import Column, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid
from tagify.db.base import Base

def utcnow() -> datetime:
    """Naive UTC timestamp (the columns are timezone-less)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def new_tag_id() -> str:
    return uuid.uuid4().hex

playlist_tags = Table(
    "playlist_tags",
    Base.metadata,
    Column("playlist_id", String, ForeignKey("playlists.id"), primary_key=True),
    Column("tag_id", String, ForeignKey("tags.id"), primary_key=True),
)

class Playlist(Base):
    """Spotify playlist submitted for tagging; `id` is the Spotify playlist id"""
    __tablename__ = "playlists"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)  # Spotify id of the submitter
    deleted_at = Column(DateTime, nullable=True)  # soft delete marker
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, index=True)

    # Relationships
    tags = relationship("Tag", secondary=playlist_tags, back_populates="playlists", order_by="Tag.name")

    @property
    def tag_names(self):
        return [tag.name for tag in self.tags]

class Tag(Base):
    """Free-form label, unique by exact (case-sensitive) name"""
    __tablename__ = "tags"

    id = Column(String, primary_key=True, default=new_tag_id)
    name = Column(String, unique=True, index=True, nullable=False)

    # Relationships
    playlists = relationship("Playlist", secondary=playlist_tags, back_populates="tags")
