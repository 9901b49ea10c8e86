"""Test configuration and fixtures"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tagify.core.exceptions import NotFound, Unauthenticated, UpstreamError
from tagify.db.base import Base
from tagify.db.models.playlist import Playlist, Tag
from tagify.schemas.spotify import (
    RemotePage,
    RemotePlaylistFull,
    RemotePlaylistSummary,
    RemoteUser,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def make_summary(playlist_id: str, owner_id: str = "u1") -> RemotePlaylistSummary:
    return RemotePlaylistSummary(
        id=playlist_id,
        name=f"Playlist {playlist_id}",
        description=None,
        images=[{"url": f"https://img.example/{playlist_id}.jpg"}],
        owner={"id": owner_id, "display_name": owner_id},
    )


class FakeSpotify:
    """
    In-memory stand-in for SpotifyClient

    `owned` is the ordered /me/playlists listing; `max_page_size` caps the
    raw page size the way a remote may return fewer items than asked for.
    """

    def __init__(self, max_page_size: int = 50):
        self.playlists: Dict[str, RemotePlaylistSummary] = {}
        self.owned: List[RemotePlaylistSummary] = []
        self.users: Dict[str, RemoteUser] = {}
        self.tokens: Dict[str, str] = {}
        self.failing_ids: Set[str] = set()
        self.max_page_size = max_page_size
        self.page_requests: List[tuple] = []
        self.detail_requests: List[str] = []

    def add_playlist(self, playlist_id: str, owner_id: str = "u1", listed: bool = False) -> RemotePlaylistSummary:
        summary = make_summary(playlist_id, owner_id)
        self.playlists[playlist_id] = summary
        if listed:
            self.owned.append(summary)
        return summary

    def add_user(self, user_id: str, token: Optional[str] = None) -> RemoteUser:
        user = RemoteUser(id=user_id, display_name=user_id.upper(), images=[{"url": f"https://img.example/{user_id}.png"}])
        self.users[user_id] = user
        if token:
            self.tokens[token] = user_id
        return user

    async def list_owned_playlists(self, limit: int, offset: int, credential: str) -> RemotePage:
        self.page_requests.append((limit, offset))
        size = min(limit, self.max_page_size)
        items = self.owned[offset:offset + size]
        end = offset + len(items)
        next_offset = end if end < len(self.owned) else None
        return RemotePage(items=items, offset=offset, next_offset=next_offset)

    async def get_playlist_detail(self, playlist_id: str, credential: str) -> RemotePlaylistSummary:
        self.detail_requests.append(playlist_id)
        if playlist_id in self.failing_ids:
            raise UpstreamError("Spotify returned HTTP 500", "get_playlist_detail", playlist_id)
        if playlist_id not in self.playlists:
            raise NotFound("Spotify resource not found", "get_playlist_detail", playlist_id)
        return self.playlists[playlist_id]

    async def get_playlist_full(self, playlist_id: str, credential: str) -> RemotePlaylistFull:
        summary = await self.get_playlist_detail(playlist_id, credential)
        full = RemotePlaylistFull(
            **summary.model_dump(),
            tracks={
                "items": [{"track": {"id": "t1", "name": "Song", "duration_ms": 1000, "artists": [{"name": "A"}]}}],
                "total": 1,
            },
        )
        owner = self.users.get(full.owner.id)
        if owner:
            full.owner.images = owner.images
        return full

    async def get_playlist_owner_id(self, playlist_id: str, credential: str) -> str:
        summary = await self.get_playlist_detail(playlist_id, credential)
        return summary.owner.id

    async def get_current_user(self, credential: str) -> RemoteUser:
        user_id = self.tokens.get(credential)
        if user_id is None:
            raise Unauthenticated("Spotify rejected the access token", "get_current_user")
        return self.users[user_id]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Fresh in-memory database session"""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def remote():
    return FakeSpotify()


@pytest.fixture
def add_record(db):
    """Insert a playlist record with a fixed updated_at and tag names"""

    def _add(
        playlist_id: str,
        owner_id: str = "u1",
        tags=("rock",),
        minutes_ago: int = 0,
        deleted: bool = False,
    ) -> Playlist:
        tag_rows = []
        for name in tags:
            tag = db.query(Tag).filter(Tag.name == name).first()
            if tag is None:
                tag = Tag(name=name)
                db.add(tag)
            tag_rows.append(tag)
        playlist = Playlist(
            id=playlist_id,
            user_id=owner_id,
            updated_at=BASE_TIME - timedelta(minutes=minutes_ago),
            deleted_at=BASE_TIME if deleted else None,
            tags=tag_rows,
        )
        db.add(playlist)
        db.commit()
        return playlist

    return _add
