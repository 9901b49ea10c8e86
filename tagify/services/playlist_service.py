# ============================================================================
# FILE: tagify/services/playlist_service.py
# Playlist listings that merge the local store with Spotify
# ============================================================================
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from tagify.config import settings
from tagify.core.exceptions import Forbidden, NotFound
from tagify.core.spotify_client import SpotifyClient, spotify_client
from tagify.db.models.playlist import Playlist
from tagify.schemas.playlist import PlaylistDetail, PlaylistPage, PlaylistRow, SubmittablePage
from tagify.schemas.spotify import RemotePlaylistSummary
from tagify.services.pagination import (
    LocalCursor,
    RemoteCursor,
    check_limit,
    collect_remote_page,
    gather_all,
    split_page,
)
from tagify.services.playlist_store import PlaylistFilter, PlaylistStore, playlist_store
from tagify.services.tag_service import TagService, tag_service
import logging

logger = logging.getLogger(__name__)


class PlaylistService:
    """Service layer for playlist operations"""

    def __init__(
        self,
        remote: SpotifyClient = None,
        store: PlaylistStore = None,
        tags: TagService = None,
        max_remote_requests: int = None,
    ):
        self.remote = remote or spotify_client
        self.store = store or playlist_store
        if tags is None:
            tags = TagService(self.store) if store is not None else tag_service
        self.tags = tags
        self.max_remote_requests = max_remote_requests or settings.MAX_REMOTE_PAGE_REQUESTS

    async def _local_page(
        self,
        db: Session,
        credential: str,
        playlist_filter: PlaylistFilter,
        limit: int,
        cursor: Optional[str],
        operation: str,
    ) -> PlaylistPage:
        """
        Page through active local records and enrich them from Spotify

        Any failed remote lookup fails the whole page.
        """
        local_cursor = LocalCursor.decode(cursor)
        records = self.store.find_active_by_filter(
            db,
            playlist_filter,
            local_cursor.id if local_cursor else None,
            limit + 1,
        )
        if not records:
            return PlaylistPage(data=[], cursor=None)

        kept, next_cursor = split_page(records, limit, key=lambda record: record.id)
        summaries = await gather_all(
            self.remote.get_playlist_detail(record.id, credential) for record in kept
        )

        rows = [
            PlaylistRow(**summary.model_dump(), tags=record.tag_names)
            for record, summary in zip(kept, summaries)
        ]
        logger.info(f"{operation}: {len(rows)} rows, next cursor {next_cursor.encode() if next_cursor else None}")
        return PlaylistPage(data=rows, cursor=next_cursor.encode() if next_cursor else None)

    async def list_discovery(
        self,
        db: Session,
        credential: str,
        limit: int,
        cursor: Optional[str] = None,
        tag_names: Optional[Iterable[str]] = None,
    ) -> PlaylistPage:
        """All active playlists having at least one of `tag_names` (any tags when empty)"""
        check_limit(limit, settings.DISCOVERY_PAGE_MAX, "list_discovery")
        playlist_filter = PlaylistFilter(tag_names=frozenset(tag_names or ()))
        return await self._local_page(db, credential, playlist_filter, limit, cursor, "list_discovery")

    async def list_submitted(
        self,
        db: Session,
        credential: str,
        owner_user_id: str,
        limit: int,
        cursor: Optional[str] = None,
    ) -> PlaylistPage:
        """Active playlists the user has submitted"""
        check_limit(limit, settings.SUBMITTED_PAGE_MAX, "list_submitted")
        playlist_filter = PlaylistFilter(owner_user_id=owner_user_id)
        return await self._local_page(db, credential, playlist_filter, limit, cursor, "list_submitted")

    async def list_submittable(
        self,
        db: Session,
        credential: str,
        owner_user_id: str,
        limit: int,
        cursor: Optional[int] = None,
    ) -> SubmittablePage:
        """
        The user's own Spotify playlists that are not submitted yet

        Filtering happens after each Spotify page is fetched, so several raw
        pages may be needed to fill one result page. The returned cursor is
        the Spotify offset of the first playlist not yet examined.
        """
        check_limit(limit, settings.SUBMITTABLE_PAGE_MAX, "list_submittable")
        remote_cursor = RemoteCursor.decode(cursor)
        submitted_ids = self.store.existing_active_ids(db, owner_user_id)

        def keep(playlist: RemotePlaylistSummary) -> bool:
            return playlist.owner.id == owner_user_id and playlist.id not in submitted_ids

        async def fetch_page(size: int, offset: int):
            return await self.remote.list_owned_playlists(size, offset, credential)

        rows, next_offset = await collect_remote_page(
            fetch_page,
            keep,
            limit,
            start_offset=remote_cursor.offset if remote_cursor else 0,
            max_requests=self.max_remote_requests,
        )
        logger.info(f"list_submittable: {len(rows)} rows for {owner_user_id}, next offset {next_offset}")
        return SubmittablePage(data=rows, cursor=next_offset)

    async def get_playlist(self, db: Session, credential: str, playlist_id: str) -> PlaylistDetail:
        """Full playlist with tracks for an active submitted playlist"""
        record = self.store.get_active(db, playlist_id)
        if record is None:
            raise NotFound("Playlist not found", "get_playlist", playlist_id)
        playlist = await self.remote.get_playlist_full(playlist_id, credential)
        return PlaylistDetail(**playlist.model_dump(), tags=record.tag_names)

    async def create_playlist(
        self,
        db: Session,
        credential: str,
        owner_user_id: str,
        playlist_id: str,
        tag_names: List[str],
    ) -> Playlist:
        """Submit (or re-submit) one of the caller's own Spotify playlists"""
        remote_owner_id = await self.remote.get_playlist_owner_id(playlist_id, credential)
        if remote_owner_id != owner_user_id:
            raise Forbidden("Only the Spotify owner can submit a playlist", "create_playlist", playlist_id)
        return self.tags.create_or_restore_playlist(db, playlist_id, owner_user_id, tag_names)

    def update_playlist(self, db: Session, owner_user_id: str, playlist_id: str, tag_names: List[str]) -> Playlist:
        """Replace the tags of a submitted playlist"""
        return self.tags.set_tags(db, playlist_id, tag_names, owner_user_id)

    def delete_playlist(self, db: Session, owner_user_id: str, playlist_id: str) -> None:
        """Soft-delete a submitted playlist"""
        self.tags.soft_delete(db, playlist_id, owner_user_id)


# Create singleton instance
playlist_service = PlaylistService()
