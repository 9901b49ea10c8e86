"""Tests for the playlist listings that merge the local store with Spotify."""

import random

import pytest

from tagify.core.exceptions import Forbidden, NotFound, UpstreamError, ValidationError
from tagify.db.models.playlist import Playlist
from tagify.services.playlist_service import PlaylistService
from tagify.services.playlist_store import PlaylistStore


@pytest.fixture
def service(remote):
    return PlaylistService(remote=remote, store=PlaylistStore(), max_remote_requests=20)


def seed_local(remote, add_record, count, owner_id="u1", ties=False, tags=("rock",)):
    """Create `count` submitted playlists known to both sides; returns expected order"""
    records = []
    for index in range(count):
        playlist_id = f"s{index:02d}"
        minutes_ago = index // 3 if ties else index
        add_record(playlist_id, owner_id=owner_id, tags=tags, minutes_ago=minutes_ago)
        remote.add_playlist(playlist_id, owner_id=owner_id)
        records.append((minutes_ago, playlist_id))
    return [playlist_id for _, playlist_id in sorted(records)]


async def drain_discovery(service, db, limit, tags=None):
    pages = []
    cursor = None
    for _ in range(200):
        page = await service.list_discovery(db, "app-token", limit, cursor, tags)
        pages.append(page)
        cursor = page.cursor
        if cursor is None:
            return pages
    raise AssertionError("cursor never reached exhaustion")


class TestDiscoveryListing:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", range(1, 11))
    @pytest.mark.parametrize("count", [0, 1, 7, 10, 20])
    @pytest.mark.parametrize("ties", [False, True])
    async def test_cursor_chain_has_no_gaps_or_duplicates(self, db, remote, add_record, service, limit, count, ties):
        expected = seed_local(remote, add_record, count, ties=ties)

        pages = await drain_discovery(service, db, limit)

        collected = [row.id for page in pages for row in page.data]
        assert collected == expected
        # no trailing empty page when count is an exact multiple of limit
        if count:
            assert pages[-1].data
        assert len(pages) == max(1, -(-count // limit))

    @pytest.mark.asyncio
    async def test_rows_carry_remote_fields_and_tags(self, db, remote, add_record, service):
        add_record("p1", tags=("b", "a"))
        remote.add_playlist("p1", owner_id="u1")

        page = await service.list_discovery(db, "app-token", 10)

        [row] = page.data
        assert row.name == "Playlist p1"
        assert row.owner.id == "u1"
        assert row.images[0].url == "https://img.example/p1.jpg"
        assert row.tags == ["a", "b"]
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_tag_filter(self, db, remote, add_record, service):
        add_record("p1", tags=("rock",), minutes_ago=0)
        add_record("p2", tags=("jazz",), minutes_ago=1)
        add_record("p3", tags=("rock", "pop"), minutes_ago=2)
        for playlist_id in ("p1", "p2", "p3"):
            remote.add_playlist(playlist_id)

        page = await service.list_discovery(db, "app-token", 10, None, ["pop", "jazz"])

        assert [row.id for row in page.data] == ["p2", "p3"]
        assert remote.detail_requests == ["p2", "p3"]

    @pytest.mark.asyncio
    async def test_deleted_playlists_hidden(self, db, remote, add_record, service):
        add_record("p1", minutes_ago=0)
        add_record("p2", minutes_ago=1, deleted=True)
        remote.add_playlist("p1")
        remote.add_playlist("p2")

        page = await service.list_discovery(db, "app-token", 10)

        assert [row.id for row in page.data] == ["p1"]

    @pytest.mark.asyncio
    async def test_delete_then_list_excludes_playlist(self, db, remote, add_record, service):
        add_record("p1", owner_id="u1")
        remote.add_playlist("p1", owner_id="u1")

        with pytest.raises(Forbidden):
            service.delete_playlist(db, "u2", "p1")
        service.delete_playlist(db, "u1", "p1")

        page = await service.list_discovery(db, "app-token", 10)
        assert page.data == []
        assert db.get(Playlist, "p1").deleted_at is not None

    @pytest.mark.asyncio
    async def test_remote_failure_fails_whole_page(self, db, remote, add_record, service):
        seed_local(remote, add_record, 3)
        remote.failing_ids.add("s01")

        with pytest.raises(UpstreamError):
            await service.list_discovery(db, "app-token", 3)

    @pytest.mark.asyncio
    async def test_playlist_removed_on_spotify_fails_page(self, db, remote, add_record, service):
        add_record("gone")

        with pytest.raises(NotFound):
            await service.list_discovery(db, "app-token", 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 11])
    async def test_limit_range(self, db, service, limit):
        with pytest.raises(ValidationError):
            await service.list_discovery(db, "app-token", limit)


class TestSubmittedListing:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 3, 10])
    async def test_only_own_active_playlists(self, db, remote, add_record, service, limit):
        expected = seed_local(remote, add_record, 8, owner_id="u1")
        add_record("other", owner_id="u2", minutes_ago=0)
        add_record("deleted", owner_id="u1", minutes_ago=0, deleted=True)

        collected = []
        cursor = None
        while True:
            page = await service.list_submitted(db, "user-token", "u1", limit, cursor)
            collected.extend(row.id for row in page.data)
            cursor = page.cursor
            if cursor is None:
                break

        assert collected == expected

    @pytest.mark.asyncio
    async def test_limit_range(self, db, service):
        with pytest.raises(ValidationError):
            await service.list_submitted(db, "user-token", "u1", 11)


def seed_remote(remote, add_record, pattern):
    """
    Remote listing for user "me": 'k' kept, 'o' owned by someone else,
    's' already submitted by "me", 'd' submitted then deleted (kept again)
    """
    expected = []
    for index, marker in enumerate(pattern):
        playlist_id = f"r{index:03d}"
        owner = "someone-else" if marker == "o" else "me"
        remote.add_playlist(playlist_id, owner_id=owner, listed=True)
        if marker == "s":
            add_record(playlist_id, owner_id="me")
        if marker == "d":
            add_record(playlist_id, owner_id="me", deleted=True)
        if marker in "kd":
            expected.append(playlist_id)
    return expected


async def drain_submittable(service, db, limit):
    pages = []
    cursor = None
    for _ in range(1000):
        page = await service.list_submittable(db, "user-token", "me", limit, cursor)
        pages.append(page)
        cursor = page.cursor
        if cursor is None:
            return pages
    raise AssertionError("cursor never reached exhaustion")


class TestSubmittableListing:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "pattern",
        ["kkkkk", "oskkso", "kokokokoko", "sssssk", "kssssss", "dkosdkos", "ookkookkookk", ""],
    )
    @pytest.mark.parametrize("limit", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("max_page_size", [1, 2, 50])
    async def test_cursor_chain_has_no_gaps_or_duplicates(self, db, add_record, pattern, limit, max_page_size):
        from tests.conftest import FakeSpotify

        remote = FakeSpotify(max_page_size=max_page_size)
        service = PlaylistService(remote=remote, store=PlaylistStore())
        expected = seed_remote(remote, add_record, pattern)

        pages = await drain_submittable(service, db, limit)

        collected = [row.id for page in pages for row in page.data]
        assert collected == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(25))
    async def test_random_listings(self, db, add_record, seed):
        from tests.conftest import FakeSpotify

        rng = random.Random(seed)
        pattern = "".join(rng.choice("kkoosd") for _ in range(rng.randint(0, 40)))
        remote = FakeSpotify(max_page_size=rng.choice([1, 2, 3, 50]))
        service = PlaylistService(remote=remote, store=PlaylistStore(), max_remote_requests=rng.randint(1, 5))
        expected = seed_remote(remote, add_record, pattern)

        pages = await drain_submittable(service, db, rng.randint(1, 5))

        collected = [row.id for page in pages for row in page.data]
        assert collected == expected

    @pytest.mark.asyncio
    async def test_cursor_resumes_mid_page(self, db, remote, add_record, service):
        seed_remote(remote, add_record, "kokkk")

        first = await service.list_submittable(db, "user-token", "me", 2)
        second = await service.list_submittable(db, "user-token", "me", 2, first.cursor)

        assert [row.id for row in first.data] == ["r000", "r002"]
        assert first.cursor == 3
        assert [row.id for row in second.data] == ["r003", "r004"]
        assert second.cursor is None

    @pytest.mark.asyncio
    async def test_requests_are_capped(self, db, remote, add_record):
        seed_remote(remote, add_record, "o" * 40 + "k")
        service = PlaylistService(remote=remote, store=PlaylistStore(), max_remote_requests=4)

        page = await service.list_submittable(db, "user-token", "me", 5)

        assert page.data == []
        assert page.cursor == 20
        assert len(remote.page_requests) == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 6])
    async def test_limit_range(self, db, service, limit):
        with pytest.raises(ValidationError):
            await service.list_submittable(db, "user-token", "me", limit)

    @pytest.mark.asyncio
    async def test_negative_cursor(self, db, service):
        with pytest.raises(ValidationError):
            await service.list_submittable(db, "user-token", "me", 5, -3)


class TestPlaylistMutations:
    @pytest.mark.asyncio
    async def test_create_checks_remote_owner(self, db, remote, service):
        remote.add_playlist("p1", owner_id="u1")

        with pytest.raises(Forbidden):
            await service.create_playlist(db, "token", "u2", "p1", ["rock"])
        assert db.get(Playlist, "p1") is None

    @pytest.mark.asyncio
    async def test_create_unknown_remote_playlist(self, db, service):
        with pytest.raises(NotFound):
            await service.create_playlist(db, "token", "u1", "missing", ["rock"])

    @pytest.mark.asyncio
    async def test_create_then_listed(self, db, remote, service):
        remote.add_playlist("p1", owner_id="u1")

        await service.create_playlist(db, "token", "u1", "p1", ["rock", "indie"])
        page = await service.list_discovery(db, "app-token", 10, None, ["indie"])

        assert [row.id for row in page.data] == ["p1"]
        assert page.data[0].tags == ["indie", "rock"]

    @pytest.mark.asyncio
    async def test_resubmitting_restores_with_new_tags(self, db, remote, service):
        remote.add_playlist("p1", owner_id="u1")
        await service.create_playlist(db, "token", "u1", "p1", ["a"])
        service.delete_playlist(db, "u1", "p1")

        await service.create_playlist(db, "token", "u1", "p1", ["b"])
        page = await service.list_submitted(db, "token", "u1", 10)

        assert [(row.id, row.tags) for row in page.data] == [("p1", ["b"])]

    def test_update_by_non_owner(self, db, add_record, service):
        add_record("p1", owner_id="u1")

        with pytest.raises(Forbidden):
            service.update_playlist(db, "u2", "p1", ["jazz"])

    def test_update_duplicates(self, db, add_record, service):
        add_record("p1", owner_id="u1")

        with pytest.raises(ValidationError):
            service.update_playlist(db, "u1", "p1", ["jazz", "jazz"])


class TestPlaylistDetail:
    @pytest.mark.asyncio
    async def test_detail_has_tracks_owner_images_and_tags(self, db, remote, add_record, service):
        add_record("p1", owner_id="u1", tags=("rock",))
        remote.add_playlist("p1", owner_id="u1")
        remote.add_user("u1")

        detail = await service.get_playlist(db, "app-token", "p1")

        assert detail.tags == ["rock"]
        assert detail.tracks.total == 1
        assert detail.owner.images[0].url == "https://img.example/u1.png"

    @pytest.mark.asyncio
    async def test_deleted_playlist_not_found(self, db, remote, add_record, service):
        add_record("p1", deleted=True)
        remote.add_playlist("p1")

        with pytest.raises(NotFound):
            await service.get_playlist(db, "app-token", "p1")
