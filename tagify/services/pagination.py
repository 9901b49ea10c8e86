# ============================================================================
# FILE: tagify/services/pagination.py
# Cursor types and paging loops shared by the playlist listings
# ============================================================================
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar
from tagify.core.exceptions import ValidationError
from tagify.schemas.spotify import RemotePage
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LocalCursor:
    """Id of the last record emitted under (updated_at desc, id asc)"""
    id: str

    @classmethod
    def decode(cls, value: Optional[str]) -> Optional["LocalCursor"]:
        if value is None or value == "":
            return None
        return cls(id=value)

    def encode(self) -> str:
        return self.id


@dataclass(frozen=True)
class RemoteCursor:
    """Number of remote items consumed (emitted or filtered out) so far"""
    offset: int

    @classmethod
    def decode(cls, value: Optional[int]) -> Optional["RemoteCursor"]:
        if value is None:
            return None
        if value < 0:
            raise ValidationError("cursor must not be negative", operation="decode_cursor")
        return cls(offset=value)

    def encode(self) -> int:
        return self.offset


def check_limit(limit: int, maximum: int, operation: str = None) -> int:
    """Reject limits outside 1..maximum"""
    if limit < 1 or limit > maximum:
        raise ValidationError(f"limit must be between 1 and {maximum}", operation=operation)
    return limit


def split_page(records: Sequence[T], limit: int, key: Callable[[T], str]) -> Tuple[List[T], Optional[LocalCursor]]:
    """
    Turn a `limit + 1` lookahead query result into (kept rows, next cursor)

    The extra row only proves that another page exists; the cursor points at
    the last kept row, so the next query (exclusive of the cursor) starts
    right after it.
    """
    if len(records) > limit:
        kept = list(records[:limit])
        return kept, LocalCursor(id=key(kept[-1]))
    return list(records), None


async def gather_all(coros: Iterable[Awaitable[T]]) -> List[T]:
    """
    Run coroutines concurrently and return their results in order

    If one fails, the others still in flight are cancelled and the first
    failure is raised. Cancelling the caller cancels all of them.
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        # let the cancelled tasks unwind before propagating
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def collect_remote_page(
    fetch_page: Callable[[int, int], Awaitable[RemotePage]],
    keep: Callable[[Any], bool],
    limit: int,
    start_offset: int = 0,
    max_requests: int = 20,
) -> Tuple[List[Any], Optional[int]]:
    """
    Accumulate `limit` kept items from an offset-paginated remote list

    Raw pages of size `limit` are fetched starting at `start_offset` and
    filtered with `keep` until enough items are collected, the remote list
    is exhausted, or `max_requests` pages have been fetched.

    Returns:
        (rows, next_offset) where next_offset is the absolute offset of the
        first remote item that could still be kept, or None once the remote
        list is exhausted. The rest of a raw page whose remaining items are
        all filtered out counts as consumed.
    """
    rows: List[Any] = []
    offset = start_offset
    requests = 0

    while len(rows) < limit:
        if requests >= max_requests:
            logger.warning(
                f"Stopped after {requests} remote page requests with {len(rows)}/{limit} rows at offset {offset}"
            )
            return rows, offset

        page = await fetch_page(limit, offset)
        requests += 1

        for index, item in enumerate(page.items):
            if keep(item):
                rows.append(item)
            if len(rows) == limit:
                consumed = index + 1
                if any(keep(rest) for rest in page.items[consumed:]):
                    return rows, offset + consumed
                # nothing else on this raw page would be kept; skip past it
                return rows, page.next_offset

        if page.next_offset is None:
            return rows, None
        offset = page.next_offset

    return rows, offset
