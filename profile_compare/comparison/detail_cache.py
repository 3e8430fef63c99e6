"""
Lazy per-row detail cache with expand/collapse state.

Second-level comparison rows (field permissions within an object) are not
part of the initial comparison. They are fetched the first time a row is
expanded and kept for the rest of the session, so collapsing and
re-expanding a row never fetches again.

State per parent key:
    - expanded: absent means collapsed
    - entry: absent means not yet fetched; an empty tuple means fetched
      with no rows (or the fetch failed)
    - loading: true only while a fetch for the key is in flight

All state lives on the event loop thread. A fetch is dispatched only when
the key has neither a cache entry nor a pending fetch, which keeps it to
at most one fetch per key per session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from profile_compare.comparison.models import DetailRow

logger = logging.getLogger(__name__)


FetchDetail = Callable[[str | None, str | None, str], Awaitable[Iterable[DetailRow]]]


class DetailCache:
    """Expansion state plus lazily fetched detail rows, keyed by parent row.

    Usage:
        cache = DetailCache(service.fetch_field_comparison)
        cache.reset(("00e1", "00e2"))
        task = cache.toggle("Account")    # expands and dispatches a fetch
        cache.is_loading("Account")       # True until the fetch completes
        await task
        cache.detail_for("Account")       # the fetched rows
    """

    def __init__(
        self,
        fetch_detail: FetchDetail,
        profile_ids: tuple[str, str] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            fetch_detail: Async callable ``(id1, id2, key) -> rows``.
            profile_ids: The profile pair passed to every fetch.
        """
        self._fetch_detail = fetch_detail
        self._profile_ids = profile_ids
        self._expanded: dict[str, bool] = {}
        self._entries: dict[str, tuple[DetailRow, ...]] = {}
        self._loading: dict[str, bool] = {}
        self._pending: dict[str, asyncio.Task[None]] = {}
        # Fetches from earlier sessions, kept alive until they finish
        self._orphaned: set[asyncio.Task[None]] = set()
        self._generation = 0
        self._fetch_count = 0

    @property
    def profile_ids(self) -> tuple[str, str] | None:
        return self._profile_ids

    @property
    def fetch_count(self) -> int:
        """Number of fetches dispatched in the current session."""
        return self._fetch_count

    def reset(self, profile_ids: tuple[str, str] | None = None) -> None:
        """Drop all state and start a new session.

        Fetches still in flight from the previous session are allowed to
        finish but their results are discarded.

        Args:
            profile_ids: Profile pair for fetches in the new session. Keeps
                the current pair if None.
        """
        if profile_ids is not None:
            self._profile_ids = profile_ids
        self._generation += 1
        for task in self._pending.values():
            if not task.done():
                self._orphaned.add(task)
                task.add_done_callback(self._orphaned.discard)
        self._expanded = {}
        self._entries = {}
        self._loading = {}
        self._pending = {}
        self._fetch_count = 0

    def toggle(self, key: str) -> asyncio.Task[None] | None:
        """Expand or collapse a row.

        Collapsing only changes state; cached detail is kept. Expanding a
        row with no cache entry and no fetch in flight dispatches a fetch
        on the running event loop.

        Args:
            key: The parent row key.

        Returns:
            The in-flight fetch task for the key, or None if there is none.
        """
        if self._expanded.get(key, False):
            self._expanded[key] = False
            return None

        self._expanded[key] = True
        if key in self._entries:
            return None
        if key in self._pending:
            return self._pending[key]
        return self._dispatch(key)

    def _dispatch(self, key: str) -> asyncio.Task[None]:
        loop = asyncio.get_running_loop()
        self._loading[key] = True
        self._fetch_count += 1
        task = loop.create_task(self.resolve(key))
        self._pending[key] = task
        return task

    async def resolve(self, key: str) -> None:
        """Fetch and store the detail rows for a key.

        Failures are logged and stored as an empty result. The loading
        flag is cleared on every path.

        Args:
            key: The parent row key.
        """
        generation = self._generation
        self._loading[key] = True
        id1, id2 = self._profile_ids or (None, None)
        try:
            try:
                rows = tuple(await self._fetch_detail(id1, id2, key))
            except Exception:
                logger.warning("Error loading detail for %s", key, exc_info=True)
                rows = ()

            if generation != self._generation:
                logger.debug("Discarding detail for %s from a previous session", key)
                return
            self._entries[key] = rows
        finally:
            if generation == self._generation:
                self._loading[key] = False
                self._pending.pop(key, None)

    async def wait_pending(self) -> None:
        """Wait for every in-flight fetch, including orphaned ones."""
        tasks = [*self._pending.values(), *self._orphaned]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def is_expanded(self, key: str) -> bool:
        return self._expanded.get(key, False)

    def is_loading(self, key: str) -> bool:
        return self._loading.get(key, False)

    def is_cached(self, key: str) -> bool:
        """Whether detail for the key has been fetched this session."""
        return key in self._entries

    def detail_for(self, key: str) -> tuple[DetailRow, ...]:
        """Cached detail rows for a key, empty if not fetched yet."""
        return self._entries.get(key, ())
