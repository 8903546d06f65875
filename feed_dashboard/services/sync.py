"""
Sync orchestration.

This module provides the SyncOrchestrator class which fetches every feed
concurrently, waits for the whole batch, and swaps in the reconciled cache.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from feed_dashboard.fetchers.base import FeedFetcher
from feed_dashboard.models import EMPTY_CACHE, FeedCache, FeedFetchOutcome, FeedSource, FetchFailure
from feed_dashboard.services.cache import CacheReconciler

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Runs fetch-all cycles and owns the current cache snapshot.

    There is no reentrancy guard here: callers are expected not to start a
    cycle while in_flight is set. If they do anyway, only the most recent
    cycle's results are applied.
    """

    def __init__(
        self,
        sources: Sequence[FeedSource],
        fetcher: FeedFetcher,
        reconciler: Optional[CacheReconciler] = None,
    ):
        self.sources = tuple(sources)
        self.fetcher = fetcher
        self.reconciler = reconciler or CacheReconciler(self.sources)
        self.cache: FeedCache = EMPTY_CACHE
        self.in_flight = False
        self._generation = 0
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Registers a callback run whenever the cache or in_flight changes."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    def _set_in_flight(self, value: bool) -> None:
        self.in_flight = value
        self._notify()

    async def _fetch_one(self, source: FeedSource) -> FeedFetchOutcome:
        try:
            return await asyncio.to_thread(self.fetcher.fetch, source)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Fetcher raised for feed %s: %s", source.id, e)
            return FetchFailure(id=source.id)

    async def sync_all(self) -> FeedCache:
        """Fetches all feeds concurrently and replaces the cache once."""
        self._generation += 1
        generation = self._generation
        self._set_in_flight(True)
        logger.info("--- Syncing %d feeds (cycle %d) ---", len(self.sources), generation)

        try:
            outcomes = await asyncio.gather(*(self._fetch_one(source) for source in self.sources))
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_in_flight(False)
            raise

        if generation != self._generation:
            logger.info("Discarding results of superseded cycle %d.", generation)
            return self.cache

        self.cache = self.reconciler.reconcile(self.cache, outcomes)
        self._set_in_flight(False)
        logger.info("Sync cycle %d complete.", generation)
        return self.cache
