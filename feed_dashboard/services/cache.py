"""
Cache reconciliation.

This module provides the CacheReconciler class which folds one sync cycle's
fetch outcomes into a fresh, read-only feed cache.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Sequence

from feed_dashboard.models import (
    FAILED_TO_LOAD,
    CacheEntry,
    FeedCache,
    FeedFetchOutcome,
    FeedSource,
    FetchSuccess,
)

logger = logging.getLogger(__name__)


class CacheReconciler:
    """Builds a new cache snapshot from the previous one and an outcome batch."""

    def __init__(self, sources: Sequence[FeedSource]):
        self.sources = tuple(sources)

    def reconcile(self, previous: FeedCache, outcomes: Iterable[FeedFetchOutcome]) -> FeedCache:
        """
        Returns a new cache with exactly one entry per source.

        A failed source gets an error entry and loses any items it had
        before; the previous snapshot is only consulted for sources missing
        from the batch.
        """
        by_id: Dict[str, FeedFetchOutcome] = {}
        known = {source.id for source in self.sources}
        for outcome in outcomes:
            if outcome.id not in known:
                logger.warning("Ignoring outcome for unknown feed %s.", outcome.id)
                continue
            by_id[outcome.id] = outcome

        cache: Dict[str, CacheEntry] = {}
        for source in self.sources:
            outcome = by_id.get(source.id)
            if outcome is None:
                logger.warning("No outcome for feed %s in this cycle.", source.id)
                cache[source.id] = previous.get(source.id) or CacheEntry.from_failure(
                    FAILED_TO_LOAD, source.display_name
                )
            elif isinstance(outcome, FetchSuccess):
                cache[source.id] = CacheEntry.from_success(outcome, source.display_name)
            else:
                cache[source.id] = CacheEntry.from_failure(outcome.reason, source.display_name)

        failed = sum(1 for entry in cache.values() if entry.error)
        logger.info("Reconciled %d feeds (%d failed).", len(cache), failed)
        return MappingProxyType(cache)
