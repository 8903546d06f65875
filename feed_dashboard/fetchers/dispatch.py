"""
Routes each source to the fetcher for its configured format.
"""

import logging
from typing import Dict, Optional

from feed_dashboard.fetchers.base import DEFAULT_TIMEOUT, FeedFetcher
from feed_dashboard.fetchers.json_feed import JSONFeedFetcher
from feed_dashboard.fetchers.rss import RSSFeedFetcher
from feed_dashboard.models import FeedFetchOutcome, FeedSource, FetchFailure

logger = logging.getLogger(__name__)


class SourceFetcher(FeedFetcher):
    """Delegates to a per-format fetcher."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        fetchers: Optional[Dict[str, FeedFetcher]] = None,
    ):
        self.fetchers = fetchers or {
            "json": JSONFeedFetcher(timeout),
            "rss": RSSFeedFetcher(timeout),
        }

    def fetch(self, source: FeedSource) -> FeedFetchOutcome:
        fetcher = self.fetchers.get(source.format)
        if fetcher is None:
            logger.error("No fetcher for format %s (feed %s).", source.format, source.id)
            return FetchFailure(id=source.id)
        return fetcher.fetch(source)
