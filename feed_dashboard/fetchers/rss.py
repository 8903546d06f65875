"""
RSS/Atom feed fetcher implementation.

This module provides the RSSFeedFetcher class for sources configured with
format "rss". Entries are normalized into the same Article model as JSON
feeds.
"""

import datetime
import logging
from typing import Any, Optional

import feedparser  # type: ignore
import requests

from feed_dashboard.fetchers.base import DEFAULT_TIMEOUT, USER_AGENT, FeedFetcher, strip_html
from feed_dashboard.models import Article, FeedFetchOutcome, FeedSource, FetchFailure, FetchSuccess

logger = logging.getLogger(__name__)


def _entry_image(entry: Any) -> Optional[str]:
    thumbnails = entry.get("media_thumbnail") or []
    if thumbnails and thumbnails[0].get("url"):
        return thumbnails[0]["url"]
    for enclosure in entry.get("enclosures") or []:
        if str(enclosure.get("type") or "").startswith("image") and enclosure.get("href"):
            return enclosure["href"]
    return None


class RSSFeedFetcher(FeedFetcher):
    """Fetches standard RSS and Atom feeds."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def _to_article(self, entry: Any) -> Article:
        return Article(
            identifier=entry.get("id") or None,
            title=entry.get("title") or "",
            body_text=strip_html(entry.get("summary") or entry.get("description")),
            url=entry.get("link") or None,
            published_at=entry.get("published") or entry.get("updated") or None,
            image_url=_entry_image(entry),
            author=entry.get("author") or None,
        )

    def fetch(self, source: FeedSource) -> FeedFetchOutcome:
        """Fetches and parses a single RSS feed."""
        try:
            try:
                resp = requests.get(
                    source.endpoint, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
                )
                resp.raise_for_status()
            except requests.RequestException as req_err:
                logger.error("Error fetching feed %s: %s", source.id, req_err)
                return FetchFailure(id=source.id)

            feed = feedparser.parse(resp.content)
            if feed.bozo and not feed.entries:
                logger.error("Invalid feed document for %s: %s", source.id, feed.get("bozo_exception"))
                return FetchFailure(id=source.id)

            items = tuple(self._to_article(entry) for entry in feed.entries)
            logger.info("Fetched %d items from feed %s.", len(items), source.id)
            return FetchSuccess(
                id=source.id,
                title=feed.feed.get("title") or None,
                items=items,
                fetched_at=datetime.datetime.now().astimezone(),
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing feed %s: %s", source.id, e)
        return FetchFailure(id=source.id)
