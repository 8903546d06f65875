"""
JSON feed fetcher implementation.

This module provides the JSONFeedFetcher class for fetching JSON Feed style
documents (as served by rss.app and similar services) and normalizing their
items into Article objects.
"""

import datetime
import logging
from typing import Any, Dict, List, Optional

import requests

from feed_dashboard.fetchers.base import (
    DEFAULT_TIMEOUT,
    USER_AGENT,
    FeedFetcher,
    as_text,
    first_text,
    strip_html,
)
from feed_dashboard.models import Article, FeedFetchOutcome, FeedSource, FetchFailure, FetchSuccess

logger = logging.getLogger(__name__)


def _image_url(item: Dict[str, Any]) -> Optional[str]:
    image = first_text(item, "image", "thumbnail")
    if image:
        return image
    enclosure = item.get("enclosure")
    if isinstance(enclosure, dict):
        link = as_text(enclosure.get("link"))
        if link and (as_text(enclosure.get("type")) or "").startswith("image"):
            return link
    return None


def _author_name(author: Any) -> Optional[str]:
    if isinstance(author, dict):
        return as_text(author.get("name"))
    return as_text(author)


def _author(item: Dict[str, Any]) -> Optional[str]:
    name = _author_name(item.get("author"))
    if name:
        return name
    authors = item.get("authors")
    if isinstance(authors, list) and authors:
        return _author_name(authors[0])
    return None


def parse_item(item: Dict[str, Any]) -> Article:
    """Normalizes one feed item, tolerating missing optional fields."""
    body = first_text(item, "content_text", "description")
    if not body:
        body = strip_html(as_text(item.get("content_html")))

    return Article(
        identifier=first_text(item, "id", "guid"),
        title=as_text(item.get("title")) or "",
        body_text=body,
        url=first_text(item, "url", "link"),
        published_at=first_text(item, "date_published", "pubDate"),
        image_url=_image_url(item),
        author=_author(item),
    )


def parse_document(document: Any) -> Dict[str, Any]:
    """
    Validates a feed document and extracts its title and articles.

    Raises ValueError when the document does not look like a feed at all.
    """
    if not isinstance(document, dict):
        raise ValueError("Feed document must be a JSON object")
    raw_items = document.get("items")
    if not isinstance(raw_items, list):
        raise ValueError("Feed document has no items list")

    title = document.get("title")
    items: List[Article] = [parse_item(item) for item in raw_items if isinstance(item, dict)]
    return {
        "title": title if isinstance(title, str) and title else None,
        "items": tuple(items),
    }


class JSONFeedFetcher(FeedFetcher):
    """Fetches JSON feeds."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def fetch(self, source: FeedSource) -> FeedFetchOutcome:
        """Fetches and parses a single JSON feed."""
        try:
            try:
                resp = requests.get(
                    source.endpoint,
                    timeout=self.timeout,
                    headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                )
                resp.raise_for_status()
            except requests.RequestException as req_err:
                logger.error("Error fetching feed %s: %s", source.id, req_err)
                return FetchFailure(id=source.id)

            parsed = parse_document(resp.json())
            logger.info("Fetched %d items from feed %s.", len(parsed["items"]), source.id)
            return FetchSuccess(
                id=source.id,
                title=parsed["title"],
                items=parsed["items"],
                fetched_at=datetime.datetime.now().astimezone(),
            )
        except ValueError as e:
            logger.error("Invalid feed document for %s: %s", source.id, e)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing feed %s: %s", source.id, e)
        return FetchFailure(id=source.id)
