"""
Feed source table.

The ordered list of feeds the dashboard shows. Read once at startup.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from feed_dashboard.models import FeedSource

SUPPORTED_FORMATS = ("json", "rss")

DEFAULT_FEEDS: List[Dict[str, str]] = [
    {"id": "1", "name": "Feed 1", "url": "https://rss.app/feeds/v1.1/_IVI6PHx4cd522mFt.json"},
    {"id": "2", "name": "Feed 2", "url": "https://rss.app/feeds/v1.1/_CWNS5Ow7U6sibU2i.json"},
    {"id": "3", "name": "Feed 3", "url": "https://rss.app/feeds/v1.1/_sQFQUxzLwF8DlCgT.json"},
    {"id": "4", "name": "Feed 4", "url": "https://rss.app/feeds/v1.1/_hSO6WVRr2FWVZBzm.json"},
    {"id": "5", "name": "Feed 5", "url": "https://rss.app/feeds/v1.1/YhetfKRWyDHRgnvF.json"},
]


def load_sources(feeds: Optional[Sequence[Dict[str, Any]]] = None) -> Tuple[FeedSource, ...]:
    """Builds the source table from config entries, in declaration order."""
    entries = DEFAULT_FEEDS if feeds is None else feeds
    if not entries:
        raise ValueError("At least one feed must be configured.")

    sources = []
    seen = set()
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Feed #{position} must be an object, got {type(entry).__name__}.")
        url = entry.get("url")
        if not url:
            raise ValueError(f"Feed #{position} has no url.")

        feed_id = str(entry.get("id") or position + 1)
        if feed_id in seen:
            raise ValueError(f"Duplicate feed id: {feed_id}")
        seen.add(feed_id)

        fmt = entry.get("format", "json")
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Feed {feed_id} has unsupported format: {fmt}")

        sources.append(
            FeedSource(
                id=feed_id,
                endpoint=url,
                display_name=entry.get("name") or f"Feed {feed_id}",
                format=fmt,
            )
        )
    return tuple(sources)


def find_source(sources: Sequence[FeedSource], feed_id: str) -> Optional[FeedSource]:
    for source in sources:
        if source.id == feed_id:
            return source
    return None
