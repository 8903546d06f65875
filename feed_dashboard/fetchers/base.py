"""
Base classes and interfaces for feed fetchers.

This module defines the contract that all feed fetchers must follow.
"""

import html
import re
from typing import Any, Optional, Protocol

from feed_dashboard.models import FeedFetchOutcome, FeedSource

DEFAULT_TIMEOUT = 10
USER_AGENT = "FeedDashboard/1.0"

_TAG_RE = re.compile("<.*?>", re.DOTALL)


class FeedFetcher(Protocol):
    """
    Protocol for feed fetchers.

    A fetcher issues one request for a source and always returns exactly one
    outcome. Transport and parse errors become a FetchFailure; nothing is
    raised to the caller.
    """

    def fetch(self, source: FeedSource) -> FeedFetchOutcome:
        """Fetches and parses a feed."""


def strip_html(raw_html: Optional[str]) -> str:
    """Removes HTML tags and entities from a string."""
    if not raw_html:
        return ""
    text = html.unescape(_TAG_RE.sub(" ", raw_html))
    return " ".join(text.split())


def as_text(value: Any) -> Optional[str]:
    """Feed text as a string: numbers are stringified, empty strings and objects are absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value != "":
        return value
    return None


def first_text(data: Any, *keys: str) -> Optional[str]:
    """Returns the first key whose value is usable as text, or None."""
    for key in keys:
        text = as_text(data.get(key))
        if text is not None:
            return text
    return None
