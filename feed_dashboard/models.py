"""
Data models for the Feed Dashboard application.
"""

import datetime
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, TypedDict, Union

FAILED_TO_LOAD = "Failed to load feed"


@dataclass(frozen=True)
class FeedSource:
    """A configured feed endpoint. Defined at startup, never mutated."""

    id: str
    endpoint: str
    display_name: str
    format: str = "json"


@dataclass(frozen=True)
class Article:
    """One entry within a feed."""

    title: str
    body_text: str = ""
    identifier: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = None
    image_url: Optional[str] = None
    author: Optional[str] = None

    def key(self, position: int) -> str:
        """Stable key for rendering, falling back to the article's position."""
        return self.identifier or str(position)


@dataclass(frozen=True)
class FetchSuccess:
    id: str
    title: Optional[str]
    items: Tuple[Article, ...]
    fetched_at: datetime.datetime


@dataclass(frozen=True)
class FetchFailure:
    id: str
    reason: str = FAILED_TO_LOAD


FeedFetchOutcome = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached state of one feed.

    Either in error state (error set, no items, no timestamp) or in data
    state (no error, fetched_at set). Use the from_* constructors.
    """

    title: str
    items: Tuple[Article, ...] = field(default_factory=tuple)
    error: Optional[str] = None
    fetched_at: Optional[datetime.datetime] = None

    @classmethod
    def from_success(cls, outcome: FetchSuccess, fallback_title: str) -> "CacheEntry":
        return cls(
            title=outcome.title or fallback_title,
            items=tuple(outcome.items),
            fetched_at=outcome.fetched_at,
        )

    @classmethod
    def from_failure(cls, reason: str, title: str) -> "CacheEntry":
        return cls(title=title, items=(), error=reason)


FeedCache = Mapping[str, CacheEntry]

EMPTY_CACHE: FeedCache = MappingProxyType({})


class ViewProjection(TypedDict):
    """Render inputs for the active feed."""

    title: str
    items: Tuple[Article, ...]
    error: Optional[str]
    fetched_at: Optional[datetime.datetime]


class RotationView(TypedDict):
    enabled: bool
    progress_fraction: float


class FeedListEntry(TypedDict):
    id: str
    display_name: str
    label: str
    active: bool


class DashboardState(TypedDict):
    """Everything the rendering layer needs for one render."""

    global_loading: bool
    current_title: str
    items: Tuple[Article, ...]
    error: Optional[str]
    last_updated: Optional[datetime.datetime]
    rotation: RotationView
    feed_list: List[FeedListEntry]
    dark_mode: bool
    has_data: bool
