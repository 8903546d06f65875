"""
View projection.

Pure functions deriving render inputs from the cache and the active feed id.
Nothing here is memoized; recompute on every render.
"""

from typing import List, Sequence

from feed_dashboard.models import (
    DashboardState,
    FeedCache,
    FeedListEntry,
    FeedSource,
    RotationView,
    ViewProjection,
)
from feed_dashboard.sources import find_source


def project(cache: FeedCache, active_id: str, sources: Sequence[FeedSource]) -> ViewProjection:
    """Title, items, error and timestamp for the active feed."""
    entry = cache.get(active_id)
    if entry is not None:
        return ViewProjection(
            title=entry.title,
            items=entry.items,
            error=entry.error,
            fetched_at=entry.fetched_at,
        )

    source = find_source(sources, active_id)
    return ViewProjection(
        title=source.display_name if source else active_id,
        items=(),
        error=None,
        fetched_at=None,
    )


def feed_list(cache: FeedCache, active_id: str, sources: Sequence[FeedSource]) -> List[FeedListEntry]:
    """Selector entries, labelled with the cached feed title when known."""
    entries = []
    for source in sources:
        cached = cache.get(source.id)
        entries.append(
            FeedListEntry(
                id=source.id,
                display_name=source.display_name,
                label=(cached.title if cached else None) or source.display_name,
                active=source.id == active_id,
            )
        )
    return entries


def build_state(
    cache: FeedCache,
    active_id: str,
    sources: Sequence[FeedSource],
    global_loading: bool,
    rotation: RotationView,
    dark_mode: bool,
) -> DashboardState:
    view = project(cache, active_id, sources)
    return DashboardState(
        global_loading=global_loading,
        current_title=view["title"],
        items=view["items"],
        error=view["error"],
        last_updated=view["fetched_at"],
        rotation=rotation,
        feed_list=feed_list(cache, active_id, sources),
        dark_mode=dark_mode,
        has_data=active_id in cache,
    )
