"""
Feed Dashboard
This script fetches the configured JSON feeds concurrently, caches each
feed's articles, and renders the selected feed as an HTML card grid, with
optional timed rotation between feeds.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Callable, Dict, Optional, Sequence

from feed_dashboard.fetchers.base import DEFAULT_TIMEOUT, FeedFetcher
from feed_dashboard.fetchers.dispatch import SourceFetcher
from feed_dashboard.models import DashboardState, FeedSource, RotationView
from feed_dashboard.services.renderer import DashboardRenderer
from feed_dashboard.services.rotation import DEFAULT_PERIOD, RotationScheduler, next_index
from feed_dashboard.services.sync import SyncOrchestrator
from feed_dashboard.services.view import build_state
from feed_dashboard.sources import load_sources

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    # Build absolute path relative to this script
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
        return {}


def env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes")


CONFIG: Dict[str, Any] = load_config()

# Env Vars
OUTPUT_PATH: str = os.environ.get("DASHBOARD_OUTPUT", CONFIG.get("output_path", "dashboard.html"))
ROTATE_ON_START: bool = env_flag("DASHBOARD_ROTATE", bool(CONFIG.get("rotate_on_start", False)))

# Redraw the progress bar every N progress ticks
PROGRESS_RENDER_TICKS = 10


class UnknownFeedError(KeyError):
    """Raised when selecting a feed id that is not in the source table."""


class Dashboard:
    """
    Ties the sync engine, rotation scheduler and view state together.

    The public methods are the user actions: select_feed, refresh_all,
    toggle_rotation and toggle_theme. on_change receives a fresh
    DashboardState after every change worth re-rendering.
    """

    def __init__(
        self,
        sources: Sequence[FeedSource],
        fetcher: FeedFetcher,
        rotation_interval: float = DEFAULT_PERIOD,
        dark_mode: bool = True,
        on_change: Optional[Callable[[DashboardState], None]] = None,
    ):
        if not sources:
            raise ValueError("Dashboard needs at least one feed source.")
        self.sources = tuple(sources)
        self.sync = SyncOrchestrator(self.sources, fetcher)
        self.rotation = RotationScheduler(
            self._advance,
            period=rotation_interval,
            on_tick=self._changed,
            notify_every=PROGRESS_RENDER_TICKS,
        )
        self.active_id = self.sources[0].id
        self.dark_mode = dark_mode
        self.on_change = on_change
        self.sync.subscribe(self._changed)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self.state())

    def state(self) -> DashboardState:
        """Current rendering inputs; recomputed on every call."""
        return build_state(
            self.sync.cache,
            self.active_id,
            self.sources,
            global_loading=self.sync.in_flight,
            rotation=RotationView(
                enabled=self.rotation.enabled,
                progress_fraction=self.rotation.elapsed_fraction,
            ),
            dark_mode=self.dark_mode,
        )

    def _index_of(self, feed_id: str) -> int:
        for index, source in enumerate(self.sources):
            if source.id == feed_id:
                return index
        raise UnknownFeedError(feed_id)

    def _advance(self) -> None:
        index = next_index(self._index_of(self.active_id), len(self.sources))
        self.active_id = self.sources[index].id
        logger.info("Rotated to feed %s.", self.active_id)
        self._changed()

    def select_feed(self, feed_id: str) -> None:
        self._index_of(feed_id)
        self.active_id = feed_id
        self._changed()

    async def start(self) -> None:
        """Initial sync at startup."""
        await self.sync.sync_all()

    async def refresh_all(self) -> bool:
        """Re-syncs every feed. Ignored while a sync is already running."""
        if self.sync.in_flight:
            logger.info("Refresh ignored: sync already in progress.")
            return False
        await self.sync.sync_all()
        return True

    def toggle_rotation(self) -> bool:
        enabled = self.rotation.toggle()
        self._changed()
        return enabled

    def toggle_theme(self) -> bool:
        self.dark_mode = not self.dark_mode
        self._changed()
        return self.dark_mode

    async def close(self) -> None:
        await self.rotation.aclose()


async def run(config: Dict[str, Any], output_path: str, rotate: bool) -> Dashboard:
    """Builds the dashboard, syncs once, and keeps rotating if asked to."""
    sources = load_sources(config.get("feeds"))
    renderer = DashboardRenderer()
    dashboard = Dashboard(
        sources,
        SourceFetcher(timeout=config.get("request_timeout", DEFAULT_TIMEOUT)),
        rotation_interval=config.get("rotation_interval", DEFAULT_PERIOD),
        dark_mode=config.get("dark_mode", True),
        on_change=lambda state: renderer.write(state, output_path),
    )

    try:
        if rotate:
            dashboard.toggle_rotation()
        await dashboard.start()
        logger.info("Dashboard written to %s.", output_path)
        if dashboard.rotation.enabled:
            # Runs until cancelled (Ctrl+C)
            await asyncio.Event().wait()
    finally:
        await dashboard.close()
    return dashboard


def main():
    """Main execution entry point."""
    try:
        asyncio.run(run(CONFIG, OUTPUT_PATH, ROTATE_ON_START))
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Stopped.")


if __name__ == "__main__":
    main()
