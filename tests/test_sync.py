"""Unit tests for the sync orchestrator."""

import asyncio
import datetime
import time
import unittest
from unittest.mock import MagicMock, patch

import requests

from feed_dashboard.fetchers.json_feed import JSONFeedFetcher
from feed_dashboard.models import FAILED_TO_LOAD, Article, FeedSource, FetchFailure, FetchSuccess
from feed_dashboard.services.cache import CacheReconciler
from feed_dashboard.services.sync import SyncOrchestrator
from feed_dashboard.services.view import project

NOW = datetime.datetime(2024, 3, 5, 14, 30, tzinfo=datetime.timezone.utc)

SOURCES = (
    FeedSource(id="0", endpoint="https://a.example/feed.json", display_name="Alpha"),
    FeedSource(id="1", endpoint="https://b.example/feed.json", display_name="Beta"),
    FeedSource(id="2", endpoint="https://c.example/feed.json", display_name="Gamma"),
)


class StubFetcher:
    """Returns a canned outcome per source, optionally after a delay."""

    def __init__(self, title="Stub", delay=0.0, fail=(), on_fetch=None):
        self.title = title
        self.delay = delay
        self.fail = set(fail)
        self.on_fetch = on_fetch
        self.calls = []

    def fetch(self, source):
        if self.on_fetch:
            self.on_fetch(source)
        if self.delay:
            time.sleep(self.delay)
        self.calls.append(source.id)
        if source.id in self.fail:
            return FetchFailure(id=source.id)
        return FetchSuccess(
            id=source.id, title=self.title, items=(Article(title=f"{source.id}-0"),), fetched_at=NOW
        )


def fake_get(url, **kwargs):
    resp = MagicMock()
    if "b.example" in url:
        resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    else:
        resp.json.return_value = {"title": f"Title of {url}", "items": [{"id": "x", "title": "Item"}]}
    return resp


class TestSyncOrchestrator(unittest.IsolatedAsyncioTestCase):
    async def test_sync_all_fetches_every_source(self):
        fetcher = StubFetcher()
        orchestrator = SyncOrchestrator(SOURCES, fetcher)

        cache = await orchestrator.sync_all()

        self.assertEqual(sorted(fetcher.calls), ["0", "1", "2"])
        self.assertEqual(sorted(cache.keys()), ["0", "1", "2"])
        self.assertIs(orchestrator.cache, cache)

    async def test_fetches_run_concurrently(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher(delay=0.3))

        started = time.monotonic()
        await orchestrator.sync_all()
        elapsed = time.monotonic() - started

        self.assertLess(elapsed, 0.8)

    async def test_in_flight_spans_the_whole_cycle(self):
        observed = []
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher())
        orchestrator.fetcher = StubFetcher(on_fetch=lambda source: observed.append(orchestrator.in_flight))

        reconciler = CacheReconciler(SOURCES)
        original_reconcile = reconciler.reconcile

        def reconcile(previous, outcomes):
            observed.append(orchestrator.in_flight)
            return original_reconcile(previous, outcomes)

        reconciler.reconcile = reconcile
        orchestrator.reconciler = reconciler

        self.assertFalse(orchestrator.in_flight)
        await orchestrator.sync_all()

        self.assertFalse(orchestrator.in_flight)
        self.assertEqual(observed, [True, True, True, True])

    async def test_in_flight_visible_to_event_loop(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher(delay=0.2))

        task = asyncio.create_task(orchestrator.sync_all())
        await asyncio.sleep(0.05)
        self.assertTrue(orchestrator.in_flight)
        await task
        self.assertFalse(orchestrator.in_flight)

    async def test_listeners_notified(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher())
        states = []
        orchestrator.subscribe(lambda: states.append(orchestrator.in_flight))

        await orchestrator.sync_all()

        self.assertEqual(states, [True, False])

    async def test_failure_is_contained(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher(fail={"1"}))

        cache = await orchestrator.sync_all()

        self.assertEqual(cache["1"].error, FAILED_TO_LOAD)
        self.assertEqual(len(cache["0"].items), 1)
        self.assertEqual(len(cache["2"].items), 1)

    async def test_raising_fetcher_is_contained(self):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = RuntimeError("boom")
        orchestrator = SyncOrchestrator(SOURCES, fetcher)

        cache = await orchestrator.sync_all()

        self.assertTrue(all(entry.error for entry in cache.values()))
        self.assertFalse(orchestrator.in_flight)

    async def test_fail_after_success_discards_items(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher())
        await orchestrator.sync_all()
        self.assertEqual(len(orchestrator.cache["1"].items), 1)

        orchestrator.fetcher = StubFetcher(fail={"1"})
        cache = await orchestrator.sync_all()

        self.assertEqual(cache["1"].items, ())
        self.assertEqual(cache["1"].error, FAILED_TO_LOAD)

    async def test_superseded_cycle_is_discarded(self):
        orchestrator = SyncOrchestrator(SOURCES, StubFetcher(title="old", delay=0.3))

        slow = asyncio.create_task(orchestrator.sync_all())
        await asyncio.sleep(0.05)
        orchestrator.fetcher = StubFetcher(title="new")
        await orchestrator.sync_all()
        self.assertEqual(orchestrator.cache["0"].title, "new")

        await slow
        self.assertEqual(orchestrator.cache["0"].title, "new")
        self.assertFalse(orchestrator.in_flight)

    @patch("requests.get", side_effect=fake_get)
    async def test_http_500_scenario(self, _mock_get):
        orchestrator = SyncOrchestrator(SOURCES, JSONFeedFetcher())

        cache = await orchestrator.sync_all()

        self.assertEqual(cache["1"].error, FAILED_TO_LOAD)
        self.assertEqual(len(cache["0"].items), 1)
        self.assertEqual(len(cache["2"].items), 1)
        view = project(cache, "1", SOURCES)
        self.assertEqual(view["items"], ())
        self.assertEqual(view["error"], FAILED_TO_LOAD)
        self.assertEqual(view["title"], "Beta")


if __name__ == "__main__":
    unittest.main()
