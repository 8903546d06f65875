"""Unit tests for cache reconciliation."""

import datetime
import unittest

from feed_dashboard.models import (
    EMPTY_CACHE,
    FAILED_TO_LOAD,
    Article,
    CacheEntry,
    FeedSource,
    FetchFailure,
    FetchSuccess,
)
from feed_dashboard.services.cache import CacheReconciler

NOW = datetime.datetime(2024, 3, 5, 14, 30, tzinfo=datetime.timezone.utc)

SOURCES = (
    FeedSource(id="1", endpoint="https://a.example/feed.json", display_name="Feed 1"),
    FeedSource(id="2", endpoint="https://b.example/feed.json", display_name="Feed 2"),
    FeedSource(id="3", endpoint="https://c.example/feed.json", display_name="Feed 3"),
)


def success(feed_id, title="Title", count=2):
    items = tuple(Article(title=f"{feed_id}-{i}") for i in range(count))
    return FetchSuccess(id=feed_id, title=title, items=items, fetched_at=NOW)


class TestCacheReconciler(unittest.TestCase):
    def setUp(self):
        self.reconciler = CacheReconciler(SOURCES)

    def test_one_entry_per_source(self):
        cache = self.reconciler.reconcile(
            EMPTY_CACHE, [success("1"), FetchFailure(id="2"), success("3")]
        )
        self.assertEqual(sorted(cache.keys()), ["1", "2", "3"])

    def test_success_entry(self):
        cache = self.reconciler.reconcile(EMPTY_CACHE, [success("1", "Tech"), success("2"), success("3")])
        entry = cache["1"]
        self.assertEqual(entry.title, "Tech")
        self.assertEqual(len(entry.items), 2)
        self.assertIsNone(entry.error)
        self.assertEqual(entry.fetched_at, NOW)

    def test_missing_title_falls_back_to_display_name(self):
        cache = self.reconciler.reconcile(EMPTY_CACHE, [success("1", title=None), success("2"), success("3")])
        self.assertEqual(cache["1"].title, "Feed 1")

    def test_failure_entry(self):
        cache = self.reconciler.reconcile(EMPTY_CACHE, [success("1"), FetchFailure(id="2"), success("3")])
        entry = cache["2"]
        self.assertEqual(entry.error, FAILED_TO_LOAD)
        self.assertEqual(entry.items, ())
        self.assertEqual(entry.title, "Feed 2")
        self.assertIsNone(entry.fetched_at)

    def test_failure_discards_previous_items(self):
        first = self.reconciler.reconcile(EMPTY_CACHE, [success("1"), success("2"), success("3")])
        self.assertEqual(len(first["2"].items), 2)

        second = self.reconciler.reconcile(first, [success("1"), FetchFailure(id="2"), success("3")])

        self.assertEqual(second["2"].items, ())
        self.assertEqual(second["2"].error, FAILED_TO_LOAD)
        # the previous snapshot is untouched
        self.assertEqual(len(first["2"].items), 2)

    def test_unknown_outcome_is_dropped(self):
        cache = self.reconciler.reconcile(
            EMPTY_CACHE, [success("1"), success("2"), success("3"), success("99")]
        )
        self.assertNotIn("99", cache)
        self.assertEqual(len(cache), 3)

    def test_source_missing_from_batch(self):
        previous = {"1": CacheEntry(title="Old", items=(Article(title="x"),), fetched_at=NOW)}
        cache = self.reconciler.reconcile(previous, [success("2")])
        self.assertEqual(cache["1"], previous["1"])
        self.assertEqual(cache["3"].error, FAILED_TO_LOAD)

    def test_snapshot_is_read_only(self):
        cache = self.reconciler.reconcile(EMPTY_CACHE, [success("1"), success("2"), success("3")])
        with self.assertRaises(TypeError):
            cache["1"] = CacheEntry(title="mutated")  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
