"""
Unit tests for result hydration with adaptive date windows.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from fakes import NOW, FakeArticleStore, make_article
from newsrank.hydrator import ResultHydrator, validate_windows, window_bounds

pytestmark = pytest.mark.unit


@pytest.fixture
def scenario_store():
    """
    3 articles from today, 2 from two days ago, 3 from five days ago,
    and 2 that are too old for any window.
    """
    articles = (
        [make_article(f"today{i}", age_days=0) for i in range(3)]
        + [make_article(f"twodays{i}", age_days=2) for i in range(2)]
        + [make_article(f"fivedays{i}", age_days=5) for i in range(3)]
        + [make_article(f"stale{i}", age_days=40) for i in range(2)]
    )
    return FakeArticleStore(articles)


# Rank order interleaves ages and includes ids the store has never seen
ORDERED_IDS = [
    "fivedays0", "today0", "stale0", "twodays0", "missing", "today1",
    "fivedays1", "twodays1", "today2", "stale1", "fivedays2",
]


class TestWindowBounds:
    """Test date window arithmetic"""

    def test_two_day_window(self):
        start, end = window_bounds(2, NOW)
        assert start == datetime(2025, 3, 11, 0, 0, tzinfo=timezone.utc)
        assert end.date() == NOW.date()
        assert end > NOW

    def test_one_day_window_is_today(self):
        start, end = window_bounds(1, NOW)
        assert start == datetime(2025, 3, 12, tzinfo=timezone.utc)

    def test_validate_windows(self):
        assert validate_windows([2, 3, 7]) == (2, 3, 7)
        with pytest.raises(ValueError):
            validate_windows([])
        with pytest.raises(ValueError):
            validate_windows([3, 2])
        with pytest.raises(ValueError):
            validate_windows([0, 2])
        with pytest.raises(ValueError):
            validate_windows([2, 2])


@pytest.mark.asyncio
class TestHydrate:
    """Test adaptive window widening"""

    async def test_stops_at_first_window_meeting_target(self, scenario_store, clock):
        """2-day window: 3 hits, 3-day: 5 hits, 7-day: 8 hits → use 7-day"""
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        articles = await hydrator.hydrate(ORDERED_IDS, target_count=6)

        assert len(scenario_store.calls) == 3
        assert [a.id for a in articles] == [
            "fivedays0", "today0", "twodays0", "today1",
            "fivedays1", "twodays1", "today2", "fivedays2",
        ]

    async def test_first_window_sufficient(self, scenario_store, clock):
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        articles = await hydrator.hydrate(ORDERED_IDS, target_count=3)

        assert len(scenario_store.calls) == 1
        assert [a.id for a in articles] == ["today0", "today1", "today2"]

    async def test_widest_window_returned_even_if_short(self, scenario_store, clock):
        """Best effort: never empty just because the target was not reached"""
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        articles = await hydrator.hydrate(ORDERED_IDS, target_count=50)

        assert len(scenario_store.calls) == 3
        assert len(articles) == 8

    async def test_each_window_queries_all_candidate_ids(self, scenario_store, clock):
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3], clock=clock)

        await hydrator.hydrate(ORDERED_IDS, target_count=6)

        for ids, start, end in scenario_store.calls:
            assert ids == ORDERED_IDS
        assert scenario_store.calls[0][1] > scenario_store.calls[1][1]

    async def test_output_is_subsequence_of_input(self, scenario_store, clock):
        hydrator = ResultHydrator(scenario_store, clock=clock)
        ids = list(reversed(ORDERED_IDS))

        articles = await hydrator.hydrate(ids, target_count=4)

        positions = [ids.index(a.id) for a in articles]
        assert positions == sorted(positions)

    async def test_empty_ids_skip_store(self, scenario_store, clock):
        hydrator = ResultHydrator(scenario_store, clock=clock)

        assert await hydrator.hydrate([], target_count=5) == []
        assert scenario_store.calls == []

    async def test_duplicate_ids_emitted_once(self, scenario_store, clock):
        hydrator = ResultHydrator(scenario_store, window_days=[2], clock=clock)

        articles = await hydrator.hydrate(["today0", "today0", "today1"], target_count=1)

        assert [a.id for a in articles] == ["today0", "today1"]

    async def test_failed_window_advances_to_next(self, scenario_store, clock):
        """A store error counts as zero results for that window"""
        scenario_store.failing_windows = {1}
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        articles = await hydrator.hydrate(ORDERED_IDS, target_count=3)

        assert len(scenario_store.calls) == 2
        assert len(articles) == 5

    async def test_every_window_failing_gives_empty(self, scenario_store, clock):
        scenario_store.failing_windows = {1, 2, 3}
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        assert await hydrator.hydrate(ORDERED_IDS, target_count=3) == []
        assert len(scenario_store.calls) == 3

    async def test_cancellation_is_not_a_failed_window(self, scenario_store, clock):
        """Cancellation propagates instead of moving on to the next window"""
        async def cancelled_lookup(ids, start, end):
            scenario_store.calls.append((list(ids), start, end))
            raise asyncio.CancelledError()

        scenario_store.find_by_ids_in_range = cancelled_lookup
        hydrator = ResultHydrator(scenario_store, window_days=[2, 3, 7], clock=clock)

        with pytest.raises(asyncio.CancelledError):
            await hydrator.hydrate(ORDERED_IDS, target_count=3)

        assert len(scenario_store.calls) == 1

    async def test_fingerprint_dedupe_keeps_best_ranked(self, clock):
        store = FakeArticleStore([
            make_article("a", content_fingerprint="same"),
            make_article("b", content_fingerprint="same"),
            make_article("c"),
        ])
        hydrator = ResultHydrator(store, window_days=[2], clock=clock)

        articles = await hydrator.hydrate(["b", "a", "c"], target_count=1)

        assert [a.id for a in articles] == ["b", "c"]

    async def test_fingerprint_dedupe_can_be_disabled(self, clock):
        store = FakeArticleStore([
            make_article("a", content_fingerprint="same"),
            make_article("b", content_fingerprint="same"),
        ])
        hydrator = ResultHydrator(store, window_days=[2], dedupe_fingerprints=False, clock=clock)

        articles = await hydrator.hydrate(["a", "b"], target_count=1)

        assert [a.id for a in articles] == ["a", "b"]

    async def test_invalid_windows_rejected(self, scenario_store):
        with pytest.raises(ValueError):
            ResultHydrator(scenario_store, window_days=[7, 3])
