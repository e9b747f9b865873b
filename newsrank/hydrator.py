"""
Result hydration with adaptive date-window widening.

The article store holds far more articles than are relevant "now". IDs coming
back from the vector indexes are therefore resolved inside a date window,
starting narrow and widening until enough articles are found:

    2 days → 3 days → 7 days → 14 days → 30 days (default, configurable)

The first window reaching the target count wins. The widest window is used
regardless of its count (best effort, never an error).

The output keeps the order of the incoming IDs. This is the only place where
the ranking produced by retrieval/fusion survives the trip through the store.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Article
from .retrieval.base import ArticleStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = (2, 3, 7, 14, 30)


def validate_windows(window_days: Sequence[int]) -> Tuple[int, ...]:
    """Windows must be non-empty, positive and strictly increasing"""
    windows = tuple(int(d) for d in window_days)
    if not windows:
        raise ValueError("At least one date window is required")
    if any(d < 1 for d in windows):
        raise ValueError(f"Date windows must be positive day counts, got {list(windows)}")
    if any(b <= a for a, b in zip(windows, windows[1:])):
        raise ValueError(f"Date windows must be strictly increasing, got {list(windows)}")
    return windows


def window_bounds(days: int, now: datetime) -> Tuple[datetime, datetime]:
    """
    Date range covering `days` calendar days ending today (UTC).

    Example:
        >>> now = datetime(2025, 3, 10, 15, 30, tzinfo=timezone.utc)
        >>> start, end = window_bounds(2, now)
        >>> start.isoformat(), end.isoformat()
        ('2025-03-09T00:00:00+00:00', '2025-03-10T23:59:59.999999+00:00')
    """
    today = now.astimezone(timezone.utc).date()
    start = datetime.combine(today - timedelta(days=days - 1), time.min, tzinfo=timezone.utc)
    end = datetime.combine(today, time.max, tzinfo=timezone.utc)
    return start, end


class ResultHydrator:
    """Resolves ranked article IDs to full records within a date window"""

    def __init__(
        self,
        store: ArticleStore,
        window_days: Sequence[int] = DEFAULT_WINDOW_DAYS,
        dedupe_fingerprints: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            store: Article store queried once per tried window
            window_days: Expanding windows, in days back from today
            dedupe_fingerprints: Drop articles whose content fingerprint was
                already emitted at a better rank
            clock: Returns "now" (default: current UTC time)
        """
        self.store = store
        self.window_days = validate_windows(window_days)
        self.dedupe_fingerprints = dedupe_fingerprints
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def hydrate(self, ordered_ids: Sequence[str], target_count: int) -> List[Article]:
        """
        Fetch articles for the given IDs, preserving their order.

        Args:
            ordered_ids: Article IDs in rank order
            target_count: Number of articles the caller wants

        Returns:
            A subsequence of ordered_ids resolved to articles. May be shorter
            than target_count (or empty) if even the widest window falls short.
        """
        ids = list(dict.fromkeys(ordered_ids))
        if not ids:
            return []

        now = self.clock()
        last = len(self.window_days) - 1

        for i, days in enumerate(self.window_days):
            start, end = window_bounds(days, now)
            logger.debug(f"Trying date window: last {days} days ({start.isoformat()} to {end.isoformat()})")

            try:
                found = await self.store.find_by_ids_in_range(ids, start, end)
            except Exception as e:
                logger.warning(f"Article lookup failed for {days}-day window, trying next: {e}")
                found = []

            articles = self._in_order(ids, found)
            logger.info(f"Found {len(articles)} articles within {days} days (target: {target_count})")

            if len(articles) >= target_count or i == last:
                if len(articles) < target_count:
                    logger.warning(
                        f"Could not find {target_count} articles even with a {days}-day window, "
                        f"returning {len(articles)}"
                    )
                return articles

        return []

    def _in_order(self, ids: List[str], found: Sequence[Article]) -> List[Article]:
        by_id = {article.id: article for article in found}

        articles = []
        seen_fingerprints = set()
        for article_id in ids:
            article = by_id.get(article_id)
            if article is None:
                continue
            if self.dedupe_fingerprints and article.content_fingerprint:
                if article.content_fingerprint in seen_fingerprints:
                    continue
                seen_fingerprints.add(article.content_fingerprint)
            articles.append(article)
        return articles
