"""
Recency-weighted display scoring.

Formula:
    recency(article) = exp(-ln(2) × age_days / half_life_days)      ∈ (0, 1]
    display_score    = λ × recency + (1 - λ) × similarity

Where:
    λ (weight)     = share of the score given to freshness (default: 0.2)
    half_life_days = age at which recency drops to 0.5 (default: 14)

"Now" is captured once when the scorer is created, so every article of one
response is aged against the same instant. Create one scorer per request.
"""

import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .models import Article, DisplayScoredArticle

DEFAULT_RECENCY_WEIGHT = 0.2
DEFAULT_HALF_LIFE_DAYS = 14.0

_SECONDS_PER_DAY = 86400.0


class RecencyScorer:
    """Blend of retrieval similarity and exponential recency decay"""

    def __init__(
        self,
        weight: float = DEFAULT_RECENCY_WEIGHT,
        half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
        now: Optional[datetime] = None,
    ):
        """
        Args:
            weight: λ, must be strictly between 0 and 1 so that the score
                depends on both age and similarity
            half_life_days: Must be positive
            now: Reference instant (default: current UTC time)
        """
        if not 0.0 < weight < 1.0:
            raise ValueError(f"Recency weight must be in (0, 1), got {weight}")
        if half_life_days <= 0:
            raise ValueError(f"Half-life must be positive, got {half_life_days}")

        self.weight = weight
        self.half_life_days = half_life_days
        self.now = _as_utc(now or datetime.now(timezone.utc))

    def age_days(self, article: Article) -> float:
        """Age relative to the scorer's "now"; future timestamps count as 0"""
        delta = self.now - _as_utc(article.published_at)
        return max(delta.total_seconds() / _SECONDS_PER_DAY, 0.0)

    def recency(self, article: Article) -> float:
        return math.exp(-math.log(2) * self.age_days(article) / self.half_life_days)

    def score(self, article: Article, similarity: float) -> float:
        """
        Display score for one article.

        Examples:
            >>> from datetime import timedelta
            >>> now = datetime(2025, 1, 15, tzinfo=timezone.utc)
            >>> scorer = RecencyScorer(now=now)
            >>> fresh = Article("a", now, "t", "b", "f", "tag")
            >>> old = Article("b", now - timedelta(days=14), "t", "b", "f", "tag")
            >>> round(scorer.score(fresh, 0.5), 3), round(scorer.score(old, 0.5), 3)
            (0.6, 0.5)
        """
        return self.weight * self.recency(article) + (1 - self.weight) * similarity

    def rank(
        self,
        articles: Sequence[Article],
        similarities: Sequence[float],
    ) -> List[DisplayScoredArticle]:
        """
        Score and sort articles by display score (descending).

        Args:
            articles: Hydrated articles in retrieval order
            similarities: Similarity for each article, same order

        Returns:
            Scored articles, ties keep the input order
        """
        if len(articles) != len(similarities):
            raise ValueError(
                f"Got {len(articles)} articles but {len(similarities)} similarities"
            )

        scored = []
        for article, similarity in zip(articles, similarities):
            recency = self.recency(article)
            scored.append(DisplayScoredArticle(
                article=article,
                display_score=self.weight * recency + (1 - self.weight) * similarity,
                similarity=similarity,
                recency=recency,
            ))

        scored.sort(key=lambda s: s.display_score, reverse=True)
        return scored


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
