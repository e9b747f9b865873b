"""
News Rank: hybrid retrieval and ranking of recent news articles.

Dense semantic search and BM25 sparse search are fused with Reciprocal Rank
Fusion, resolved to articles inside an adaptive date window, and re-ranked by
a blend of similarity and recency.
"""

from .config import SearchSettings
from .errors import NewsRankError, ProviderError
from .hydrator import ResultHydrator
from .models import Article, Citation, DisplayScoredArticle, SearchResult
from .recency import RecencyScorer
from .search import HybridSearch

__all__ = [
    "SearchSettings",
    "NewsRankError",
    "ProviderError",
    "ResultHydrator",
    "Article",
    "Citation",
    "DisplayScoredArticle",
    "SearchResult",
    "RecencyScorer",
    "HybridSearch",
]
