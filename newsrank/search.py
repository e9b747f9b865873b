"""
Hybrid search orchestration.

Three modes:
- dense:  DenseRetriever  → hydrate → recency rank → truncate
- sparse: SparseRetriever → hydrate → recency rank → truncate
- hybrid: both retrievers concurrently → RRF → hydrate fused order
          → recency rank → truncate

Hybrid mode tolerates one failing method by falling back to the other. When
both fail it returns an empty result flagged as failed instead of raising.
Single-method modes propagate ProviderError.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from .bm25.fusion import fuse
from .bm25.tokenizer import Tokenizer
from .config import SearchSettings
from .hydrator import ResultHydrator
from .models import RankedHit, SearchResult
from .recency import RecencyScorer
from .retrieval.dense import DenseRetriever
from .retrieval.sparse import SparseRetriever

logger = logging.getLogger(__name__)

DENSE = "dense"
SPARSE = "sparse"
HYBRID = "hybrid"
SEARCH_MODES = (DENSE, SPARSE, HYBRID)


def dense_similarities(hits: Sequence[RankedHit]) -> Dict[str, float]:
    """Cosine similarities are already on a 0-1 scale"""
    return {hit.article_id: hit.score for hit in hits}


def sparse_similarities(hits: Sequence[RankedHit]) -> Dict[str, float]:
    """
    BM25 scores divided by the best score of the list, so they land in
    (0, 1] like cosine similarities.

    Example:
        >>> sparse_similarities([RankedHit("a", 1, 8.0), RankedHit("b", 2, 2.0)])
        {'a': 1.0, 'b': 0.25}
    """
    top = max((hit.score for hit in hits), default=0.0)
    if top <= 0:
        return {hit.article_id: 0.0 for hit in hits}
    return {hit.article_id: max(hit.score, 0.0) / top for hit in hits}


class HybridSearch:
    """Composes retrievers, fusion, hydration and recency scoring"""

    def __init__(
        self,
        dense: DenseRetriever,
        sparse: SparseRetriever,
        hydrator: ResultHydrator,
        settings: Optional[SearchSettings] = None,
        tokenizer: Optional[Tokenizer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.dense = dense
        self.sparse = sparse
        self.hydrator = hydrator
        self.settings = settings or SearchSettings()
        self.tokenizer = tokenizer or sparse.tokenizer
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def search(self, query: str, limit: int = 10, mode: str = DENSE) -> SearchResult:
        """
        Run a search in the given mode.

        Args:
            query: Natural language query
            limit: Maximum number of articles to return (>= 1)
            mode: "dense", "sparse" or "hybrid"

        Returns:
            SearchResult with at most `limit` articles sorted by display score

        Raises:
            ValueError: invalid limit or mode
            ProviderError: dense/sparse mode and the provider failed
        """
        if mode not in SEARCH_MODES:
            raise ValueError(f"Unknown search mode: {mode}. Valid options: {', '.join(SEARCH_MODES)}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        if not self.tokenizer.tokenize(query):
            logger.info("Empty query after tokenization, returning no results")
            return SearchResult(query=query, search_method=mode)

        logger.info(f"Starting {mode} search for query: \"{query}\" with limit: {limit}")

        if mode == DENSE:
            return await self.search_dense(query, limit)
        if mode == SPARSE:
            return await self.search_sparse(query, limit)
        return await self.search_hybrid(query, limit)

    async def search_dense(self, query: str, limit: int = 10) -> SearchResult:
        hits = await self.dense.search(query, self.settings.candidate_count(limit))
        return await self._finish(query, DENSE, [h.article_id for h in hits], dense_similarities(hits), limit)

    async def search_sparse(self, query: str, limit: int = 10) -> SearchResult:
        hits = await self.sparse.search(query, self.settings.candidate_count(limit))
        return await self._finish(query, SPARSE, [h.article_id for h in hits], sparse_similarities(hits), limit)

    async def search_hybrid(self, query: str, limit: int = 10) -> SearchResult:
        top_k = self.settings.candidate_count(limit)

        dense_result, sparse_result = await asyncio.gather(
            self.dense.search(query, top_k),
            self.sparse.search(query, top_k),
            return_exceptions=True,
        )

        errors = []
        for name, result in ((DENSE, dense_result), (SPARSE, sparse_result)):
            if isinstance(result, BaseException):
                # Cancellation is never a method failure
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"Hybrid search: {name} retrieval failed: {result}")
                errors.append(f"{name}: {result}")

        if len(errors) == 2:
            logger.error("Hybrid search: both dense and sparse retrieval failed")
            return SearchResult(query=query, search_method=HYBRID, failed=True, errors=errors)

        if isinstance(sparse_result, BaseException):
            logger.warning("Hybrid search falling back to dense results")
            return await self._finish(
                query, DENSE, [h.article_id for h in dense_result],
                dense_similarities(dense_result), limit, errors,
            )

        if isinstance(dense_result, BaseException):
            logger.warning("Hybrid search falling back to sparse results")
            return await self._finish(
                query, SPARSE, [h.article_id for h in sparse_result],
                sparse_similarities(sparse_result), limit, errors,
            )

        fused = fuse(dense_result, sparse_result, k=self.settings.rrf_k)
        logger.info(
            f"RRF fused {len(dense_result)} dense + {len(sparse_result)} sparse hits "
            f"into {len(fused)} candidates"
        )

        # Prefer the dense cosine similarity; BM25-only hits use the normalized BM25 score
        similarities = sparse_similarities(sparse_result)
        similarities.update(dense_similarities(dense_result))

        return await self._finish(query, HYBRID, [h.article_id for h in fused], similarities, limit)

    async def _finish(
        self,
        query: str,
        method: str,
        ordered_ids: List[str],
        similarities: Dict[str, float],
        limit: int,
        errors: Optional[List[str]] = None,
    ) -> SearchResult:
        articles = await self.hydrator.hydrate(ordered_ids, limit)

        scorer = RecencyScorer(
            weight=self.settings.recency_weight,
            half_life_days=self.settings.recency_half_life_days,
            now=self.clock(),
        )
        ranked = scorer.rank(articles, [similarities.get(a.id, 0.0) for a in articles])

        final = ranked[:limit]
        logger.info(f"{method} search returning {len(final)} articles (requested: {limit})")
        return SearchResult(query=query, search_method=method, articles=final, errors=errors or [])
