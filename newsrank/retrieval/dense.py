"""
Dense (semantic) retriever: embed the query, then nearest-neighbour search.
"""

import logging
from typing import List

from ..errors import ProviderError
from ..models import RankedHit
from .base import DenseIndex, EmbeddingProvider

logger = logging.getLogger(__name__)


class DenseRetriever:
    """
    Semantic retrieval against the dense vector index.

    Failures of the embedding provider or the index are not retried here;
    they surface as ProviderError and the caller decides on fallback.
    """

    def __init__(self, embedder: EmbeddingProvider, index: DenseIndex):
        self.embedder = embedder
        self.index = index

    async def search(self, query_text: str, top_k: int) -> List[RankedHit]:
        """
        Find the top_k articles closest to the query by cosine similarity.

        Args:
            query_text: Natural language query
            top_k: Number of neighbours to request from the index

        Returns:
            Hits in descending similarity with 1-based ranks. Empty for a
            blank query (no embedding or index call is made).
        """
        if not query_text or not query_text.strip() or top_k < 1:
            return []

        try:
            embedding = await self.embedder.embed(query_text)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Embedding failed: {e}")
            raise ProviderError("embedding", str(e)) from e

        logger.debug(f"Generated query embedding with {len(embedding)} dimensions")

        try:
            matches = await self.index.query(embedding, top_k)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Dense index query failed: {e}")
            raise ProviderError("dense_index", str(e)) from e

        # Index contract says descending, but rank assignment must not depend on it
        matches = sorted(matches, key=lambda m: m[1], reverse=True)

        hits = [
            RankedHit(article_id=str(article_id), rank=rank, score=float(score))
            for rank, (article_id, score) in enumerate(matches, start=1)
        ]
        logger.info(f"Dense search returned {len(hits)} hits (top_k={top_k})")
        return hits
