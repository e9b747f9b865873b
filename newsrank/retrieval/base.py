"""
Abstract base classes for the external collaborators of the search engine.

Production adapters live in newsrank.embeddings and newsrank.database; tests
use in-memory fakes. All implementations must be swappable.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Sequence, Tuple

from ..models import Article, SparseVector


class EmbeddingProvider(ABC):
    """Turns text into a fixed-dimension dense vector"""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Raises:
            ProviderError: the embedding model failed or returned nothing
        """
        pass

    def get_model_info(self) -> dict:
        """Get information about the embedding model"""
        return {}


class DenseIndex(ABC):
    """Nearest-neighbour search over article embeddings"""

    @abstractmethod
    async def query(self, vector: Sequence[float], top_k: int) -> List[Tuple[str, float]]:
        """
        Returns:
            (article_id, cosine similarity) pairs, descending by similarity
        """
        pass


class SparseIndex(ABC):
    """Nearest-neighbour search over BM25 sparse vectors"""

    @abstractmethod
    async def query(self, sparse: SparseVector, top_k: int) -> List[Tuple[str, float]]:
        """
        Returns:
            (article_id, score) pairs, descending by score
        """
        pass


class Bm25CorpusStore(ABC):
    """Read-only BM25 corpus statistics"""

    @abstractmethod
    async def lookup_terms(self, terms: Sequence[str]) -> List[Tuple[str, int, int]]:
        """
        Returns:
            (term, term_id, df) for every known term; unknown terms are absent
        """
        pass

    @abstractmethod
    async def get_stats(self) -> Tuple[int, float, float]:
        """
        Returns:
            (total_docs, k1, b)
        """
        pass


class ArticleStore(ABC):
    """Relational article store (metadata + citations)"""

    @abstractmethod
    async def find_by_ids_in_range(
        self,
        ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> List[Article]:
        """
        Fetch the articles among `ids` published within [start, end].

        Order of the returned list is unspecified.
        """
        pass
