"""
Dense and sparse retrievers plus the collaborator interfaces they depend on.
"""

from .base import ArticleStore, Bm25CorpusStore, DenseIndex, EmbeddingProvider, SparseIndex
from .dense import DenseRetriever
from .sparse import SparseRetriever

__all__ = [
    'ArticleStore',
    'Bm25CorpusStore',
    'DenseIndex',
    'EmbeddingProvider',
    'SparseIndex',
    'DenseRetriever',
    'SparseRetriever',
]
