"""
BM25 (Best Match 25) query side of hybrid search.

The corpus statistics (term ids, document frequencies, corpus size) and the
document-side weights are built at ingestion time and live outside this
service. This package only turns query text into a weighted sparse vector and
merges rankings.

Components:
- tokenizer: Text tokenization matching the ingestion rules
- stemmer: Optional Snowball stemming (NLTK)
- query_vector: IDF-weighted sparse query vector with a term cap
- fusion: RRF (Reciprocal Rank Fusion) for combining rankings
"""

from .tokenizer import Tokenizer, tokenize
from .stemmer import stem
from .query_vector import build_bm25_query_vector, idf
from .fusion import fuse, reciprocal_rank_fusion

__all__ = [
    "Tokenizer",
    "tokenize",
    "stem",
    "build_bm25_query_vector",
    "idf",
    "fuse",
    "reciprocal_rank_fusion",
]
