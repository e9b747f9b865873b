"""
BM25 sparse query vector builder.

Turns query tokens plus corpus statistics into the sparse vector sent to the
sparse index. Document-side BM25 weights live in the index; the query side
only needs IDF and a saturating query-term-frequency factor.

Formula:
    idf(N, df) = ln((N - df + 0.5) / (df + 0.5) + 1)
    weight(term) = idf × ((k3 + 1) × qtf) / (k3 + qtf)

Where:
    N   = number of documents in the corpus
    df  = number of documents containing the term
    qtf = occurrences of the term in the query
    k3  = query-term saturation constant (default: 1000, ≈ linear for short queries)
"""

import logging
import math
from collections import Counter
from typing import List, Optional

from ..models import Bm25Corpus, SparseVector

logger = logging.getLogger(__name__)

DEFAULT_K3 = 1000.0
DEFAULT_MAX_TERMS = 128


def idf(total_docs: int, df: int) -> float:
    """
    BM25 inverse document frequency.

    Examples:
        >>> round(idf(1000, 100), 4)
        2.2986
        >>> idf(1000, 100) > idf(1000, 200)
        True
    """
    return math.log((total_docs - df + 0.5) / (df + 0.5) + 1)


def build_bm25_query_vector(
    tokens: List[str],
    corpus: Bm25Corpus,
    k3: Optional[float] = None,
    max_terms: int = DEFAULT_MAX_TERMS,
) -> SparseVector:
    """
    Build a BM25-weighted sparse query vector.

    Args:
        tokens: Query tokens (duplicates count towards qtf)
        corpus: Term ids, document frequencies and corpus size
        k3: Query-term saturation constant (default: corpus.k3)
        max_terms: Maximum number of distinct terms kept
            Terms are ranked by qtf, then IDF, then first occurrence

    Returns:
        SparseVector in processing order. May be empty: unknown terms and
        terms with non-positive IDF are dropped silently.

    Example:
        >>> corpus = Bm25Corpus(
        ...     term_ids={"ai": 1, "news": 2},
        ...     doc_frequencies={"ai": 100, "news": 200},
        ...     total_docs=1000,
        ... )
        >>> vec = build_bm25_query_vector(["ai", "news"], corpus)
        >>> vec.term_indices
        [1, 2]
    """
    if k3 is None:
        k3 = corpus.k3
    if max_terms < 1:
        raise ValueError(f"max_terms must be >= 1, got {max_terms}")

    # Counter keeps first-occurrence order, which makes the cap deterministic
    qtf = Counter(tokens)
    entries = list(qtf.items())

    if len(entries) > max_terms:
        n = corpus.total_docs
        entries.sort(
            key=lambda e: (-e[1], -idf(n, corpus.doc_frequencies.get(e[0], 0)))
        )
        entries = entries[:max_terms]
        logger.debug(f"Capped BM25 query from {len(qtf)} to {max_terms} terms")

    indices: List[int] = []
    values: List[float] = []

    for term, qf in entries:
        term_id = corpus.term_ids.get(term)
        df = corpus.doc_frequencies.get(term)
        if term_id is None or df is None:
            continue

        idf_value = idf(corpus.total_docs, df)
        if idf_value <= 0:
            continue

        qtf_weight = (k3 + 1) * qf / (k3 + qf)
        indices.append(term_id)
        values.append(idf_value * qtf_weight)

    logger.debug(f"BM25 query vector: {len(indices)} of {len(qtf)} distinct terms resolved")

    return SparseVector(term_indices=indices, weights=values)
