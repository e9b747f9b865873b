"""
Sparse (lexical) retriever: tokenize, weight with BM25, query the sparse index.
"""

import logging
from collections import Counter
from typing import List, Optional

from ..bm25.query_vector import DEFAULT_MAX_TERMS, build_bm25_query_vector
from ..bm25.tokenizer import Tokenizer
from ..errors import ProviderError
from ..models import Bm25Corpus, RankedHit
from .base import Bm25CorpusStore, SparseIndex

logger = logging.getLogger(__name__)


class SparseRetriever:
    """BM25 retrieval against the sparse vector index"""

    def __init__(
        self,
        corpus_store: Bm25CorpusStore,
        index: SparseIndex,
        tokenizer: Optional[Tokenizer] = None,
        k3: float = 1000.0,
        max_terms: int = DEFAULT_MAX_TERMS,
        max_lookup_terms: Optional[int] = None,
    ):
        """
        Args:
            max_terms: Cap on distinct terms in the BM25 query vector
            max_lookup_terms: Cap on distinct terms sent to the corpus store
                (default: 4 × max_terms), kept by query frequency, then
                first occurrence
        """
        self.corpus_store = corpus_store
        self.index = index
        self.tokenizer = tokenizer or Tokenizer()
        self.k3 = k3
        self.max_terms = max_terms
        self.max_lookup_terms = max_lookup_terms or 4 * max_terms
        if self.max_lookup_terms < max_terms:
            raise ValueError(
                f"max_lookup_terms ({self.max_lookup_terms}) must be >= max_terms ({max_terms})"
            )

    async def load_corpus(self, terms: List[str]) -> Bm25Corpus:
        """Fetch term ids, document frequencies and corpus size for the terms"""
        try:
            rows = await self.corpus_store.lookup_terms(terms)
            total_docs, k1, b = await self.corpus_store.get_stats()
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"BM25 corpus lookup failed: {e}")
            raise ProviderError("bm25_corpus", str(e)) from e

        term_ids = {}
        doc_frequencies = {}
        for term, term_id, df in rows:
            term_ids[term] = term_id
            doc_frequencies[term] = df

        return Bm25Corpus(
            term_ids=term_ids,
            doc_frequencies=doc_frequencies,
            total_docs=total_docs,
            k1=k1,
            b=b,
            k3=self.k3,
        )

    def lookup_terms_for(self, tokens: List[str]) -> List[str]:
        """
        Distinct terms to resolve against the corpus store, at most
        max_lookup_terms of them.

        Examples:
            >>> retriever = SparseRetriever(None, None, max_terms=1, max_lookup_terms=2)
            >>> retriever.lookup_terms_for(["ai", "news", "chips", "news"])
            ['news', 'ai']
        """
        counts = Counter(tokens)
        # Counter keeps first-occurrence order, the stable sort preserves it on ties
        terms = sorted(counts, key=lambda t: -counts[t])
        if len(terms) > self.max_lookup_terms:
            logger.info(f"Query has {len(terms)} distinct terms, looking up the top {self.max_lookup_terms}")
            terms = terms[:self.max_lookup_terms]
        return terms

    async def search(self, query_text: str, top_k: int) -> List[RankedHit]:
        """
        Find the top_k articles by BM25 score.

        Returns:
            Hits in descending index score with 1-based ranks. Empty when the
            query has no tokens or none of them resolve to a usable term;
            the index is not queried in that case.
        """
        tokens = self.tokenizer.tokenize(query_text)
        if not tokens or top_k < 1:
            return []

        terms = self.lookup_terms_for(tokens)
        corpus = await self.load_corpus(terms)

        vector = build_bm25_query_vector(tokens, corpus, k3=self.k3, max_terms=self.max_terms)
        if vector.is_empty():
            logger.info(f"No BM25 terms resolved for query ({len(terms)} distinct tokens), skipping sparse search")
            return []

        try:
            matches = await self.index.query(vector, top_k)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Sparse index query failed: {e}")
            raise ProviderError("sparse_index", str(e)) from e

        matches = sorted(matches, key=lambda m: m[1], reverse=True)

        hits = [
            RankedHit(article_id=str(article_id), rank=rank, score=float(score))
            for rank, (article_id, score) in enumerate(matches, start=1)
        ]
        logger.info(f"Sparse search returned {len(hits)} hits ({len(vector)} query terms, top_k={top_k})")
        return hits
