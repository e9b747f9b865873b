"""
Request-scoped data model for article retrieval and ranking.

Every object here is created fresh for one search call and discarded once the
response is serialized. Nothing is cached between requests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Citation:
    """Source article cited by a generated news article"""
    source_name: str
    article_title: str
    url: Optional[str] = None


def dedupe_citations(citations: Iterable[Citation]) -> Tuple[Citation, ...]:
    """
    Drop repeated citations, keyed by (source_name, article_title).

    The first occurrence wins, so the original citation order is kept.

    Examples:
        >>> a = Citation("Reuters", "Chip exports", "https://r.example/1")
        >>> b = Citation("Reuters", "Chip exports", "https://r.example/2")
        >>> dedupe_citations([a, b])
        (Citation(source_name='Reuters', article_title='Chip exports', url='https://r.example/1'),)
    """
    seen = set()
    unique = []
    for citation in citations:
        key = (citation.source_name, citation.article_title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(citation)
    return tuple(unique)


@dataclass(frozen=True)
class Article:
    """Hydrated news article with its deduplicated citations"""
    id: str
    published_at: datetime
    title: str
    body: str
    content_fingerprint: str
    tag: str
    citations: Tuple[Citation, ...] = ()


@dataclass(frozen=True)
class SparseVector:
    """
    Sparse query vector as parallel arrays.

    Invariants: same length, unique indices, strictly positive weights.
    """
    term_indices: List[int] = field(default_factory=list)
    weights: List[float] = field(default_factory=list)

    def __post_init__(self):
        if len(self.term_indices) != len(self.weights):
            raise ValueError(
                f"term_indices and weights differ in length: "
                f"{len(self.term_indices)} != {len(self.weights)}"
            )
        if len(set(self.term_indices)) != len(self.term_indices):
            raise ValueError("term_indices must be unique")
        if any(w <= 0 for w in self.weights):
            raise ValueError("weights must be strictly positive")

    def __len__(self) -> int:
        return len(self.term_indices)

    def is_empty(self) -> bool:
        return not self.term_indices

    def as_dict(self) -> Dict[int, float]:
        return dict(zip(self.term_indices, self.weights))


@dataclass(frozen=True)
class Bm25Corpus:
    """
    Corpus statistics needed to weight a BM25 query.

    k1 and b describe document-length normalization on the index side; the
    query vector builder only reads total_docs and the per-term df.
    """
    term_ids: Dict[str, int]
    doc_frequencies: Dict[str, int]
    total_docs: int
    k1: float = 1.2
    b: float = 0.75
    k3: float = 1000.0


@dataclass(frozen=True)
class RankedHit:
    """One entry of a single retrieval method's ranked list"""
    article_id: str
    rank: int       # 1-based position in its source list
    score: float    # Method-specific, not comparable across methods


@dataclass(frozen=True)
class FusedHit:
    """Article ranked by Reciprocal Rank Fusion across several lists"""
    article_id: str
    fused_score: float
    best_rank: int
    source_ranks: Tuple[int, ...] = ()  # Rank in each list that contained the id


@dataclass(frozen=True)
class DisplayScoredArticle:
    """Article with its final blended recency/similarity score"""
    article: Article
    display_score: float
    similarity: float
    recency: float


@dataclass
class SearchResult:
    """Outcome of one search call"""
    query: str
    search_method: str
    articles: List[DisplayScoredArticle] = field(default_factory=list)
    failed: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.articles)
