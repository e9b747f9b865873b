"""
RRF (Reciprocal Rank Fusion) for combining dense and sparse rankings.

RRF only looks at ranks, never at score magnitudes, so cosine similarities
and BM25 scores can be merged without normalization.

Formula:
    RRF(item, k=60) = Σ 1/(k + rank_i(item))

Where:
    k = constant (default: 60, from literature)
    rank_i = rank of item in i-th ranking (1-based)

An item present in several rankings always outscores the same item present
in only one of them at the same ranks, because every term is positive.

Reference: https://plg.uwaterloo.ca/~gvcormac/cormacksigir09-rrf.pdf
"""

from typing import Dict, List, Sequence

from ..models import FusedHit, RankedHit

DEFAULT_RRF_K = 60


def reciprocal_rank_fusion(
    rankings: Sequence[Sequence[RankedHit]],
    k: float = DEFAULT_RRF_K
) -> List[FusedHit]:
    """
    Combine multiple rankings using Reciprocal Rank Fusion.

    Args:
        rankings: Ranked hit lists, each hit carrying its 1-based rank

        k: RRF constant (default: 60)
            Larger k flattens the difference between top and low ranks

    Returns:
        Fused hits sorted by RRF score (descending), ties broken by best
        rank in any list, then by article id

    Example:
        >>> dense = [RankedHit("A", 1, 0.9), RankedHit("B", 2, 0.8)]
        >>> sparse = [RankedHit("B", 1, 12.1), RankedHit("C", 2, 9.4)]
        >>> [h.article_id for h in reciprocal_rank_fusion([dense, sparse])]
        ['B', 'A', 'C']
    """
    if k < 0:
        raise ValueError(f"RRF constant k must be non-negative, got {k}")

    scores: Dict[str, float] = {}
    ranks: Dict[str, List[int]] = {}

    for ranking in rankings:
        for hit in ranking:
            scores[hit.article_id] = scores.get(hit.article_id, 0.0) + 1.0 / (k + hit.rank)
            ranks.setdefault(hit.article_id, []).append(hit.rank)

    fused = [
        FusedHit(
            article_id=article_id,
            fused_score=score,
            best_rank=min(ranks[article_id]),
            source_ranks=tuple(ranks[article_id]),
        )
        for article_id, score in scores.items()
    ]

    fused.sort(key=lambda h: (-h.fused_score, h.best_rank, h.article_id))
    return fused


def fuse(
    list_a: Sequence[RankedHit],
    list_b: Sequence[RankedHit],
    k: float = DEFAULT_RRF_K
) -> List[FusedHit]:
    """Fuse two ranked lists (dense and sparse) with RRF"""
    return reciprocal_rank_fusion([list_a, list_b], k=k)
