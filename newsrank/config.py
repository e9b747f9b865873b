"""
Search tuning configuration from environment variables.

All ranking knobs can be changed without code changes. Defaults reproduce
the production behaviour:

    SEARCH_DATE_WINDOWS       "2,3,7,14,30"  Expanding hydration windows (days)
    SEARCH_OVERSAMPLE_FACTOR  5              Candidates requested per result
    SEARCH_MIN_CANDIDATES     50             Floor for candidates per retriever
    RRF_K                     60             Reciprocal Rank Fusion constant
    RECENCY_WEIGHT            0.2            λ in the display score blend
    RECENCY_HALF_LIFE_DAYS    14             Recency half-life
    BM25_K3                   1000           Query-term saturation constant
    BM25_MAX_QUERY_TERMS      128            Cap on distinct BM25 query terms
    BM25_REMOVE_STOPWORDS     false          Query-side stopword filtering
    BM25_STEMMING             false          Query-side Snowball stemming
    DEDUPE_FINGERPRINTS       true           Drop repeated content fingerprints
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .hydrator import DEFAULT_WINDOW_DAYS, validate_windows
from .recency import DEFAULT_HALF_LIFE_DAYS, DEFAULT_RECENCY_WEIGHT

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SearchSettings:
    """Ranking and retrieval parameters for one service instance"""
    date_windows: Tuple[int, ...] = DEFAULT_WINDOW_DAYS
    oversample_factor: int = 5
    min_candidates: int = 50
    rrf_k: float = 60.0
    recency_weight: float = DEFAULT_RECENCY_WEIGHT
    recency_half_life_days: float = DEFAULT_HALF_LIFE_DAYS
    bm25_k3: float = 1000.0
    bm25_max_query_terms: int = 128
    remove_stopwords: bool = False
    stemming: bool = False
    dedupe_fingerprints: bool = True
    embedding_model: str = field(default="text-embedding-004")

    def __post_init__(self):
        validate_windows(self.date_windows)
        if self.oversample_factor < 1:
            raise ValueError(f"oversample_factor must be >= 1, got {self.oversample_factor}")
        if self.min_candidates < 1:
            raise ValueError(f"min_candidates must be >= 1, got {self.min_candidates}")
        if self.rrf_k < 0:
            raise ValueError(f"rrf_k must be non-negative, got {self.rrf_k}")
        if not 0.0 < self.recency_weight < 1.0:
            raise ValueError(f"recency_weight must be in (0, 1), got {self.recency_weight}")
        if self.recency_half_life_days <= 0:
            raise ValueError(f"recency_half_life_days must be positive, got {self.recency_half_life_days}")
        if self.bm25_max_query_terms < 1:
            raise ValueError(f"bm25_max_query_terms must be >= 1, got {self.bm25_max_query_terms}")

    def candidate_count(self, limit: int) -> int:
        """
        Candidates to request from each retriever for a final `limit`.

        Oversampling absorbs losses from date-window filtering and dedup.

        Examples:
            >>> SearchSettings().candidate_count(6)
            50
            >>> SearchSettings().candidate_count(20)
            100
        """
        return max(limit * self.oversample_factor, self.min_candidates)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SearchSettings":
        """Build settings from environment variables (see module docstring)"""
        env = os.environ if environ is None else environ

        return cls(
            date_windows=_parse_windows(env, "SEARCH_DATE_WINDOWS", DEFAULT_WINDOW_DAYS),
            oversample_factor=_parse(env, "SEARCH_OVERSAMPLE_FACTOR", int, 5),
            min_candidates=_parse(env, "SEARCH_MIN_CANDIDATES", int, 50),
            rrf_k=_parse(env, "RRF_K", float, 60.0),
            recency_weight=_parse(env, "RECENCY_WEIGHT", float, DEFAULT_RECENCY_WEIGHT),
            recency_half_life_days=_parse(env, "RECENCY_HALF_LIFE_DAYS", float, DEFAULT_HALF_LIFE_DAYS),
            bm25_k3=_parse(env, "BM25_K3", float, 1000.0),
            bm25_max_query_terms=_parse(env, "BM25_MAX_QUERY_TERMS", int, 128),
            remove_stopwords=_parse_bool(env, "BM25_REMOVE_STOPWORDS", False),
            stemming=_parse_bool(env, "BM25_STEMMING", False),
            dedupe_fingerprints=_parse_bool(env, "DEDUPE_FINGERPRINTS", True),
            embedding_model=env.get("EMBEDDING_MODEL", "text-embedding-004"),
        )


def _parse(env: Mapping[str, str], name: str, type_, default):
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return type_(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be a valid {type_.__name__}, got {value!r}")


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be true or false, got {value!r}")


def _parse_windows(env: Mapping[str, str], name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        windows = tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        raise ValueError(f"{name} must be a comma-separated list of day counts, got {value!r}")
    try:
        return validate_windows(windows)
    except ValueError as e:
        raise ValueError(f"{name}: {e}")
