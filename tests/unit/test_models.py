"""
Unit tests for domain models.
"""

import pytest
from newsrank.errors import NewsRankError, ProviderError
from newsrank.models import Citation, SearchResult, dedupe_citations

pytestmark = pytest.mark.unit


def test_dedupe_citations_keeps_first():
    citations = [
        Citation("Reuters", "Chip exports", "https://r.example/1"),
        Citation("AP", "Chip exports"),
        Citation("Reuters", "Chip exports", "https://r.example/2"),
        Citation("Reuters", "Tariffs"),
    ]

    deduped = dedupe_citations(citations)

    assert deduped == (citations[0], citations[1], citations[3])


def test_dedupe_citations_empty():
    assert dedupe_citations([]) == ()


def test_search_result_count():
    result = SearchResult(query="chips", search_method="dense")
    assert result.count == 0
    assert not result.failed
    assert result.errors == []


def test_provider_error():
    error = ProviderError("embedding", "quota exceeded")
    assert isinstance(error, NewsRankError)
    assert error.provider == "embedding"
    assert str(error) == "embedding: quota exceeded"
