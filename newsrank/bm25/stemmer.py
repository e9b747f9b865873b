"""
Snowball Stemmer for English (via NLTK).

Optional query-side stemming. Only enable it (BM25_STEMMING=true) when the
BM25 term table was built from stemmed tokens as well.

Examples:
- "elections" → "elect"
- "markets" → "market"
- "running" → "run"
"""

from functools import lru_cache

from nltk.stem.snowball import SnowballStemmer

# Initialize stemmer once (thread-safe, reusable)
_stemmer = SnowballStemmer('english')


@lru_cache(maxsize=4096)
def stem(word: str) -> str:
    """
    Stem a single word using Snowball algorithm.

    Args:
        word: Lowercase word to stem

    Returns:
        Stemmed word

    Examples:
        >>> stem("elections")
        'elect'
        >>> stem("markets")
        'market'
    """
    return _stemmer.stem(word)
