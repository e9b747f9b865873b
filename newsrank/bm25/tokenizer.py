"""
Tokenizer for BM25 query processing.

Tokenization pipeline:
1. Lowercase conversion
2. Extract word characters (\\w+), dropping punctuation
3. Optionally filter stopwords (common English words)
4. Optionally apply stemming ("elections" → "elect")
5. Return list of tokens in input order

Defaults must match the tokenization used when the BM25 term table was built
at ingestion time: lowercase + \\w+, no stopwords removed, no stemming.
Changing the defaults without rebuilding the term table means query terms no
longer resolve to term ids.
"""

import re
from typing import List

from .stemmer import stem

# English stopwords (based on Elasticsearch/Lucene standard list)
STOPWORDS = frozenset([
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'but', 'by',
    'for', 'if', 'in', 'into', 'is', 'it',
    'no', 'not', 'of', 'on', 'or', 'such',
    'that', 'the', 'their', 'then', 'there', 'these',
    'they', 'this', 'to', 'was', 'will', 'with'
])

_WORD_RE = re.compile(r'\w+')


class Tokenizer:
    """
    Configurable query tokenizer.

    Deterministic: the same text always yields the same tokens in the same
    order.
    """

    def __init__(self, remove_stopwords: bool = False, stem: bool = False):
        self.remove_stopwords = remove_stopwords
        self.stem = stem

    def tokenize(self, text: str) -> List[str]:
        """
        Tokenize text into normalized terms.

        Args:
            text: Raw query text

        Returns:
            List of lowercase tokens, empty for empty/whitespace input

        Examples:
            >>> Tokenizer().tokenize("AI news: OpenAI's new model!")
            ['ai', 'news', 'openai', 's', 'new', 'model']

            >>> Tokenizer(remove_stopwords=True).tokenize("The state of the economy")
            ['state', 'economy']

            >>> Tokenizer().tokenize("   ")
            []
        """
        if not text or not text.strip():
            return []

        tokens = _WORD_RE.findall(text.lower())

        if self.remove_stopwords:
            tokens = [t for t in tokens if t not in STOPWORDS]

        if self.stem:
            tokens = [stem(t) for t in tokens]

        return tokens

    def __call__(self, text: str) -> List[str]:
        return self.tokenize(text)


_default_tokenizer = Tokenizer()


def tokenize(text: str) -> List[str]:
    """Tokenize with ingestion-compatible defaults (lowercase \\w+ only)"""
    return _default_tokenizer.tokenize(text)
