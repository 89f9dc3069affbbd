"""
Term-frequency vectors for the annotation resolver.
"""

from collections import Counter
from typing import Iterable, Optional

from .core import TermVector
from .tokenizer import Tokenizer


class Vectorizer:
    """Builds bag-of-words count maps from tokens or raw text."""

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or Tokenizer()

    @staticmethod
    def vectorize(tokens: Optional[Iterable[str]]) -> TermVector:
        """
        Count occurrences of each distinct token.

        Empty tokens are ignored so every count in the result is positive.
        """
        if not tokens:
            return {}
        return dict(Counter(token for token in tokens if token))

    def vectorize_text(self, text: Optional[str]) -> TermVector:
        """Tokenize then vectorize a piece of text."""
        return self.vectorize(self.tokenizer.tokenize(text))
