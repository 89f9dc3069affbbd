"""
Text tokenization functionality for the annotation resolver.

Splits normalized annotation text into lowercase alphanumeric word tokens.
Tokenization is a pure function of the text; nothing is cached between calls.
"""

import re
from typing import List, Optional

# Any run of characters that is not an ASCII letter or digit separates tokens
_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def tokenize(text: Optional[str]) -> List[str]:
    """
    Tokenize text: lowercase, collapse non-alphanumeric runs to a space, split.

    Args:
        text: Input text to tokenize

    Returns:
        List of tokens; empty for empty, whitespace or punctuation-only text
    """
    if not text:
        return []
    # str.split() with no separator never yields empty strings
    return _SEPARATOR_RE.sub(" ", text.lower()).split()


class Tokenizer:
    """
    Handles tokenization of annotation text into lowercase word tokens.

    Stateless; kept as an object so the vectorizer can be given another
    tokenizer with the same interface.
    """

    @staticmethod
    def tokenize(text: Optional[str]) -> List[str]:
        """Tokenize text, see the module-level tokenize()."""
        return tokenize(text)
