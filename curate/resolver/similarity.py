"""
Cosine similarity between term-frequency vectors.
"""

import math

from .core import TermVector


def dot_product(a: TermVector, b: TermVector) -> int:
    """Sum of count products over the tokens both vectors share."""
    if len(b) < len(a):
        a, b = b, a
    return sum(count * b[token] for token, count in a.items() if token in b)


def magnitude(vector: TermVector) -> float:
    """Euclidean length of a vector."""
    return math.sqrt(dot_product(vector, vector))


def cosine_similarity(a: TermVector, b: TermVector) -> float:
    """
    Cosine of the angle between two term-frequency vectors.

    Returns 0.0 when either vector is empty (zero magnitude), so two empty
    annotations never count as a match. The result is clamped to [0, 1].
    """
    mag_a = magnitude(a)
    mag_b = magnitude(b)
    if mag_a == 0 or mag_b == 0:
        return 0.0

    if a == b:
        return 1.0

    similarity = dot_product(a, b) / (mag_a * mag_b)
    return min(1.0, max(0.0, similarity))
