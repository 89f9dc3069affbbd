"""
Annotation resolver package - modular deduplication components.

This package provides the core annotation deduplication functionality,
broken down into focused, maintainable modules:

- core: Core data structures (AnnotationRecord, ResolvedRecord, GroupResolution)
- normalizer: Boilerplate removal and escape substitution
- tokenizer: Lowercase alphanumeric tokenization
- vectorizer: Term-frequency vectors
- similarity: Cosine similarity scoring
- record_processor: Raw row conversion
- annotation_resolver: Main resolver orchestrating the full pipeline
"""

from .annotation_resolver import AnnotationResolver
from .core import (
    ANNOTATION_FIELD,
    SUBJECT_FIELD,
    AnnotationRecord,
    GroupResolution,
    ResolvedRecord,
    TermVector,
)
from .normalizer import TextNormalizer, normalize
from .record_processor import RawRecordProcessor
from .similarity import cosine_similarity, dot_product, magnitude
from .tokenizer import Tokenizer, tokenize
from .vectorizer import Vectorizer

__all__ = [
    "ANNOTATION_FIELD",
    "SUBJECT_FIELD",
    "AnnotationRecord",
    "ResolvedRecord",
    "GroupResolution",
    "TermVector",
    "TextNormalizer",
    "normalize",
    "Tokenizer",
    "tokenize",
    "Vectorizer",
    "cosine_similarity",
    "dot_product",
    "magnitude",
    "RawRecordProcessor",
    "AnnotationResolver",
]
