"""
Core data structures for the annotation resolver.

Contains the record types and field-name constants used throughout the resolver system.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Column names used by Zooniverse classification exports
SUBJECT_FIELD = "subject_ids"
ANNOTATION_FIELD = "annotations"

# Bag-of-words representation: token -> occurrence count
TermVector = Dict[str, int]


@dataclass(frozen=True)
class AnnotationRecord:
    """One contributor's transcription of a subject."""

    subject_id: Optional[str]
    text: str = ""


@dataclass(frozen=True)
class ResolvedRecord:
    """The single annotation kept for a subject."""

    subject_id: Optional[str]
    text: str

    def to_row(
        self,
        subject_field: str = SUBJECT_FIELD,
        annotation_field: str = ANNOTATION_FIELD,
    ) -> Dict[str, Optional[str]]:
        """Convert back to the row shape consumed by the CSV writer."""
        return {subject_field: self.subject_id, annotation_field: self.text}


@dataclass
class GroupResolution:
    """Outcome of resolving one subject group, kept for statistics."""

    subject_id: Optional[str]
    record: ResolvedRecord
    group_size: int
    best_similarity: Optional[float] = None
    best_pair: Optional[Tuple[int, int]] = None
