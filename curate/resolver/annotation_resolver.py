"""
Main annotation resolver implementation.

This module provides the AnnotationResolver class that orchestrates the complete
deduplication pipeline:
1. Raw row conversion
2. Text normalization
3. Grouping by subject id
4. Pairwise cosine similarity within each group
5. Selection of one annotation per subject
"""

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .core import (
    ANNOTATION_FIELD,
    SUBJECT_FIELD,
    AnnotationRecord,
    GroupResolution,
    ResolvedRecord,
    TermVector,
)
from .normalizer import TextNormalizer
from .record_processor import RawRecordProcessor
from .similarity import cosine_similarity
from .tokenizer import Tokenizer
from .vectorizer import Vectorizer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class AnnotationResolver:
    """
    Collapses the annotations submitted for each subject into one record.

    Singleton groups pass through unchanged. For larger groups every unordered
    pair of members is scored with cosine similarity over term-frequency
    vectors; the first pair with the highest score wins and one of its two
    members is picked with a fair coin from the injected random source.

    There is no similarity threshold: a group always collapses to one record,
    even when its members share no vocabulary at all.
    """

    def __init__(
        self,
        rng: Optional[Any] = None,
        seed: Optional[int] = None,
        subject_field: str = SUBJECT_FIELD,
        annotation_field: str = ANNOTATION_FIELD,
    ):
        """
        Initialize the resolver.

        Args:
            rng: Random source exposing random() -> float in [0, 1); a
                random.Random instance or any stub with that method
            seed: Seed for a private random.Random, used when rng is not given
            subject_field: Row key holding the subject id
            annotation_field: Row key holding the annotation text
        """
        self.rng = rng if rng is not None else random.Random(seed)

        # Initialize components
        self.tokenizer = Tokenizer()
        self.vectorizer = Vectorizer(self.tokenizer)
        self.normalizer = TextNormalizer()
        self.record_processor = RawRecordProcessor(subject_field, annotation_field)

    @staticmethod
    def group_records(
        records: Sequence[AnnotationRecord],
    ) -> Dict[Optional[str], List[AnnotationRecord]]:
        """
        Partition records by subject id, keeping first-seen subject order.

        Args:
            records: Normalized records

        Returns:
            Ordered mapping of subject id to its records (in input order)
        """
        groups: Dict[Optional[str], List[AnnotationRecord]] = {}
        for record in records:
            groups.setdefault(record.subject_id, []).append(record)
        return groups

    @staticmethod
    def find_best_pair(
        vectors: Sequence[TermVector],
    ) -> Tuple[Optional[Tuple[int, int]], float]:
        """
        Find the most similar pair of vectors.

        Pairs are visited as (i, j) with i < j in group order and only a
        strictly greater score replaces the current best, so the first of
        several equally scored pairs wins.

        Args:
            vectors: Term vectors of one group

        Returns:
            Tuple of (best pair indices or None if fewer than two vectors, best score)
        """
        best_pair = None
        best_similarity = -1.0

        for i in range(len(vectors)):
            for j in range(i + 1, len(vectors)):
                similarity = cosine_similarity(vectors[i], vectors[j])
                if similarity > best_similarity:
                    best_similarity = similarity
                    best_pair = (i, j)

        if best_pair is None:
            return None, 0.0
        return best_pair, best_similarity

    def _choose(
        self, first: AnnotationRecord, second: AnnotationRecord
    ) -> AnnotationRecord:
        return first if self.rng.random() < 0.5 else second

    def resolve_group(
        self, subject_id: Optional[str], group: Sequence[AnnotationRecord]
    ) -> GroupResolution:
        """
        Resolve one subject group to a single record.

        Args:
            subject_id: Subject id shared by the group
            group: Normalized records for the subject (at least one)

        Returns:
            GroupResolution holding the chosen record and the winning score
        """
        if len(group) == 1:
            return GroupResolution(
                subject_id=subject_id,
                record=ResolvedRecord(subject_id, group[0].text),
                group_size=1,
            )

        # One vector per member, reused by every comparison
        vectors = [self.vectorizer.vectorize_text(record.text) for record in group]
        best_pair, best_similarity = self.find_best_pair(vectors)
        i, j = best_pair
        chosen = self._choose(group[i], group[j])

        if best_similarity == 0:
            logger.warning(
                "Subject %s: no shared words among %s annotations; keeping one anyway",
                subject_id,
                len(group),
            )
        else:
            logger.debug(
                "Subject %s: best pair (%s, %s) of %s with similarity %.3f",
                subject_id,
                i,
                j,
                len(group),
                best_similarity,
            )

        return GroupResolution(
            subject_id=subject_id,
            record=ResolvedRecord(subject_id, chosen.text),
            group_size=len(group),
            best_similarity=best_similarity,
            best_pair=best_pair,
        )

    def resolve_groups(
        self,
        records: Sequence[AnnotationRecord],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[GroupResolution]:
        """
        Resolve every subject group of already-normalized records.

        Args:
            records: Normalized records
            progress_callback: Optional callback function(stage_name, current, total)

        Returns:
            One GroupResolution per distinct subject id, in first-seen order
        """
        groups = self.group_records(records)
        logger.info(
            "Resolving %s records across %s subjects", len(records), len(groups)
        )

        total = len(groups)
        if progress_callback:
            progress_callback("resolving_groups", 0, total)

        resolutions = []
        for index, (subject_id, group) in enumerate(groups.items(), start=1):
            resolutions.append(self.resolve_group(subject_id, group))
            if progress_callback:
                progress_callback("resolving_groups", index, total)

        logger.info("Resolution: %s -> %s records", len(records), len(resolutions))
        return resolutions

    def resolve_records(
        self,
        records: Sequence[AnnotationRecord],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[ResolvedRecord]:
        """Resolve normalized records to one ResolvedRecord per subject."""
        return [
            resolution.record
            for resolution in self.resolve_groups(records, progress_callback)
        ]

    def normalize_records(
        self,
        records: Sequence[AnnotationRecord],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[AnnotationRecord]:
        """Normalize the text of every record, returning new records."""
        if progress_callback:
            progress_callback("normalizing", 0, len(records))
        normalized = [self.normalizer.normalize_record(record) for record in records]
        if progress_callback:
            progress_callback("normalizing", len(normalized), len(records))
        logger.info("Normalized %s records", len(normalized))
        return normalized

    def process_rows(
        self,
        rows: List[Dict],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[GroupResolution]:
        """
        Run the full pipeline on parsed export rows.

        1. Convert rows to records (missing fields become empty/None)
        2. Normalize every annotation
        3. Group by subject id and resolve each group

        Args:
            rows: Parsed rows keyed by column name
            progress_callback: Optional callback function(stage_name, current, total)

        Returns:
            One GroupResolution per distinct subject id
        """
        if progress_callback:
            progress_callback("converting", 0, len(rows))
        records = self.record_processor.convert_rows(rows)
        if progress_callback:
            progress_callback("converting", len(records), len(rows))

        normalized = self.normalize_records(records, progress_callback)
        resolutions = self.resolve_groups(normalized, progress_callback)

        if progress_callback:
            progress_callback("complete", len(resolutions), len(resolutions))
        return resolutions
