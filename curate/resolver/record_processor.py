"""
Raw row processing for the annotation resolver.

Handles conversion of parsed export rows into AnnotationRecord objects.
Missing fields are not errors: a missing annotation becomes empty text and a
missing subject id is kept as None, which then forms its own group.
"""

import logging
from typing import Any, Dict, List, Optional

from .core import ANNOTATION_FIELD, SUBJECT_FIELD, AnnotationRecord

logger = logging.getLogger(__name__)


class RawRecordProcessor:
    """
    Converts parsed rows (dicts keyed by column name) into annotation records.
    """

    def __init__(
        self,
        subject_field: str = SUBJECT_FIELD,
        annotation_field: str = ANNOTATION_FIELD,
    ):
        self.subject_field = subject_field
        self.annotation_field = annotation_field

    @staticmethod
    def _coerce_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            return value
        return str(value)

    @staticmethod
    def _coerce_subject(value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value if isinstance(value, str) else str(value)

    def convert_row(self, row: Dict) -> AnnotationRecord:
        """
        Convert one parsed row to an AnnotationRecord.

        Args:
            row: Mapping with (ideally) the subject and annotation fields

        Returns:
            AnnotationRecord with empty text where the annotation is absent
        """
        return AnnotationRecord(
            subject_id=self._coerce_subject(row.get(self.subject_field)),
            text=self._coerce_text(row.get(self.annotation_field)),
        )

    def convert_rows(self, rows: List[Dict]) -> List[AnnotationRecord]:
        """
        Convert a list of parsed rows, skipping anything that is not a mapping.

        Args:
            rows: List of parsed row dictionaries

        Returns:
            List of AnnotationRecord objects
        """
        records = []
        missing_subject = 0
        missing_text = 0

        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                logger.warning("Skipping invalid row at index %s: %r", i, row)
                continue
            if row.get(self.subject_field) is None:
                missing_subject += 1
            if not row.get(self.annotation_field):
                missing_text += 1
            records.append(self.convert_row(row))

        if missing_subject:
            logger.warning(
                "%s rows have no '%s' value; they are grouped together",
                missing_subject,
                self.subject_field,
            )
        if missing_text:
            logger.info(
                "%s rows have an empty '%s' value", missing_text, self.annotation_field
            )
        logger.info("Converted %s out of %s rows", len(records), len(rows))
        return records
