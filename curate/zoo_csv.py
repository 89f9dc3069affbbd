"""
CSV input and output for Zooniverse classification exports.

Reads the export with its header row, keeps only the subject id and annotation
columns, and writes one cleaned row per subject back out.
"""

import csv
import logging
from typing import Dict, Iterable, List, Optional, TextIO

from .resolver.core import ANNOTATION_FIELD, SUBJECT_FIELD, ResolvedRecord

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILENAME = "cleaned-zooniverse-data.csv"


def filter_columns(
    rows: Iterable[Dict],
    subject_field: str = SUBJECT_FIELD,
    annotation_field: str = ANNOTATION_FIELD,
) -> List[Dict[str, Optional[str]]]:
    """Keep only the subject id and annotation columns of each row."""
    return [
        {
            subject_field: row.get(subject_field),
            annotation_field: row.get(annotation_field),
        }
        for row in rows
    ]


def read_annotation_rows(
    stream: TextIO,
    subject_field: str = SUBJECT_FIELD,
    annotation_field: str = ANNOTATION_FIELD,
) -> List[Dict[str, Optional[str]]]:
    """
    Parse a classification export and keep the two columns of interest.

    Blank lines are skipped. Missing columns are reported but not fatal;
    their values come through as None.

    Args:
        stream: Open text stream positioned at the header row
        subject_field: Column holding the subject id
        annotation_field: Column holding the annotation JSON/text

    Returns:
        List of row dicts with exactly the two requested keys
    """
    reader = csv.DictReader(stream)
    fieldnames = reader.fieldnames or []
    for field in (subject_field, annotation_field):
        if field not in fieldnames:
            logger.warning("Column '%s' not found in CSV header %s", field, fieldnames)

    rows = [
        row
        for row in reader
        if any(value not in (None, "") for value in row.values())
    ]
    logger.info("Read %s rows from CSV", len(rows))
    return filter_columns(rows, subject_field, annotation_field)


def write_resolved_rows(
    records: Iterable[ResolvedRecord],
    stream: TextIO,
    subject_field: str = SUBJECT_FIELD,
    annotation_field: str = ANNOTATION_FIELD,
) -> int:
    """
    Write resolved records as CSV with a header row.

    A missing subject id (None) is written as an empty cell, so it becomes
    indistinguishable from a subject whose id cell was empty in the input.

    Args:
        records: Records to write, in output order
        stream: Open text stream (opened with newline="" for files)
        subject_field: Header for the subject id column
        annotation_field: Header for the annotation column

    Returns:
        Number of data rows written
    """
    writer = csv.DictWriter(stream, fieldnames=[subject_field, annotation_field])
    writer.writeheader()
    count = 0
    blank_subjects = set()
    for record in records:
        if record.subject_id in (None, ""):
            blank_subjects.add(record.subject_id)
        writer.writerow(record.to_row(subject_field, annotation_field))
        count += 1

    # None (missing cell) and "" (empty cell) are separate subjects but look alike
    if len(blank_subjects) == 2:
        logger.warning(
            "Rows with a missing and rows with an empty '%s' were kept as separate "
            "subjects; both are written with a blank id",
            subject_field,
        )
    logger.info("Wrote %s rows", count)
    return count
