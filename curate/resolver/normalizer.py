"""
Text normalization for the annotation resolver.

Strips the JSON scaffolding the transcription platform wraps around each
annotation and decodes the escape and unicode artifacts left in the export.
"""

import logging
from typing import List, Optional, Tuple

from .core import AnnotationRecord

logger = logging.getLogger(__name__)

# Wrapper fragments injected around the T4 free-text task and the T1
# "Main Dropdown" choice. Removed verbatim, in this order.
BOILERPLATE_BLOCKS: Tuple[str, ...] = (
    '[{"task":"T4","value":"',
    '","taskType":"textFromSubject"},{"task":"T1","task_type":"dropdown-simple",'
    '"value":{"select_label":"Main Dropdown","option":true,"value":1,"label":"Page is blank"}}]',
    '","taskType":"textFromSubject"},{"task":"T1","task_type":"dropdown-simple",'
    '"value":{"select_label":"Main Dropdown","option":true,"value":0,"label":"Corrections made"}}]',
    '","taskType":"textFromSubject"},{"task":"T1","task_type":"dropdown-simple",'
    '"value":{"select_label":"Main Dropdown","option":true,"value":2,"label":"No corrections needed"}}]',
    '","taskType":"textFromSubject"},{"task":"T1","task_type":"dropdown-simple",'
    '"value":{"select_label":"Main Dropdown","option":true,"value":3,"label":"Text is illegible"}}]',
)

# Literal escape sequences and symbols, replaced in this order
ESCAPE_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("\\u0026", "&"),
    ("\\u003e", ">"),
    ("\\u003c", "<"),
    ("♂", "[male]"),
    ("♀", "[female]"),
    ("⚥", "[intersex]"),
    ('\\"', '"'),
    ("\\n", "[new line]"),
)


class TextNormalizer:
    """
    Removes boilerplate blocks and substitutes escape sequences in annotation text.

    Both stages are repeated until the text reaches a fixed point, so applying
    the normalizer to its own output never changes it.
    """

    def __init__(
        self,
        blocks: Optional[List[str]] = None,
        replacements: Optional[List[Tuple[str, str]]] = None,
        max_passes: Optional[int] = None,
    ):
        self.blocks = tuple(blocks) if blocks is not None else BOILERPLATE_BLOCKS
        self.replacements = (
            tuple(replacements) if replacements is not None else ESCAPE_REPLACEMENTS
        )
        # None repeats until the text settles
        self.max_passes = max_passes

    def remove_boilerplate(self, text: str) -> str:
        """Delete every occurrence of each known block, one block at a time."""
        for block in self.blocks:
            if block:
                text = text.replace(block, "")
        return text

    def apply_replacements(self, text: str) -> str:
        """Replace escaped entities, gender symbols and escaped newlines/quotes."""
        for old, new in self.replacements:
            text = text.replace(old, new)
        return text

    def normalize(self, text: Optional[str]) -> str:
        """
        Normalize raw annotation text.

        Args:
            text: Raw annotation text, may be None or empty

        Returns:
            Cleaned text; empty string for missing input
        """
        if not text:
            return ""

        current = text
        passes = 0
        while self.max_passes is None or passes < self.max_passes:
            cleaned = self.apply_replacements(self.remove_boilerplate(current))
            passes += 1
            if cleaned == current:
                break
            current = cleaned
        else:
            logger.warning(
                "Normalization did not settle after %s passes for %r",
                self.max_passes,
                text[:80],
            )

        if passes > 2:
            logger.debug("Normalization needed %s passes for %r", passes, text[:80])
        return current

    def normalize_record(self, record: AnnotationRecord) -> AnnotationRecord:
        """Return a new record carrying the normalized text."""
        return AnnotationRecord(
            subject_id=record.subject_id, text=self.normalize(record.text)
        )


_DEFAULT_NORMALIZER = TextNormalizer()


def normalize(text: Optional[str]) -> str:
    """Normalize text with the default boilerplate blocks and replacements."""
    return _DEFAULT_NORMALIZER.normalize(text)
