"""
Tests for annotation text normalization.
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from curate.resolver import AnnotationRecord, TextNormalizer, normalize
from curate.resolver.normalizer import BOILERPLATE_BLOCKS

OPENING = '[{"task":"T4","value":"'


def wrap(text: str, value: int, label: str) -> str:
    """Build an export annotation cell the way the platform writes it."""
    return (
        OPENING
        + text
        + '","taskType":"textFromSubject"},{"task":"T1","task_type":"dropdown-simple",'
        + '"value":{"select_label":"Main Dropdown","option":true,"value":'
        + str(value)
        + ',"label":"'
        + label
        + '"}}]'
    )


class TestBoilerplateRemoval:
    """Test removal of the platform JSON wrapper."""

    def test_no_corrections_needed_wrapper(self):
        """Test unwrapping the most common export annotation."""
        raw = (
            '[{"task":"T4","value":"Hello","taskType":"textFromSubject"},'
            '{"task":"T1","task_type":"dropdown-simple","value":{"select_label":'
            '"Main Dropdown","option":true,"value":2,"label":"No corrections needed"}}]'
        )
        assert normalize(raw) == "Hello"

    @pytest.mark.parametrize(
        "value,label",
        [
            (1, "Page is blank"),
            (0, "Corrections made"),
            (2, "No corrections needed"),
            (3, "Text is illegible"),
        ],
    )
    def test_every_dropdown_choice(self, value, label):
        """Test that each known dropdown closer is removed."""
        assert normalize(wrap("Dear Sir", value, label)) == "Dear Sir"

    def test_unknown_dropdown_choice_is_kept(self):
        """Test that an unknown dropdown closer is left in place."""
        raw = wrap("Dear Sir", 7, "Something else")
        result = normalize(raw)
        assert OPENING not in result
        assert result.startswith("Dear Sir")
        assert "Something else" in result

    def test_all_occurrences_removed(self):
        """Test that every occurrence of a block is removed."""
        raw = OPENING + "one" + OPENING + "two"
        assert normalize(raw) == "onetwo"

    def test_blocks_applied_independently(self):
        """Test that blocks are removed one after another."""
        raw = wrap("a", 1, "Page is blank") + wrap("b", 3, "Text is illegible")
        assert normalize(raw) == "ab"

    def test_removal_is_literal_not_regex(self):
        """Test that block text is matched literally."""
        normalizer = TextNormalizer(blocks=["a.c"], replacements=[])
        assert normalizer.normalize("abc a.c") == "abc "

    def test_known_blocks_order(self):
        """Test the order of the known boilerplate blocks."""
        assert BOILERPLATE_BLOCKS[0] == OPENING
        assert len(BOILERPLATE_BLOCKS) == 5


class TestEscapeSubstitution:
    """Test decoding of escape sequences and symbols."""

    def test_ampersand_and_newline(self):
        """Test ampersand and newline escapes."""
        assert normalize("cat\\u0026dog\\n") == "cat&dog[new line]"

    def test_angle_brackets(self):
        """Test angle bracket escapes."""
        assert normalize("\\u003cb\\u003ebold") == "<b>bold"

    def test_gender_symbols(self):
        """Test replacement of gender symbols."""
        assert normalize("♂ ♀ ⚥") == "[male] [female] [intersex]"

    def test_escaped_quotes(self):
        """Test unescaping of quotes."""
        assert normalize('he said \\"hi\\"') == 'he said "hi"'

    def test_real_newline_untouched(self):
        """Test that a real newline character is kept."""
        assert normalize("line one\nline two") == "line one\nline two"

    def test_boilerplate_then_escapes(self):
        """Test wrapper removal combined with escape substitution."""
        raw = wrap("Mr Smith \\u0026 Co\\nLondon", 2, "No corrections needed")
        assert normalize(raw) == "Mr Smith & Co[new line]London"


class TestNormalizerEdgeCases:
    """Test missing input and idempotence."""

    def test_empty_and_missing(self):
        """Test empty and missing annotation text."""
        assert normalize("") == ""
        assert normalize(None) == ""

    @pytest.mark.parametrize(
        "text",
        [
            "plain text",
            "cat\\u0026dog\\n",
            '\\\\"quoted',
            "\\\\\\\\\\\\\\\\\"deep",
            "\\\\n",
            wrap("x", 0, "Corrections made"),
            '[{\\"task\\":\\"T4\\",\\"value\\":\\"hidden',
        ],
    )
    def test_idempotent(self, text):
        """Test that normalizing twice changes nothing."""
        once = normalize(text)
        assert normalize(once) == once

    def test_substitution_exposing_another_sequence(self):
        """Test a substitution that exposes another escape."""
        # Unescaping the quote leaves a new escaped quote behind
        assert normalize('\\\\"') == '"'

    def test_escaped_wrapper_is_removed_after_unescaping(self):
        """Test removal of a wrapper that was itself escaped."""
        assert normalize('[{\\"task\\":\\"T4\\",\\"value\\":\\"hidden') == "hidden"

    def test_normalize_record_returns_new_record(self):
        """Test that normalize_record leaves the input record alone."""
        record = AnnotationRecord(subject_id="42", text="a\\u0026b")
        normalized = TextNormalizer().normalize_record(record)
        assert normalized is not record
        assert normalized == AnnotationRecord(subject_id="42", text="a&b")
        assert record.text == "a\\u0026b"

    def test_max_passes_bounds_runaway_tables(self):
        """Test that max_passes stops a table that never settles."""
        normalizer = TextNormalizer(blocks=[], replacements=[("a", "aa")], max_passes=3)
        assert normalizer.normalize("a") == "aaaaaaaa"
