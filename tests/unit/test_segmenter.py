"""
Unit tests for core/editor/segmenter.py: regex segmentation with kept delimiters.
"""

import pytest

from core.editor.segmenter import (
    RegexSegmenter,
    SegmentationResult,
    compile_rule,
    part_filenames,
    preview,
    segment,
    segment_or_whole,
    split_parts,
    validate_rule,
)
from core.exceptions import InvalidSegmentationRuleError, ValidationError


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

class TestRules:
    def test_default_rule_is_newline(self):
        assert compile_rule(None).pattern == "(\n)"
        assert compile_rule("").pattern == "(\n)"

    def test_invalid_rule_raises(self):
        with pytest.raises(InvalidSegmentationRuleError) as exc_info:
            validate_rule("([a-z")
        assert exc_info.value.rule == "([a-z"
        assert "Invalid segmentation rule" in exc_info.value.message

    def test_invalid_rule_is_validation_error(self):
        with pytest.raises(ValidationError):
            segment("a b", "*")

    def test_segmenter_keeps_rule(self):
        seg = RegexSegmenter(r"\. ")
        assert seg.rule == r"\. "


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

class TestSegment:
    def test_newline_split(self):
        result = segment("Hello world.\nGoodbye.", "\n")
        assert result.segments == ["Hello world.", "Goodbye."]
        assert result.delimiters == ["\n"]

    def test_delimiters_one_fewer_than_segments(self):
        result = segment("a\nb\nc\n", "\n")
        assert result.segments == ["a", "b", "c", ""]
        assert len(result.delimiters) == len(result.segments) - 1

    def test_no_match_single_segment(self):
        result = segment("no breaks here", "\n")
        assert result.segments == ["no breaks here"]
        assert result.delimiters == []

    def test_empty_content(self):
        result = segment("", "\n")
        assert result.segments == [""]
        assert result.delimiters == []

    def test_variable_delimiters_are_kept(self):
        result = segment("One. Two!  Three?", r"[.!?]\s+")
        assert result.segments == ["One", "Two", "Three?"]
        assert result.delimiters == [". ", "!  "]

    def test_rule_with_own_groups(self):
        result = segment("a, b; c", r"(,|;) ")
        assert result.segments == ["a", "b", "c"]
        assert result.delimiters == [", ", "; "]

    def test_zero_width_rule_does_not_loop(self):
        result = segment("ab", "")
        # Empty rule falls back to newline
        assert result.segments == ["ab"]
        result = segment("abc", "(?=b)")
        assert result.segments == ["a", "bc"]
        assert result.delimiters == [""]

    @pytest.mark.parametrize("content,rule", [
        ("Hello world.\nGoodbye.", "\n"),
        ("\n\nleading and trailing\n\n", "\n"),
        ("a\r\nb\r\n\r\nc", r"\r?\n"),
        ("First. Second! Third", r"[.!?] "),
        ("x--y----z", "-+"),
        ("ünïcödé\n日本語\n", "\n"),
    ])
    def test_round_trip(self, content, rule):
        result = segment(content, rule)
        assert result.reassemble() == content
        rebuilt = "".join(
            seg + (result.delimiters[i] if i < len(result.delimiters) else "")
            for i, seg in enumerate(result.segments)
        )
        assert rebuilt == content

    def test_translatable_segments_trimmed_and_non_blank(self):
        result = segment("  one  \n\n   \ntwo", "\n")
        assert result.translatable_segments() == ["one", "two"]

    def test_delimiter_after(self):
        result = segment("a\nb", "\n")
        assert result.delimiter_after(0) == "\n"
        assert result.delimiter_after(1) is None


class TestSegmentOrWhole:
    def test_valid_rule_splits(self):
        assert segment_or_whole("a\nb").segments == ["a", "b"]

    def test_invalid_rule_returns_whole_content(self):
        result = segment_or_whole("a\nb", "[")
        assert result.segments == ["a\nb"]
        assert result.delimiters == []


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------

class TestPreview:
    def test_preview_counts(self):
        p = preview("one\n\ntwo", "\n")
        assert p.rule == "\n"
        assert p.segment_count == 3
        assert p.translatable_count == 2
        assert [s.text for s in p.spans] == ["one", "", "two"]
        assert [s.delimiter for s in p.spans] == ["\n", "\n", ""]

    def test_preview_invalid_rule(self):
        with pytest.raises(InvalidSegmentationRuleError):
            preview("text", "(")


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------

class TestSplitParts:
    def test_split_before_second_segment(self):
        result = segment("a\nb\nc", "\n")
        first, second = split_parts(result, 1)
        assert first == "a\n"
        assert second == "b\nc"
        assert first + second == "a\nb\nc"

    def test_split_skips_blank_segments_in_index(self):
        result = segment("a\n\nb\nc", "\n")
        first, second = split_parts(result, 1)
        assert first == "a\n\n"
        assert second == "b\nc"

    @pytest.mark.parametrize("index", [0, 3, -1])
    def test_split_index_out_of_range(self, index):
        result = segment("a\nb\nc", "\n")
        with pytest.raises(ValueError):
            split_parts(result, index)

    def test_single_segment_cannot_split(self):
        with pytest.raises(ValueError):
            split_parts(SegmentationResult(segments=["only"], delimiters=[]), 1)


class TestPartFilenames:
    def test_plain_name(self):
        assert part_filenames("Book") == ("Book - Part 1", "Book - Part 2")

    def test_existing_part_suffix(self):
        assert part_filenames("Book - Part 2") == ("Book - Part 2", "Book - Part 3")
