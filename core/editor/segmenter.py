"""
Text Segmenter
Split raw source text into segments and the delimiters between them.
"""
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple

from core.exceptions import InvalidSegmentationRuleError
from .models import DEFAULT_RULE

logger = logging.getLogger(__name__)

PART_SUFFIX = re.compile(r" - Part (\d+)$")


@dataclass
class SegmentationResult:
    """
    Alternating split of a document.

    ``delimiters[i]`` is the text that followed ``segments[i]``; the last
    segment has no delimiter after it.
    """
    segments: List[str] = field(default_factory=list)
    delimiters: List[str] = field(default_factory=list)

    def delimiter_after(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.delimiters):
            return self.delimiters[index]
        return None

    def translatable_segments(self) -> List[str]:
        """Trimmed, non-blank segments in document order."""
        return [s.strip() for s in self.segments if s.strip()]

    def reassemble(self) -> str:
        parts = []
        for i, seg in enumerate(self.segments):
            parts.append(seg)
            parts.append(self.delimiter_after(i) or "")
        return "".join(parts)


@dataclass
class PreviewSpan:
    index: int
    text: str
    delimiter: str = ""


@dataclass
class SegmentationPreview:
    rule: str
    spans: List[PreviewSpan]
    segment_count: int
    translatable_count: int


# ==================== RULES ====================

@lru_cache(maxsize=64)
def compile_rule(rule: Optional[str] = None) -> "re.Pattern[str]":
    """
    Compile a segmentation rule wrapped in a capturing group.

    Raises:
        InvalidSegmentationRuleError: if the rule is not a valid pattern
    """
    rule = rule or DEFAULT_RULE
    try:
        return re.compile(f"({rule})")
    except re.error as e:
        raise InvalidSegmentationRuleError(rule, str(e)) from e


def validate_rule(rule: Optional[str]) -> None:
    compile_rule(rule)


# ==================== SEGMENTER ====================

class RegexSegmenter:
    """
    Splits text on every match of a user-supplied regular expression.

    The matched text is kept as a delimiter so the document can be
    rebuilt byte for byte.
    """

    def __init__(self, rule: Optional[str] = None):
        self.rule = rule or DEFAULT_RULE
        self.pattern = compile_rule(self.rule)

    def segment(self, content: str) -> SegmentationResult:
        segments: List[str] = []
        delimiters: List[str] = []
        pos = 0
        length = len(content)

        for match in self.pattern.finditer(content):
            start, end = match.span()
            # Empty matches at either edge or right after a delimiter do not split
            if start == end and (start == 0 or start == length or start == pos):
                continue
            segments.append(content[pos:start])
            delimiters.append(match.group(0))
            pos = end

        segments.append(content[pos:])
        logger.debug(f"Segmented {length} chars into {len(segments)} segments")
        return SegmentationResult(segments=segments, delimiters=delimiters)


def segment(content: str, rule: Optional[str] = None) -> SegmentationResult:
    """
    Split content by a rule.

    Args:
        content: Raw source text
        rule: Regular expression; defaults to a single newline

    Returns:
        SegmentationResult with segments and delimiters

    Raises:
        InvalidSegmentationRuleError: before any split is attempted
    """
    return RegexSegmenter(rule).segment(content or "")


def segment_or_whole(content: str, rule: Optional[str] = None) -> SegmentationResult:
    """Like segment(), but an invalid rule yields the whole content as one segment."""
    try:
        return segment(content, rule)
    except InvalidSegmentationRuleError as e:
        logger.warning(f"{e}; showing content unsplit")
        return SegmentationResult(segments=[content or ""], delimiters=[])


def preview(content: str, rule: Optional[str] = None) -> SegmentationPreview:
    """Describe how a rule would split content, without touching any state."""
    result = segment(content, rule)
    spans = [
        PreviewSpan(index=i, text=seg, delimiter=result.delimiter_after(i) or "")
        for i, seg in enumerate(result.segments)
    ]
    return SegmentationPreview(
        rule=rule or DEFAULT_RULE,
        spans=spans,
        segment_count=len(result.segments),
        translatable_count=len(result.translatable_segments()),
    )


# ==================== SPLITTING DOCUMENTS ====================

def split_parts(result: SegmentationResult, split_index: int) -> Tuple[str, str]:
    """
    Content of the two halves when splitting before a translatable segment.

    Args:
        result: Segmentation of the document
        split_index: Position in translatable_segments() that starts part two

    Returns:
        (part1_content, part2_content)
    """
    translatable = [i for i, s in enumerate(result.segments) if s.strip()]
    if not 0 < split_index < len(translatable):
        raise ValueError(
            f"split index must be between 1 and {len(translatable) - 1}, got {split_index}"
        )
    boundary = translatable[split_index]

    first, second = [], []
    for i, seg in enumerate(result.segments):
        target = first if i < boundary else second
        target.append(seg + (result.delimiter_after(i) or ""))
    return "".join(first), "".join(second)


def part_filenames(filename: str) -> Tuple[str, str]:
    """'Book' -> ('Book - Part 1', 'Book - Part 2'); 'Book - Part 2' -> parts 2 and 3."""
    match = PART_SUFFIX.search(filename)
    start = int(match.group(1)) if match else 1
    base = PART_SUFFIX.sub("", filename)
    return f"{base} - Part {start}", f"{base} - Part {start + 1}"
