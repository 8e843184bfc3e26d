"""
Document Reconstructor
Assemble the translated document from segments, delimiters and records.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Union

from .models import SegmentType, TITLE_KEY, TranslationRecord, TranslationStore

logger = logging.getLogger(__name__)

NOTES_SEPARATOR = "\n\n---\n\nNotes\n\n"


@dataclass
class OutlineEntry:
    level: int
    text: str
    segment_index: int


@dataclass
class ReconstructionResult:
    text: str
    footnotes: List[str] = field(default_factory=list)
    outline: List[OutlineEntry] = field(default_factory=list)


def _lookup(
    translations: Mapping[str, Any],
    segment_text: str,
) -> Optional[TranslationRecord]:
    key = segment_text.strip()
    if not key or key == TITLE_KEY or key not in translations:
        return None
    return TranslationRecord.coerce(translations[key])


def reconstruct(
    segments: Sequence[str],
    delimiters: Sequence[str],
    translations: Union[TranslationStore, Mapping[str, Any], None] = None,
) -> ReconstructionResult:
    """
    Build the final document.

    Walks segments by their unfiltered index. Blank segments carry no
    record and are emitted verbatim. Skip records render nothing,
    other records render their text (or the raw segment when empty) with a
    footnote marker per note, and segments without a record pass through.
    The delimiter before a segment survives only if neither neighbour's
    delimiter action drops it.

    Args:
        segments: Segments as produced by the segmenter
        delimiters: Delimiters aligned with segments
        translations: TranslationStore or a plain record mapping

    Returns:
        ReconstructionResult with text, footnotes and heading outline
    """
    if isinstance(translations, TranslationStore):
        records: Mapping[str, Any] = translations.records
    else:
        records = translations or {}

    parts: List[str] = []
    footnotes: List[str] = []
    outline: List[OutlineEntry] = []
    note_counter = 1

    for i, seg in enumerate(segments):
        # Blank segments have no record and pass through as-is
        record = _lookup(records, seg)

        if record is None:
            rendered = seg
        elif record.segment_type == SegmentType.SKIP:
            rendered = ""
        else:
            rendered = record.text or seg
            if record.note:
                rendered += f" [{note_counter}]"
                footnotes.append(f"{note_counter}. {record.note}")
                note_counter += 1
            level = record.outline_level.depth
            if record.segment_type == SegmentType.HEADING and level is not None:
                outline.append(OutlineEntry(level=level, text=record.text or seg.strip(), segment_index=i))

        if i > 0 and i - 1 < len(delimiters):
            previous = _lookup(records, segments[i - 1])
            keep = not (previous and previous.delimiter_action.drops_succeeding)
            keep = keep and not (record and record.delimiter_action.drops_preceding)
            if keep:
                parts.append(delimiters[i - 1])

        parts.append(rendered)

    text = "".join(parts)
    if footnotes:
        text += NOTES_SEPARATOR + "\n".join(footnotes)

    logger.debug(f"Reconstructed {len(segments)} segments with {len(footnotes)} notes")
    return ReconstructionResult(text=text, footnotes=footnotes, outline=outline)
