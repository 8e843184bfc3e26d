"""
Source statistics: word counts and per-segment averages.
"""
import re
from typing import Any, Mapping, Sequence, Union

from pydantic import BaseModel

from .models import TITLE_KEY, TranslationRecord, TranslationStore

_WHITESPACE = re.compile(r"\s+")


class SourceStats(BaseModel):
    source_word_count: int = 0
    translated_word_count: int = 0
    num_segments: int = 0
    avg_source_words: float = 0
    num_translated_segments: int = 0
    avg_translated_words: float = 0


def count_words(text: Any) -> int:
    if not isinstance(text, str):
        return 0
    return len([word for word in _WHITESPACE.split(text) if word])


def _average(total: int, count: int) -> float:
    return round(total / count, 2) if count > 0 else 0


def stats(
    content: str,
    segments: Sequence[str],
    translations: Union[TranslationStore, Mapping[str, Any], None] = None,
) -> SourceStats:
    """
    Compute source statistics.

    Every record counts as translated, including Skip records with empty
    text; the title translation never does.
    """
    if isinstance(translations, TranslationStore):
        records: Mapping[str, Any] = translations.records
    else:
        records = {k: v for k, v in (translations or {}).items() if k != TITLE_KEY}

    source_words = count_words(content)
    num_segments = len([seg for seg in segments if seg.strip()])
    translated_words = sum(
        count_words(TranslationRecord.coerce(value).text) for value in records.values()
    )
    num_translated = len(records)

    return SourceStats(
        source_word_count=source_words,
        translated_word_count=translated_words,
        num_segments=num_segments,
        avg_source_words=_average(source_words, num_segments),
        num_translated_segments=num_translated,
        avg_translated_words=_average(translated_words, num_translated),
    )
