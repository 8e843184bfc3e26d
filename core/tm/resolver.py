"""
Memory Resolver
Merge local and imported memories and find where they are used.

Usage is plain substring containment, so a key also matches inside longer
words.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .models import AlternativeEntry, MemoryEntry, PrimaryEntry, parse_entry

logger = logging.getLogger(__name__)

RawMemories = Mapping[str, Union[str, MemoryEntry]]


@dataclass
class ImportedMemories:
    """Memories of another source, merged read-only."""
    source_id: str
    filename: str
    memories: RawMemories


@dataclass
class MergedEntry:
    entry: MemoryEntry
    origin_id: Optional[str] = None  # None = local
    origin_filename: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.origin_id is None


@dataclass
class MemoryUsage:
    """A current segment (by position) containing a memory's source text."""
    index: int


@dataclass
class DisplayableMemory:
    source_text: str
    target: str
    is_local: bool = True
    origin_id: Optional[str] = None
    origin_filename: Optional[str] = None
    alternatives: List[str] = field(default_factory=list)
    usage: List[MemoryUsage] = field(default_factory=list)

    def display_usage(self) -> List[MemoryUsage]:
        """Usage with each segment listed once, first-seen order."""
        seen = set()
        result = []
        for use in self.usage:
            if use.index not in seen:
                seen.add(use.index)
                result.append(use)
        return result


@dataclass
class SegmentMemoryHit:
    number: int
    source_text: str
    target: str
    is_alternative: bool
    position: int


def _as_entry(value: Union[str, MemoryEntry]) -> MemoryEntry:
    if isinstance(value, (PrimaryEntry, AlternativeEntry)):
        return value
    return parse_entry(value)


# ==================== MERGE ====================

def merge_memories(
    local: RawMemories,
    imported: Sequence[ImportedMemories] = (),
) -> Dict[str, MergedEntry]:
    """
    Flatten imported and local memories.

    Imports are applied in order and the first import to define a key
    wins; local entries then override everything.
    """
    merged: Dict[str, MergedEntry] = {}
    for source in imported:
        for key, value in source.memories.items():
            if key not in merged:
                merged[key] = MergedEntry(
                    entry=_as_entry(value),
                    origin_id=source.source_id,
                    origin_filename=source.filename,
                )
    for key, value in local.items():
        merged[key] = MergedEntry(entry=_as_entry(value))
    return merged


# ==================== USAGE ====================

def find_usage(key: str, segments: Sequence[str]) -> List[MemoryUsage]:
    if not key:
        return []
    return [MemoryUsage(index=i) for i, seg in enumerate(segments) if key in seg]


def resolve(
    local: RawMemories,
    imported: Sequence[ImportedMemories],
    segments: Sequence[str],
) -> List[DisplayableMemory]:
    """
    Build the memory records to display for the current segments.

    Args:
        local: This source's memories
        imported: Imported memories in import order
        segments: Current translatable segments

    Returns:
        Primary memories used by at least one segment, each with its
        alternatives attached and their usage appended
    """
    merged = merge_memories(local, imported)
    displayed: Dict[str, DisplayableMemory] = {}

    for key, item in merged.items():
        if not isinstance(item.entry, PrimaryEntry):
            continue
        usage = find_usage(key, segments)
        if not usage:
            continue
        displayed[key] = DisplayableMemory(
            source_text=key,
            target=item.entry.target,
            is_local=item.is_local,
            origin_id=item.origin_id,
            origin_filename=item.origin_filename,
            usage=usage,
        )

    for key, item in merged.items():
        if not isinstance(item.entry, AlternativeEntry):
            continue
        primary = displayed.get(item.entry.primary_key)
        if primary is None:
            continue
        primary.alternatives.append(key)
        primary.usage.extend(find_usage(key, segments))

    logger.debug(f"Resolved {len(displayed)} of {len(merged)} memories for {len(segments)} segments")
    return list(displayed.values())


# ==================== SEGMENT LOOKUP ====================

def lookup_segment(segment_text: str, memories: RawMemories) -> List[SegmentMemoryHit]:
    """
    Memories occurring in one segment, numbered by first occurrence.

    Alternatives resolve to their primary's target; an alternative whose
    primary is missing or is itself an alternative is ignored.
    """
    entries = {key: _as_entry(value) for key, value in memories.items()}
    found = []
    for key, entry in entries.items():
        if not key:
            continue
        position = segment_text.find(key)
        if position < 0:
            continue
        if isinstance(entry, PrimaryEntry):
            found.append((position, -len(key), key, entry.target, False))
            continue
        primary = entries.get(entry.primary_key)
        if isinstance(primary, PrimaryEntry):
            found.append((position, -len(key), key, primary.target, True))

    found.sort()
    return [
        SegmentMemoryHit(
            number=n,
            source_text=key,
            target=target,
            is_alternative=is_alt,
            position=position,
        )
        for n, (position, _, key, target, is_alt) in enumerate(found, start=1)
    ]
