"""
Translation Memory Module
Per-source memories with alternate spellings and imports.

Key components:
- MemoryService: Main service for memory operations
- resolver: Merge imports, find usage, number hits in a segment
- models: Primary and alternative memory entries
"""

from .models import AlternativeEntry, PrimaryEntry, parse_entry, parse_memories, dump_memories
from .resolver import (
    DisplayableMemory,
    ImportedMemories,
    SegmentMemoryHit,
    lookup_segment,
    merge_memories,
    resolve,
)

__all__ = [
    "AlternativeEntry",
    "PrimaryEntry",
    "parse_entry",
    "parse_memories",
    "dump_memories",
    "DisplayableMemory",
    "ImportedMemories",
    "SegmentMemoryHit",
    "lookup_segment",
    "merge_memories",
    "resolve",
]
