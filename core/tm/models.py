"""
Translation Memory Entry Models

A memory map is a flat ``source text -> value`` mapping. A value is either
a translation (primary entry) or ``@<key>`` naming the primary entry an
alternate spelling belongs to. In code the two cases are separate types.
"""
from dataclasses import dataclass
from typing import Dict, Mapping, Union

ALTERNATIVE_PREFIX = "@"


@dataclass(frozen=True)
class PrimaryEntry:
    """Canonical memory: source text translates to ``target``."""
    target: str

    def to_value(self) -> str:
        return self.target


@dataclass(frozen=True)
class AlternativeEntry:
    """Alternate spelling of the primary entry keyed ``primary_key``."""
    primary_key: str

    def to_value(self) -> str:
        return f"{ALTERNATIVE_PREFIX}{self.primary_key}"


MemoryEntry = Union[PrimaryEntry, AlternativeEntry]


def parse_entry(value: str) -> MemoryEntry:
    """Decode a stored memory value."""
    if value.startswith(ALTERNATIVE_PREFIX):
        return AlternativeEntry(primary_key=value[len(ALTERNATIVE_PREFIX):])
    return PrimaryEntry(target=value)


def parse_memories(data: Mapping[str, str]) -> Dict[str, MemoryEntry]:
    return {key: parse_entry(value) for key, value in data.items()}


def dump_memories(entries: Mapping[str, MemoryEntry]) -> Dict[str, str]:
    return {key: entry.to_value() for key, entry in entries.items()}
