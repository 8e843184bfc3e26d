"""
Unit tests for core/tm: memory entries, merging, usage and segment lookup.
"""

import pytest

from core.tm.models import (
    AlternativeEntry,
    PrimaryEntry,
    dump_memories,
    parse_entry,
    parse_memories,
)
from core.tm.resolver import (
    ImportedMemories,
    MemoryUsage,
    find_usage,
    lookup_segment,
    merge_memories,
    resolve,
)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

class TestEntries:
    def test_parse_primary(self):
        assert parse_entry("grande") == PrimaryEntry(target="grande")

    def test_parse_alternative(self):
        assert parse_entry("@big") == AlternativeEntry(primary_key="big")

    def test_dump_restores_stored_values(self):
        data = {"big": "grande", "enormous": "@big"}
        assert dump_memories(parse_memories(data)) == data


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

class TestMerge:
    def test_first_import_wins(self):
        imports = [
            ImportedMemories("s1", "First", {"cat": "chat"}),
            ImportedMemories("s2", "Second", {"cat": "gato", "dog": "perro"}),
        ]
        merged = merge_memories({}, imports)
        assert merged["cat"].entry == PrimaryEntry("chat")
        assert merged["cat"].origin_filename == "First"
        assert merged["dog"].origin_id == "s2"

    def test_local_overrides_imports(self):
        imports = [ImportedMemories("s1", "First", {"cat": "chat"})]
        merged = merge_memories({"cat": "Katze"}, imports)
        assert merged["cat"].entry == PrimaryEntry("Katze")
        assert merged["cat"].is_local


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------

class TestUsage:
    def test_substring_containment(self):
        assert find_usage("cat", ["The cat sat."]) == [MemoryUsage(index=0)]

    def test_matches_inside_words(self):
        assert find_usage("cat", ["concatenate"]) == [MemoryUsage(index=0)]

    def test_case_sensitive(self):
        assert find_usage("Cat", ["the cat"]) == []

    def test_empty_key_never_matches(self):
        assert find_usage("", ["anything"]) == []


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------

class TestResolve:
    def test_cat_usage(self):
        records = resolve({"cat": "chat"}, [], ["The cat sat."])
        assert len(records) == 1
        assert records[0].source_text == "cat"
        assert records[0].usage == [MemoryUsage(index=0)]

    def test_unused_memory_excluded(self):
        records = resolve({"dog": "chien"}, [], ["The cat sat."])
        assert records == []

    def test_alternative_grouping(self):
        memories = {"big": "grande", "enormous": "@big"}
        records = resolve(memories, [], ["a big house", "an enormous dog"])
        assert [r.source_text for r in records] == ["big"]
        assert records[0].alternatives == ["enormous"]
        assert records[0].target == "grande"
        assert [u.index for u in records[0].usage] == [0, 1]

    def test_alternative_never_top_level(self):
        memories = {"big": "grande", "enormous": "@big"}
        records = resolve(memories, [], ["an enormous dog"])
        assert all(r.source_text != "enormous" for r in records)

    def test_alternative_usage_without_primary_usage_not_shown(self):
        memories = {"big": "grande", "enormous": "@big"}
        assert resolve(memories, [], ["nothing here"]) == []

    def test_dangling_alternative_ignored(self):
        records = resolve({"enormous": "@missing"}, [], ["enormous"])
        assert records == []

    def test_display_usage_dedupes(self):
        memories = {"big": "grande", "bigger": "@big"}
        records = resolve(memories, [], ["bigger"])
        assert [u.index for u in records[0].usage] == [0, 0]
        assert [u.index for u in records[0].display_usage()] == [0]

    def test_imported_origin_reported(self):
        imports = [ImportedMemories("s1", "Glossary", {"cat": "chat"})]
        records = resolve({}, imports, ["cat"])
        assert records[0].is_local is False
        assert records[0].origin_filename == "Glossary"


# ---------------------------------------------------------------------------
# Segment lookup
# ---------------------------------------------------------------------------

class TestLookupSegment:
    def test_numbered_by_first_occurrence(self):
        memories = {"dog": "chien", "cat": "chat"}
        hits = lookup_segment("The cat chased the dog.", memories)
        assert [(h.number, h.source_text) for h in hits] == [(1, "cat"), (2, "dog")]

    def test_alternative_resolves_to_primary_target(self):
        memories = {"big": "grande", "enormous": "@big"}
        hits = lookup_segment("an enormous dog", memories)
        assert len(hits) == 1
        assert hits[0].target == "grande"
        assert hits[0].is_alternative

    def test_longer_key_first_at_same_position(self):
        memories = {"cat": "chat", "catalog": "catalogue"}
        hits = lookup_segment("catalog", memories)
        assert [h.source_text for h in hits] == ["catalog", "cat"]

    def test_alternative_chain_ignored(self):
        memories = {"a": "@b", "b": "@c", "c": "x"}
        hits = lookup_segment("a", memories)
        assert hits == []

    @pytest.mark.parametrize("memories", [{}, {"": "empty"}])
    def test_no_hits(self, memories):
        assert lookup_segment("text", memories) == []
