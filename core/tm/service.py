"""
Translation Memory Service
Business logic layer for per-source memories.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.editor.models import ImportedMemoryRef, Source
from core.editor.segmenter import segment_or_whole
from core.exceptions import DataError, ValidationError
from core.storage.models import memories_key
from core.storage.repository import SourceRepository, get_repository
from .models import ALTERNATIVE_PREFIX, AlternativeEntry, PrimaryEntry, parse_memories
from .resolver import (
    DisplayableMemory,
    ImportedMemories,
    SegmentMemoryHit,
    lookup_segment,
    merge_memories,
    resolve,
)

logger = logging.getLogger(__name__)


@dataclass
class MemoryResolution:
    """Displayable memories plus imports that could not be read."""
    records: List[DisplayableMemory] = field(default_factory=list)
    missing_imports: List[ImportedMemoryRef] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class MemoryService:
    """
    Service layer for translation memory operations.

    Local memories are editable; imported ones are read from other
    sources at resolve time and never written.
    """

    def __init__(self, repository: Optional[SourceRepository] = None):
        """Initialize service."""
        self.repository = repository or get_repository()

    # ==================== LOCAL MEMORIES ====================

    def load_memories(self, source_id: str) -> Dict[str, str]:
        """
        Raw local memories of a source.

        Raises:
            SourceNotFoundError: if the source does not exist
            DataError: if the stored memories are corrupt
        """
        source = self.repository.require_source(source_id)
        return self.repository.get_memories(source)

    def _save(self, source: Source, memories: Dict[str, str]) -> None:
        self.repository.put(source, memories_key(source.id), memories)

    def add_memory(self, source_id: str, source_text: str, target: str) -> Dict[str, str]:
        """Add or replace a primary memory."""
        if not source_text:
            raise ValidationError("Memory source text must not be empty")
        if target.startswith(ALTERNATIVE_PREFIX):
            raise ValidationError(
                f"A translation cannot start with '{ALTERNATIVE_PREFIX}'; use an alternative instead"
            )
        source = self.repository.require_source(source_id)
        memories = dict(self.repository.get_memories(source))
        memories[source_text] = PrimaryEntry(target=target).to_value()
        self._save(source, memories)
        logger.info(f"Saved memory {source_text!r} for source {source_id}")
        return memories

    def add_alternative(self, source_id: str, alternative_text: str, primary_key: str) -> Dict[str, str]:
        """
        Record ``alternative_text`` as another spelling of ``primary_key``.

        Raises:
            ValidationError: if the primary is unknown or is itself an alternative
        """
        if not alternative_text:
            raise ValidationError("Alternative text must not be empty")
        if alternative_text == primary_key:
            raise ValidationError("An alternative cannot point at itself")

        source = self.repository.require_source(source_id)
        memories = dict(self.repository.get_memories(source))
        merged = merge_memories(memories, self._read_imports(source, MemoryResolution()))
        primary = merged.get(primary_key)
        if primary is None:
            raise ValidationError(f"No memory named {primary_key!r}")
        if not isinstance(primary.entry, PrimaryEntry):
            raise ValidationError(f"{primary_key!r} is an alternative, not a primary memory")

        memories[alternative_text] = AlternativeEntry(primary_key=primary_key).to_value()
        self._save(source, memories)
        return memories

    def delete_memory(self, source_id: str, source_text: str) -> bool:
        source = self.repository.require_source(source_id)
        memories = dict(self.repository.get_memories(source))
        if source_text not in memories:
            return False
        del memories[source_text]
        self._save(source, memories)
        return True

    # ==================== IMPORTS ====================

    def set_imports(self, source_id: str, source_ids: List[str]) -> Source:
        """
        Choose which sources' memories are merged in, in priority order.

        Raises:
            ValidationError: for self-imports
            SourceNotFoundError: for unknown sources
        """
        source = self.repository.require_source(source_id)
        refs = []
        for import_id in dict.fromkeys(source_ids):
            if import_id == source_id:
                raise ValidationError("A source cannot import its own memories")
            imported = self.repository.require_source(import_id)
            refs.append(ImportedMemoryRef(id=imported.id, filename=imported.filename))

        updated = source.model_copy(update={"memory_imports": refs})
        self.repository.save_source(updated)
        return updated

    def _read_imports(self, source: Source, resolution: MemoryResolution) -> List[ImportedMemories]:
        imported = []
        for ref in source.memory_imports:
            other = self.repository.get_source(ref.id)
            if other is None:
                logger.warning(f"Imported source {ref.filename} ({ref.id}) no longer exists")
                resolution.missing_imports.append(ref)
                continue
            try:
                memories = self.repository.get_memories(other)
            except DataError as e:
                logger.error(str(e))
                resolution.errors.append(str(e))
                continue
            imported.append(ImportedMemories(
                source_id=other.id,
                filename=other.filename,
                memories=parse_memories(memories),
            ))
        return imported

    # ==================== RESOLUTION ====================

    def resolve(self, source_id: str) -> MemoryResolution:
        """Memories used by the source's current segments."""
        source = self.repository.require_source(source_id)
        resolution = MemoryResolution()

        try:
            local = self.repository.get_memories(source)
        except DataError as e:
            logger.error(str(e))
            resolution.errors.append(str(e))
            local = {}

        imported = self._read_imports(source, resolution)
        segments = segment_or_whole(source.content, source.rule).translatable_segments()
        resolution.records = resolve(parse_memories(local), imported, segments)
        return resolution

    def lookup_segment(self, source_id: str, segment_text: str) -> List[SegmentMemoryHit]:
        """Numbered memory hits inside one segment, imports included."""
        source = self.repository.require_source(source_id)
        resolution = MemoryResolution()
        local = self.repository.get_memories(source)
        merged = merge_memories(local, self._read_imports(source, resolution))
        return lookup_segment(segment_text, {key: item.entry for key, item in merged.items()})


# Global instance
_service: Optional[MemoryService] = None


def get_memory_service() -> MemoryService:
    """Get or create the global service instance."""
    global _service
    if _service is None:
        _service = MemoryService()
    return _service
