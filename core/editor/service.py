"""
Editor Service
Business logic for sources, segmentation and translations.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from core.exceptions import DataError, ValidationError
from core.storage.models import delimiters_key, memories_key, translations_key
from core.storage.repository import SourceRepository, get_repository
from .jobs import GenerationJobRunner
from .models import DEFAULT_RULE, Source, TranslationRecord, TranslationStore
from .reconciler import reconcile_with_report
from .reconstructor import ReconstructionResult, reconstruct
from .segmenter import (
    SegmentationPreview,
    SegmentationResult,
    part_filenames,
    preview,
    segment,
    segment_or_whole,
    split_parts,
)
from .stats import SourceStats, stats

logger = logging.getLogger(__name__)


@dataclass
class TranslationLoad:
    """Translations of a source; ``error`` is set when stored data was unreadable."""
    store: TranslationStore
    error: Optional[str] = None


@dataclass
class DocumentView:
    """Everything derived from a source's content, rule and translations."""
    source_id: str
    segmentation: SegmentationResult
    reconstruction: ReconstructionResult
    stats: SourceStats
    errors: List[str] = field(default_factory=list)


@dataclass
class BookmarkEntry:
    segment_index: int
    segment_text: str
    name: str
    comment: str


def compute_view(source: Source, load: TranslationLoad) -> DocumentView:
    result = segment_or_whole(source.content, source.rule)
    return DocumentView(
        source_id=source.id,
        segmentation=result,
        reconstruction=reconstruct(result.segments, result.delimiters, load.store),
        stats=stats(source.content, result.segments, load.store),
        errors=[load.error] if load.error else [],
    )


class EditorService:
    """
    Service layer for the translation editor.

    Mutations validate first and then commit every affected key in one
    transaction, so a failure leaves stored and in-memory state untouched.
    """

    def __init__(
        self,
        repository: Optional[SourceRepository] = None,
        runner: Optional[GenerationJobRunner] = None,
        background_threshold_chars: Optional[int] = None,
    ):
        from config.settings import settings

        self.repository = repository or get_repository()
        self.runner = runner or GenerationJobRunner(max_workers=settings.job_workers)
        self.background_threshold_chars = (
            settings.background_threshold_chars
            if background_threshold_chars is None
            else background_threshold_chars
        )
        self._views: Dict[str, DocumentView] = {}
        self._views_lock = threading.Lock()

    # ==================== SOURCES ====================

    def create_source(
        self,
        filename: str,
        content: str = "",
        segmentation_rule: Optional[str] = None,
        compression: Optional[bool] = None,
        compression_level: Optional[int] = None,
    ) -> Source:
        """Create a source; an invalid rule is rejected before anything is stored."""
        from config.settings import settings

        if not filename or not filename.strip():
            raise ValidationError("Filename must not be empty")
        if segmentation_rule is None and settings.default_segmentation_rule != DEFAULT_RULE:
            segmentation_rule = settings.default_segmentation_rule
        result = segment(content, segmentation_rule)

        source = Source(
            id=str(uuid.uuid4()),
            filename=filename.strip(),
            content=content,
            segmentation_rule=segmentation_rule,
            compression=settings.default_compression if compression is None else compression,
            compression_level=(
                settings.default_compression_level if compression_level is None else compression_level
            ),
        )
        items = self.repository.encode_items(source, {delimiters_key(source.id): result.delimiters})
        self.repository.commit(source=source, items=items)
        logger.info(f"Created source {source.filename} ({source.id})")
        return source

    def get_source(self, source_id: str) -> Source:
        return self.repository.require_source(source_id)

    def list_sources(self) -> List[Source]:
        return self.repository.list_sources()

    def delete_source(self, source_id: str) -> None:
        self.repository.delete_source(source_id)
        self._invalidate(source_id)

    # ==================== SEGMENTATION ====================

    def get_segmentation(self, source_id: str) -> SegmentationResult:
        source = self.get_source(source_id)
        return segment_or_whole(source.content, source.rule)

    def get_segments(self, source_id: str) -> List[str]:
        """Translatable segments of the source."""
        return self.get_segmentation(source_id).translatable_segments()

    def preview_segmentation(self, content: str, rule: Optional[str]) -> SegmentationPreview:
        return preview(content, rule)

    def update_content(self, source_id: str, content: str) -> Source:
        """Replace the source text, keeping translations of unchanged segments."""
        source = self.get_source(source_id)
        return self._resegment(source, source.model_copy(update={"content": content}))

    def change_segmentation_rule(self, source_id: str, rule: Optional[str]) -> Source:
        """
        Switch to a new rule, keeping translations of identical segments.

        Raises:
            InvalidSegmentationRuleError: prior rule and translations are kept
        """
        source = self.get_source(source_id)
        return self._resegment(source, source.model_copy(update={"segmentation_rule": rule}))

    def _resegment(self, old: Source, new: Source) -> Source:
        result = segment(new.content, new.segmentation_rule)
        load = self.load_translations(old.id)
        report = reconcile_with_report(result.translatable_segments(), load.store.records)
        store = TranslationStore(title=load.store.title, records=report.records)

        items = self.repository.encode_items(new, {
            delimiters_key(new.id): result.delimiters,
            translations_key(new.id): store.to_storage_map(),
        })
        self.repository.commit(source=new, items=items)
        self._invalidate(new.id)
        logger.info(
            f"Resegmented {new.filename}: {len(result.translatable_segments())} segments, "
            f"kept {len(report.kept)} translations, dropped {len(report.dropped)}"
        )
        return new

    # ==================== TRANSLATIONS ====================

    def load_translations(self, source_id: str) -> TranslationLoad:
        """Read translations; unreadable data degrades to an empty store."""
        source = self.get_source(source_id)
        try:
            data = self.repository.get_translations(source)
        except DataError as e:
            logger.error(str(e))
            return TranslationLoad(store=TranslationStore(), error=str(e))
        return TranslationLoad(store=TranslationStore.from_storage_map(data))

    def _save_store(self, source: Source, store: TranslationStore) -> None:
        items = self.repository.encode_items(source, {translations_key(source.id): store.to_storage_map()})
        self.repository.commit(items=items)
        self._invalidate(source.id)

    def save_translation(self, source_id: str, segment_text: str, record: TranslationRecord) -> TranslationRecord:
        """
        Create or replace the record of a segment.

        Raises:
            ValidationError: if the text is not a segment of the source
        """
        key = segment_text.strip()
        if key not in self.get_segments(source_id):
            raise ValidationError(f"Not a segment of this source: {key[:50]!r}")
        source = self.get_source(source_id)
        store = self.load_translations(source_id).store
        records = dict(store.records)
        records[key] = record
        self._save_store(source, store.model_copy(update={"records": records}))
        logger.info(f"Saved translation for segment {key[:30]!r} in {source.filename}")
        return record

    def delete_translation(self, source_id: str, segment_text: str) -> bool:
        source = self.get_source(source_id)
        store = self.load_translations(source_id).store
        key = segment_text.strip()
        if key not in store.records:
            return False
        records = {k: v for k, v in store.records.items() if k != key}
        self._save_store(source, store.model_copy(update={"records": records}))
        return True

    def set_title_translation(self, source_id: str, title: Optional[str]) -> TranslationStore:
        source = self.get_source(source_id)
        store = self.load_translations(source_id).store
        store = store.model_copy(update={"title": title or None})
        self._save_store(source, store)
        return store

    # ==================== OUTPUT ====================

    def render(self, source_id: str) -> ReconstructionResult:
        return self.compute(source_id).reconstruction

    def stats(self, source_id: str) -> SourceStats:
        return self.compute(source_id).stats

    def compute(self, source_id: str) -> DocumentView:
        source = self.get_source(source_id)
        return compute_view(source, self.load_translations(source_id))

    def list_bookmarks(self, source_id: str) -> List[BookmarkEntry]:
        """Bookmarked segments in document order."""
        store = self.load_translations(source_id).store
        entries = []
        for index, text in enumerate(self.get_segments(source_id)):
            record = store.records.get(text)
            if record and record.bookmark:
                entries.append(BookmarkEntry(
                    segment_index=index,
                    segment_text=text,
                    name=record.bookmark.name,
                    comment=record.bookmark.comment,
                ))
        return entries

    # ==================== BACKGROUND VIEWS ====================

    def refresh_view(self, source_id: str, wait: bool = False) -> Optional[DocumentView]:
        """
        Recompute the cached view of a source.

        Small documents are computed inline. Large ones go to the job
        runner; only the newest job for a source may replace the cache.
        Any mutation or inline refresh supersedes jobs still in flight.
        """
        while True:
            seen = self.runner.current_generation(source_id)
            source = self.get_source(source_id)
            load = self.load_translations(source_id)

            if len(source.content) <= self.background_threshold_chars:
                view = compute_view(source, load)
                with self._views_lock:
                    # a mutation since the read means the view is already outdated
                    if self.runner.current_generation(source_id) == seen:
                        self.runner.supersede(source_id)
                        self._views[source_id] = view
                return view

            with self._views_lock:
                if self.runner.current_generation(source_id) != seen:
                    continue
                ticket = self.runner.submit(source_id, compute_view, source, load)
            break

        def _publish(view: DocumentView) -> None:
            with self._views_lock:
                if self.runner.is_current(ticket):
                    self._views[source_id] = view

        self.runner.on_result(ticket, _publish)
        if wait:
            return self.runner.wait(ticket)
        return None

    def get_view(self, source_id: str) -> Optional[DocumentView]:
        with self._views_lock:
            return self._views.get(source_id)

    def _invalidate(self, source_id: str) -> None:
        with self._views_lock:
            self.runner.supersede(source_id)
            self._views.pop(source_id, None)

    # ==================== SOURCE OPERATIONS ====================

    def split_source(self, source_id: str, split_index: int) -> Tuple[Source, Source]:
        """
        Split a source into two new sources before a translatable segment.

        Both parts get the translations of their own segments and a copy of
        the memories. The original source is left as it was.
        """
        source = self.get_source(source_id)
        result = segment(source.content, source.segmentation_rule)
        try:
            content1, content2 = split_parts(result, split_index)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        store = self.load_translations(source_id).store
        try:
            memories = self.repository.get_memories(source)
        except DataError as e:
            logger.error(str(e))
            memories = {}

        name1, name2 = part_filenames(source.filename)
        parts = []
        items = {}
        for filename, content in ((name1, content1), (name2, content2)):
            part = source.model_copy(update={
                "id": str(uuid.uuid4()),
                "filename": filename,
                "content": content,
            })
            part_result = segment(content, part.segmentation_rule)
            part_records = reconcile_with_report(part_result.translatable_segments(), store.records).records
            part_store = TranslationStore(title=store.title, records=part_records)
            items.update(self.repository.encode_items(part, {
                delimiters_key(part.id): part_result.delimiters,
                translations_key(part.id): part_store.to_storage_map(),
                memories_key(part.id): memories,
            }))
            parts.append(part)

        self.repository.commit(sources=parts, items=items)
        logger.info(f"Split {source.filename} into {name1} and {name2}")
        return parts[0], parts[1]

    def set_compression(self, source_id: str, enabled: bool, level: Optional[int] = None) -> Source:
        """Change a source's compression and re-encode its stored keys."""
        source = self.get_source(source_id)
        level = source.compression_level if level is None else level
        if not -1 <= level <= 9:
            raise ValidationError(f"Compression level must be between -1 and 9, got {level}")
        updated = source.model_copy(update={"compression": enabled, "compression_level": level})

        values = {
            translations_key(source.id): self.repository.get_translations(source),
            memories_key(source.id): self.repository.get_memories(source),
            delimiters_key(source.id): self.repository.get_delimiters(source),
        }
        items = self.repository.encode_items(updated, values)
        self.repository.commit(source=updated, items=items)
        logger.info(f"Compression for {source.filename} set to {enabled} (level {updated.compression_level})")
        return updated


# Global instance
_service: Optional[EditorService] = None


def get_editor_service() -> EditorService:
    """Get or create the global service instance."""
    global _service
    if _service is None:
        _service = EditorService()
    return _service
