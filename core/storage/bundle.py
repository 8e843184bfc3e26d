"""
Source Import/Export Module

A bundle carries one source with everything needed to restore it:

    {"source": {...}, "translations": {...}, "memories": {...}, "delimiters": [...]}

When the source has compression enabled, ``translations`` and ``memories``
are compressed, base64-encoded JSON strings instead of objects.
"""
import json
import logging
import uuid
from typing import Any, Dict, Optional

from core.editor.models import Source, TranslationStore
from core.editor.segmenter import validate_rule
from core.exceptions import DataError, ImportConflictError, ValidationError
from .codec import compress_text, decode_value
from .models import delimiters_key, memories_key, source_keys, translations_key
from .repository import SourceRepository

logger = logging.getLogger(__name__)

CONFLICT_ERROR = "error"
CONFLICT_OVERWRITE = "overwrite"
CONFLICT_RENAME = "rename"


def export_bundle(repo: SourceRepository, source_id: str) -> Dict[str, Any]:
    """
    Export a source as a bundle dict.

    Raises:
        SourceNotFoundError: if the source does not exist
        DataError: if stored data is corrupt
    """
    source = repo.require_source(source_id)
    translations = repo.get_translations(source)
    memories = repo.get_memories(source)
    delimiters = repo.get_delimiters(source)

    if source.compression:
        translations = compress_text(json.dumps(translations, ensure_ascii=False), source.compression_level)
        memories = compress_text(json.dumps(memories, ensure_ascii=False), source.compression_level)

    return {
        "source": source.to_storage(),
        "translations": translations,
        "memories": memories,
        "delimiters": delimiters,
    }


def dumps_bundle(bundle: Dict[str, Any]) -> str:
    return json.dumps(bundle, ensure_ascii=False, indent=2)


def loads_bundle(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise DataError("bundle", str(e)) from e
    if not isinstance(data, dict) or "source" not in data:
        raise ValidationError("Bundle must be an object with a 'source' entry")
    return data


def _unpack_map(key: str, value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        value = decode_value(key, value, compression=True)
    if not isinstance(value, dict):
        raise DataError(key, "expected an object")
    return value


def import_bundle(
    repo: SourceRepository,
    bundle: Dict[str, Any],
    on_conflict: str = CONFLICT_ERROR,
    new_filename: Optional[str] = None,
) -> Source:
    """
    Import a bundle as a source.

    Args:
        repo: Target repository
        bundle: Parsed bundle
        on_conflict: What to do when the filename already exists:
            "error" raises, "overwrite" replaces the existing source,
            "rename" imports under ``new_filename``
        new_filename: Filename for the "rename" strategy

    Returns:
        The imported source

    Raises:
        ImportConflictError: filename collision with "error", or a taken new_filename
        InvalidSegmentationRuleError: if the bundled rule does not compile
        DataError: if the bundle maps cannot be decoded
    """
    try:
        source = Source.model_validate(bundle["source"])
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid source in bundle: {e}") from e
    validate_rule(source.segmentation_rule)

    translations = TranslationStore.from_storage_map(
        _unpack_map("translations", bundle.get("translations"))
    )
    memories = _unpack_map("memories", bundle.get("memories"))
    delimiters = list(bundle.get("delimiters") or [])

    delete_ids = []
    existing = repo.find_by_filename(source.filename)
    if existing is not None:
        if on_conflict == CONFLICT_OVERWRITE:
            delete_ids.append(existing.id)
        elif on_conflict == CONFLICT_RENAME:
            if not new_filename:
                raise ValidationError("A new filename is required to rename the import")
            if repo.find_by_filename(new_filename) is not None:
                raise ImportConflictError(new_filename)
            source = source.model_copy(update={"filename": new_filename})
        else:
            raise ImportConflictError(source.filename)

    if source.id not in delete_ids and repo.get_source(source.id) is not None:
        source = source.model_copy(update={"id": str(uuid.uuid4())})

    items = repo.encode_items(source, {
        translations_key(source.id): translations.to_storage_map(),
        memories_key(source.id): memories,
        delimiters_key(source.id): delimiters,
    })
    deletions = [key for source_id in delete_ids for key in source_keys(source_id)]
    repo.commit(source=source, items=items, deletions=deletions, delete_source_ids=delete_ids)

    logger.info(f"Imported source {source.filename} ({source.id})")
    return source
