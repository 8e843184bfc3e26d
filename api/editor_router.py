"""
Editor API Router
FastAPI endpoints for sources, segmentation, translations and output.

Engine errors propagate to the handler in api.main, which maps them to
status codes.
"""
import logging
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.editor.service import EditorService, get_editor_service
from core.editor.models import Source, TranslationRecord
from core.editor.schemas import (
    BookmarkResponse,
    CompressionUpdate,
    ContentUpdate,
    ImportRequest,
    PreviewRequest,
    PreviewResponse,
    RenderResponse,
    SegmentationUpdate,
    SegmentItem,
    SegmentListResponse,
    SourceCreate,
    SourceListResponse,
    SourceResponse,
    SourceSummary,
    SplitRequest,
    SplitResponse,
    TitleUpdate,
    TranslationDelete,
    TranslationUpdate,
)
from core.editor.stats import SourceStats
from core.storage.bundle import export_bundle, import_bundle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sources", tags=["Editor"])


def _source_response(source: Source) -> SourceResponse:
    return SourceResponse.model_validate(source.model_dump())


# =============================================================================
# SOURCES
# =============================================================================

@router.post("/", response_model=SourceResponse, status_code=201)
async def create_source(data: SourceCreate, service: EditorService = Depends(get_editor_service)):
    """
    Create a new source.

    - **filename**: Display name, also used for conflict checks on import
    - **content**: Raw source text
    - **segmentation_rule**: Regular expression; defaults to a newline
    """
    source = service.create_source(
        filename=data.filename,
        content=data.content,
        segmentation_rule=data.segmentation_rule,
        compression=data.compression,
        compression_level=data.compression_level,
    )
    return _source_response(source)


@router.get("/", response_model=SourceListResponse)
async def list_sources(service: EditorService = Depends(get_editor_service)):
    sources = service.list_sources()
    return SourceListResponse(
        sources=[SourceSummary(id=s.id, filename=s.filename, compression=s.compression) for s in sources],
        total=len(sources),
    )


@router.post("/segmentation/preview", response_model=PreviewResponse)
async def preview_segmentation(data: PreviewRequest, service: EditorService = Depends(get_editor_service)):
    """Show how a rule would split text without changing any source."""
    result = service.preview_segmentation(data.content, data.rule)
    return PreviewResponse.model_validate(asdict(result))


@router.post("/import", response_model=SourceResponse, status_code=201)
async def import_source(data: ImportRequest, service: EditorService = Depends(get_editor_service)):
    """
    Import a source bundle.

    - **on_conflict**: "error", "overwrite" or "rename" when the filename exists
    - **new_filename**: Required for "rename"
    """
    source = import_bundle(
        service.repository,
        data.bundle,
        on_conflict=data.on_conflict,
        new_filename=data.new_filename,
    )
    return _source_response(source)


@router.get("/{source_id}", response_model=SourceResponse)
async def get_source(source_id: str, service: EditorService = Depends(get_editor_service)):
    return _source_response(service.get_source(source_id))


@router.delete("/{source_id}")
async def delete_source(source_id: str, service: EditorService = Depends(get_editor_service)):
    """Delete a source with its translations, memories and delimiters."""
    service.delete_source(source_id)
    return {"status": "deleted", "source_id": source_id}


@router.get("/{source_id}/export")
async def export_source(source_id: str, service: EditorService = Depends(get_editor_service)):
    source = service.get_source(source_id)
    bundle = export_bundle(service.repository, source_id)
    return JSONResponse(
        content=bundle,
        headers={"Content-Disposition": f'attachment; filename="{source.filename}.json"'},
    )


# =============================================================================
# SEGMENTATION
# =============================================================================

@router.put("/{source_id}/content", response_model=SourceResponse)
async def update_content(
    source_id: str,
    data: ContentUpdate,
    service: EditorService = Depends(get_editor_service),
):
    """Replace the source text; translations of unchanged segments are kept."""
    return _source_response(service.update_content(source_id, data.content))


@router.put("/{source_id}/segmentation", response_model=SourceResponse)
async def change_segmentation(
    source_id: str,
    data: SegmentationUpdate,
    service: EditorService = Depends(get_editor_service),
):
    """Switch the segmentation rule. An invalid rule leaves everything unchanged."""
    return _source_response(service.change_segmentation_rule(source_id, data.rule))


@router.get("/{source_id}/segments", response_model=SegmentListResponse)
async def get_segments(source_id: str, service: EditorService = Depends(get_editor_service)):
    segments = service.get_segments(source_id)
    load = service.load_translations(source_id)
    return SegmentListResponse(
        segments=[
            SegmentItem(index=i, text=text, translation=load.store.records.get(text))
            for i, text in enumerate(segments)
        ],
        total=len(segments),
        title=load.store.title,
        error=load.error,
    )


# =============================================================================
# TRANSLATIONS
# =============================================================================

@router.put("/{source_id}/translations", response_model=TranslationRecord)
async def save_translation(
    source_id: str,
    data: TranslationUpdate,
    service: EditorService = Depends(get_editor_service),
):
    return service.save_translation(source_id, data.segment, data.record)


@router.delete("/{source_id}/translations")
async def delete_translation(
    source_id: str,
    data: TranslationDelete,
    service: EditorService = Depends(get_editor_service),
):
    deleted = service.delete_translation(source_id, data.segment)
    return {"status": "deleted" if deleted else "not_found"}


@router.put("/{source_id}/title")
async def set_title(source_id: str, data: TitleUpdate, service: EditorService = Depends(get_editor_service)):
    store = service.set_title_translation(source_id, data.title)
    return {"title": store.title}


# =============================================================================
# OUTPUT
# =============================================================================

@router.get("/{source_id}/render", response_model=RenderResponse)
async def render(source_id: str, service: EditorService = Depends(get_editor_service)):
    """Reconstructed translated document with footnotes and outline."""
    return RenderResponse.model_validate(asdict(service.render(source_id)))


@router.get("/{source_id}/stats", response_model=SourceStats)
async def get_stats(source_id: str, service: EditorService = Depends(get_editor_service)):
    return service.stats(source_id)


@router.get("/{source_id}/bookmarks", response_model=List[BookmarkResponse])
async def list_bookmarks(source_id: str, service: EditorService = Depends(get_editor_service)):
    return [BookmarkResponse.model_validate(asdict(b)) for b in service.list_bookmarks(source_id)]


# =============================================================================
# SOURCE OPERATIONS
# =============================================================================

@router.post("/{source_id}/split", response_model=SplitResponse, status_code=201)
async def split_source(source_id: str, data: SplitRequest, service: EditorService = Depends(get_editor_service)):
    """Split into two new sources before the translatable segment at ``index``."""
    first, second = service.split_source(source_id, data.index)
    return SplitResponse(parts=[_source_response(first), _source_response(second)])


@router.put("/{source_id}/compression", response_model=SourceResponse)
async def set_compression(
    source_id: str,
    data: CompressionUpdate,
    service: EditorService = Depends(get_editor_service),
):
    return _source_response(service.set_compression(source_id, data.enabled, data.level))
