"""
Translation Memory API Router
FastAPI endpoints for per-source memories.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from core.tm.service import MemoryService, get_memory_service
from core.tm.schemas import (
    AlternativeCreate,
    DisplayableMemoryResponse,
    ImportRef,
    ImportsResponse,
    ImportsUpdate,
    MemoryCreate,
    MemoryDelete,
    MemoryMapResponse,
    ResolutionResponse,
    SegmentHitResponse,
    SegmentLookupRequest,
    SegmentLookupResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sources/{source_id}/memories", tags=["Translation Memory"])


# =============================================================================
# LOCAL MEMORIES
# =============================================================================

@router.get("/", response_model=MemoryMapResponse)
async def list_memories(source_id: str, service: MemoryService = Depends(get_memory_service)):
    """Raw local memories, alternatives included as ``@<primary>`` values."""
    memories = service.load_memories(source_id)
    return MemoryMapResponse(memories=memories, total=len(memories))


@router.post("/", response_model=MemoryMapResponse, status_code=201)
async def add_memory(
    source_id: str,
    data: MemoryCreate,
    service: MemoryService = Depends(get_memory_service),
):
    """
    Add or replace a memory.

    - **source_text**: Text to look for in segments
    - **target**: Its translation
    """
    memories = service.add_memory(source_id, data.source_text, data.target)
    return MemoryMapResponse(memories=memories, total=len(memories))


@router.post("/alternatives", response_model=MemoryMapResponse, status_code=201)
async def add_alternative(
    source_id: str,
    data: AlternativeCreate,
    service: MemoryService = Depends(get_memory_service),
):
    """Record another spelling of an existing primary memory."""
    memories = service.add_alternative(source_id, data.source_text, data.primary)
    return MemoryMapResponse(memories=memories, total=len(memories))


@router.delete("/")
async def delete_memory(
    source_id: str,
    data: MemoryDelete,
    service: MemoryService = Depends(get_memory_service),
):
    if not service.delete_memory(source_id, data.source_text):
        raise HTTPException(status_code=404, detail="Memory not found")
    return {"status": "deleted"}


# =============================================================================
# IMPORTS
# =============================================================================

@router.put("/imports", response_model=ImportsResponse)
async def set_imports(
    source_id: str,
    data: ImportsUpdate,
    service: MemoryService = Depends(get_memory_service),
):
    """Import memories of other sources; earlier sources win on duplicate keys."""
    source = service.set_imports(source_id, data.source_ids)
    return ImportsResponse(
        imports=[ImportRef(id=ref.id, filename=ref.filename) for ref in source.memory_imports]
    )


# =============================================================================
# RESOLUTION
# =============================================================================

@router.get("/resolved", response_model=ResolutionResponse)
async def resolve_memories(source_id: str, service: MemoryService = Depends(get_memory_service)):
    """Memories used by at least one current segment."""
    resolution = service.resolve(source_id)
    return ResolutionResponse(
        memories=[
            DisplayableMemoryResponse(
                source_text=m.source_text,
                target=m.target,
                is_local=m.is_local,
                origin_id=m.origin_id,
                origin_filename=m.origin_filename,
                alternatives=m.alternatives,
                usage=[use.index for use in m.display_usage()],
            )
            for m in resolution.records
        ],
        missing_imports=[ImportRef(id=ref.id, filename=ref.filename) for ref in resolution.missing_imports],
        errors=resolution.errors,
    )


@router.post("/lookup", response_model=SegmentLookupResponse)
async def lookup_segment(
    source_id: str,
    data: SegmentLookupRequest,
    service: MemoryService = Depends(get_memory_service),
):
    """Numbered memory hits inside one segment."""
    hits = service.lookup_segment(source_id, data.segment)
    return SegmentLookupResponse(
        hits=[
            SegmentHitResponse(
                number=h.number,
                source_text=h.source_text,
                target=h.target,
                is_alternative=h.is_alternative,
                position=h.position,
            )
            for h in hits
        ]
    )
