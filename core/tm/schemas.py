"""
Translation Memory Pydantic Schemas
API validation schemas for memory operations.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ==================== MEMORY SCHEMAS ====================

class MemoryCreate(BaseModel):
    """Schema for adding a primary memory."""
    source_text: str = Field(..., min_length=1)
    target: str


class AlternativeCreate(BaseModel):
    """Schema for adding an alternate spelling of a primary memory."""
    source_text: str = Field(..., min_length=1)
    primary: str = Field(..., min_length=1)


class MemoryDelete(BaseModel):
    source_text: str = Field(..., min_length=1)


class MemoryMapResponse(BaseModel):
    """Raw local memories."""
    memories: Dict[str, str]
    total: int


class ImportsUpdate(BaseModel):
    """Source IDs to import memories from, highest priority first."""
    source_ids: List[str] = []


class ImportRef(BaseModel):
    id: str
    filename: str


class ImportsResponse(BaseModel):
    imports: List[ImportRef]


# ==================== RESOLUTION ====================

class DisplayableMemoryResponse(BaseModel):
    """A memory used by at least one segment."""
    source_text: str
    target: str
    is_local: bool
    origin_id: Optional[str] = None
    origin_filename: Optional[str] = None
    alternatives: List[str]
    usage: List[int]  # Segment indices, each listed once


class ResolutionResponse(BaseModel):
    memories: List[DisplayableMemoryResponse]
    missing_imports: List[ImportRef]
    errors: List[str]


class SegmentLookupRequest(BaseModel):
    segment: str


class SegmentHitResponse(BaseModel):
    number: int
    source_text: str
    target: str
    is_alternative: bool
    position: int


class SegmentLookupResponse(BaseModel):
    hits: List[SegmentHitResponse]
