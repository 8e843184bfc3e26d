"""
Editor Pydantic Schemas
API validation schemas for sources, translations and output.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ImportedMemoryRef, TranslationRecord


# ==================== SOURCE SCHEMAS ====================

class SourceCreate(BaseModel):
    """Schema for creating a new source."""
    filename: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    segmentation_rule: Optional[str] = None
    compression: Optional[bool] = None
    compression_level: Optional[int] = Field(None, ge=-1, le=9)


class SourceResponse(BaseModel):
    """Schema for source API response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    content: str
    segmentation_rule: Optional[str] = None
    compression: bool
    compression_level: int
    memory_imports: List[ImportedMemoryRef] = []


class SourceSummary(BaseModel):
    id: str
    filename: str
    compression: bool


class SourceListResponse(BaseModel):
    """Schema for list of sources."""
    sources: List[SourceSummary]
    total: int


class ContentUpdate(BaseModel):
    content: str


class SegmentationUpdate(BaseModel):
    rule: Optional[str] = None


# ==================== SEGMENTATION ====================

class PreviewRequest(BaseModel):
    content: str
    rule: Optional[str] = None


class PreviewSpanResponse(BaseModel):
    index: int
    text: str
    delimiter: str


class PreviewResponse(BaseModel):
    """How a rule would split content."""
    rule: str
    spans: List[PreviewSpanResponse]
    segment_count: int
    translatable_count: int


class SegmentItem(BaseModel):
    """A translatable segment with its record, if any."""
    index: int
    text: str
    translation: Optional[TranslationRecord] = None


class SegmentListResponse(BaseModel):
    segments: List[SegmentItem]
    total: int
    title: Optional[str] = None
    error: Optional[str] = None


# ==================== TRANSLATIONS ====================

class TranslationUpdate(BaseModel):
    """Create or replace the record of one segment."""
    segment: str = Field(..., min_length=1)
    record: TranslationRecord


class TranslationDelete(BaseModel):
    segment: str = Field(..., min_length=1)


class TitleUpdate(BaseModel):
    title: Optional[str] = None


# ==================== OUTPUT ====================

class OutlineEntryResponse(BaseModel):
    level: int
    text: str
    segment_index: int


class RenderResponse(BaseModel):
    """The reconstructed document."""
    text: str
    footnotes: List[str]
    outline: List[OutlineEntryResponse]


class BookmarkResponse(BaseModel):
    segment_index: int
    segment_text: str
    name: str
    comment: str


# ==================== SOURCE OPERATIONS ====================

class SplitRequest(BaseModel):
    """Split before the translatable segment at ``index``."""
    index: int = Field(..., ge=1)


class SplitResponse(BaseModel):
    parts: List[SourceResponse]


class CompressionUpdate(BaseModel):
    enabled: bool
    level: Optional[int] = Field(None, ge=-1, le=9)


class ImportRequest(BaseModel):
    """Import a bundle produced by the export endpoint."""
    bundle: Dict[str, Any]
    on_conflict: str = Field(default="error", pattern="^(error|overwrite|rename)$")
    new_filename: Optional[str] = None
