"""
Editor Data Models
Per-source translation records and source metadata.
"""
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RULE = "\n"

# Key holding the title translation in the persisted flat map
TITLE_KEY = "__title__"


# ==================== ENUMS ====================

class SegmentType(str, Enum):
    BODY = "Body"
    HEADING = "Heading"
    SKIP = "Skip"


class OutlineLevel(str, Enum):
    SKIP = "Skip"
    LEVEL2 = "Level2"
    LEVEL3 = "Level3"
    LEVEL4 = "Level4"
    LEVEL5 = "Level5"

    @property
    def depth(self) -> Optional[int]:
        if self is OutlineLevel.SKIP:
            return None
        return int(self.value[-1])


class DelimiterAction(str, Enum):
    SKIP_PRECEDING = "SkipPreceding"
    SKIP_SUCCEEDING = "SkipSucceeding"
    SKIP_BOTH = "SkipBoth"
    KEEP_BOTH = "KeepBoth"

    @property
    def drops_preceding(self) -> bool:
        return self in (DelimiterAction.SKIP_PRECEDING, DelimiterAction.SKIP_BOTH)

    @property
    def drops_succeeding(self) -> bool:
        return self in (DelimiterAction.SKIP_SUCCEEDING, DelimiterAction.SKIP_BOTH)


# ==================== RECORDS ====================

class Bookmark(BaseModel):
    name: str
    comment: str = ""


class TranslationRecord(BaseModel):
    """
    Translation and editing metadata for one segment.

    ``outline_level`` only matters for headings and ``delimiter_action``
    only for skipped segments; both are stored regardless.
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    note: Optional[str] = None
    bookmark: Optional[Bookmark] = None
    grammar_rule: Optional[str] = Field(default=None, alias="grammarRule")
    segment_type: SegmentType = Field(default=SegmentType.BODY, alias="segmentType")
    outline_level: OutlineLevel = Field(default=OutlineLevel.SKIP, alias="outlineLevel")
    delimiter_action: DelimiterAction = Field(
        default=DelimiterAction.KEEP_BOTH, alias="delimiterAction"
    )

    @classmethod
    def coerce(cls, value: Any) -> "TranslationRecord":
        """Build a record from stored data; bare strings are legacy records."""
        if isinstance(value, TranslationRecord):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(text=value)
        return cls.model_validate(value)

    @property
    def is_skip(self) -> bool:
        return self.segment_type == SegmentType.SKIP

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TranslationStore(BaseModel):
    """Title translation plus the segment-text -> record mapping of one source."""
    title: Optional[str] = None
    records: Dict[str, TranslationRecord] = Field(default_factory=dict)

    @classmethod
    def from_storage_map(cls, data: Optional[Mapping[str, Any]]) -> "TranslationStore":
        """Parse the persisted flat map, pulling the title out of its reserved key."""
        if not data:
            return cls()
        title = data.get(TITLE_KEY)
        if isinstance(title, dict):
            title = title.get("text")
        records = {
            key: TranslationRecord.coerce(value)
            for key, value in data.items()
            if key != TITLE_KEY
        }
        return cls(title=title or None, records=records)

    def to_storage_map(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {key: rec.to_storage() for key, rec in self.records.items()}
        if self.title:
            data[TITLE_KEY] = self.title
        return data

    def get(self, segment_text: str) -> Optional[TranslationRecord]:
        return self.records.get(segment_text.strip())


# ==================== SOURCES ====================

class ImportedMemoryRef(BaseModel):
    id: str
    filename: str


class Source(BaseModel):
    """A source document; ``content`` is the raw untranslated text."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    filename: str
    content: str = ""
    segmentation_rule: Optional[str] = Field(default=None, alias="segmentationRule")
    compression: bool = False
    compression_level: int = Field(default=1, ge=-1, le=9, alias="compressionLevel")
    memory_imports: List[ImportedMemoryRef] = Field(
        default_factory=list, alias="memoryImports"
    )

    @property
    def rule(self) -> str:
        return self.segmentation_rule or DEFAULT_RULE

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
