"""
Translation Editor Module
Segment source documents, carry translations across edits and rebuild the
translated document.

Key components:
- segmenter: Split text by a user regex, keeping delimiters
- reconciler: Keep translations of segments that survive an edit
- reconstructor: Assemble the translated document with notes and outline
- stats: Word counts and averages
- jobs: Generation-guarded background computation

EditorService lives in core.editor.service; it is not imported here so the
storage layer can depend on the models without a cycle.
"""

from .models import (
    Bookmark,
    DelimiterAction,
    OutlineLevel,
    SegmentType,
    Source,
    TranslationRecord,
    TranslationStore,
)
from .segmenter import SegmentationResult, segment, preview
from .reconciler import reconcile, reconcile_store
from .reconstructor import ReconstructionResult, reconstruct
from .stats import SourceStats, stats

__all__ = [
    "Bookmark",
    "DelimiterAction",
    "OutlineLevel",
    "SegmentType",
    "Source",
    "TranslationRecord",
    "TranslationStore",
    "SegmentationResult",
    "segment",
    "preview",
    "reconcile",
    "reconcile_store",
    "ReconstructionResult",
    "reconstruct",
    "SourceStats",
    "stats",
]
