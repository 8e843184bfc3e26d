"""
Translation Reconciler
Carry translation records across a change of content or segmentation rule.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from .models import TITLE_KEY, TranslationRecord, TranslationStore

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Outcome of a reconciliation, for logging and confirmation dialogs."""
    records: Dict[str, TranslationRecord] = field(default_factory=dict)
    kept: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)


def reconcile_with_report(
    new_segments: Iterable[str],
    old_translations: Mapping[str, Any],
) -> ReconciliationReport:
    """
    Keep only records whose key equals a segment of the new version.

    Matching is exact after trimming; there is no fuzzy matching. Segments
    new to this version start untranslated.
    """
    report = ReconciliationReport()
    for text in new_segments:
        key = text.strip()
        if not key or key in report.records:
            continue
        if key in old_translations:
            report.records[key] = TranslationRecord.coerce(old_translations[key])
            report.kept.append(key)

    report.dropped = [
        key for key in old_translations
        if key != TITLE_KEY and key not in report.records
    ]
    logger.debug(
        f"Reconciled translations: kept {len(report.kept)}, dropped {len(report.dropped)}"
    )
    return report


def reconcile(
    new_segments: Iterable[str],
    old_translations: Mapping[str, Any],
) -> Dict[str, TranslationRecord]:
    return reconcile_with_report(new_segments, old_translations).records


def reconcile_store(new_segments: Iterable[str], store: TranslationStore) -> TranslationStore:
    """Reconcile a store's records; the title translation is always kept."""
    return TranslationStore(
        title=store.title,
        records=reconcile(new_segments, store.records),
    )
