"""
Editor Store Repository
Database access layer for sources and their translations, memories and
delimiters.

Each key is independently readable. Writes that touch several keys go
through commit(), which applies them in a single transaction.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.editor.models import Source
from core.exceptions import SourceNotFoundError, StorageError, StorageQuotaError
from .codec import decode_value, encode_value
from .models import (
    SourceRow,
    StorageItem,
    create_tables,
    delimiters_key,
    get_engine,
    memories_key,
    source_keys,
    translations_key,
)

logger = logging.getLogger(__name__)


class SourceRepository:
    """
    Repository for editor store operations.

    Handles source CRUD and key/value reads and writes.
    """

    def __init__(self, database_url: Optional[str] = None, quota_bytes: Optional[int] = None):
        """
        Initialize repository.

        Args:
            database_url: SQLAlchemy URL; defaults to the configured SQLite file
            quota_bytes: Maximum stored bytes; 0 disables the check
        """
        if database_url is None or quota_bytes is None:
            from config.settings import settings
            database_url = database_url or settings.get_database_url()
            quota_bytes = settings.storage_quota_bytes if quota_bytes is None else quota_bytes
        self.database_url = database_url
        self.quota_bytes = quota_bytes
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        """Get or create SQLAlchemy engine."""
        if self._engine is None:
            self._engine = create_tables(get_engine(self.database_url))
        return self._engine

    @property
    def session_factory(self):
        """Get session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.session_factory()

    # ==================== SOURCES ====================

    def get_source(self, source_id: str) -> Optional[Source]:
        with self.get_session() as session:
            row = session.get(SourceRow, source_id)
            return Source.model_validate(row.to_dict()) if row else None

    def require_source(self, source_id: str) -> Source:
        source = self.get_source(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        return source

    def list_sources(self) -> List[Source]:
        with self.get_session() as session:
            rows = session.scalars(select(SourceRow).order_by(SourceRow.created_at)).all()
            return [Source.model_validate(row.to_dict()) for row in rows]

    def find_by_filename(self, filename: str) -> Optional[Source]:
        with self.get_session() as session:
            row = session.scalars(
                select(SourceRow).where(SourceRow.filename == filename)
            ).first()
            return Source.model_validate(row.to_dict()) if row else None

    # ==================== READS ====================

    def get_raw(self, key: str) -> Optional[str]:
        with self.get_session() as session:
            item = session.get(StorageItem, key)
            return item.value if item else None

    def get_value(self, key: str, default: Any, compression: bool = False) -> Any:
        """
        Read and decode one key; a missing key yields ``default``.

        Raises:
            DataError: if the stored value is corrupt
        """
        raw = self.get_raw(key)
        if raw is None or raw == "":
            return default
        return decode_value(key, raw, compression)

    def get_translations(self, source: Source) -> Dict[str, Any]:
        return self.get_value(translations_key(source.id), {}, source.compression)

    def get_memories(self, source: Source) -> Dict[str, str]:
        return self.get_value(memories_key(source.id), {}, source.compression)

    def get_delimiters(self, source: Source) -> List[str]:
        return self.get_value(delimiters_key(source.id), [], source.compression)

    # ==================== WRITES ====================

    def encode_items(self, source: Source, values: Dict[str, Any]) -> Dict[str, str]:
        """
        Encode values with the source's compression settings.

        Raises:
            CompressionError: if any value fails; nothing has been written yet
        """
        return {
            key: encode_value(key, value, source.compression, source.compression_level)
            for key, value in values.items()
        }

    def commit(
        self,
        source: Optional[Source] = None,
        items: Optional[Dict[str, str]] = None,
        deletions: Iterable[str] = (),
        delete_source_ids: Iterable[str] = (),
        sources: Iterable[Source] = (),
    ) -> None:
        """
        Apply source, item and deletion changes in one transaction.

        Args:
            source: Source to insert or update
            items: Already encoded values by key
            deletions: Keys to remove
            delete_source_ids: Source rows to remove
            sources: Further sources to insert or update

        Raises:
            StorageQuotaError: if the write would exceed the quota
            StorageError: if the database rejects the write
        """
        items = items or {}
        deletions = list(deletions)
        delete_source_ids = list(delete_source_ids)
        upserts = ([source] if source is not None else []) + list(sources)

        session = self.get_session()
        try:
            for source_id in delete_source_ids:
                row = session.get(SourceRow, source_id)
                if row is not None:
                    session.delete(row)
            for key in deletions:
                item = session.get(StorageItem, key)
                if item is not None:
                    session.delete(item)
            session.flush()

            for upsert in upserts:
                self._upsert_source(session, upsert)

            for key, value in items.items():
                item = session.get(StorageItem, key)
                if item is None:
                    session.add(StorageItem(key=key, value=value))
                else:
                    item.value = value

            session.flush()
            self._check_quota(session)
            session.commit()
        except StorageQuotaError:
            session.rollback()
            raise
        except OperationalError as e:
            session.rollback()
            if "full" in str(e).lower():
                raise StorageQuotaError(
                    "The store is full. Please free some space or export and delete some sources."
                ) from e
            raise StorageError(f"An unexpected error occurred while saving data: {e}") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"An unexpected error occurred while saving data: {e}") from e
        finally:
            session.close()

        logger.debug(
            f"Committed {len(items)} keys, {len(deletions)} deletions"
            + (f" for {len(upserts)} sources" if upserts else "")
        )

    def put(self, source: Source, key: str, value: Any) -> None:
        """Encode and write a single key."""
        self.commit(items=self.encode_items(source, {key: value}))

    def save_source(self, source: Source) -> None:
        self.commit(source=source)

    def delete_source(self, source_id: str) -> None:
        """Remove a source row and all of its keys."""
        self.require_source(source_id)
        self.commit(deletions=source_keys(source_id), delete_source_ids=[source_id])
        logger.info(f"Deleted source {source_id}")

    def stored_bytes(self) -> int:
        with self.get_session() as session:
            return self._stored_bytes(session)

    # ==================== INTERNALS ====================

    @staticmethod
    def _upsert_source(session: Session, source: Source) -> None:
        row = session.get(SourceRow, source.id)
        if row is None:
            row = SourceRow(id=source.id)
            session.add(row)
        row.filename = source.filename
        row.content = source.content
        row.segmentation_rule = source.segmentation_rule
        row.compression = source.compression
        row.compression_level = source.compression_level
        row.memory_imports = [ref.model_dump() for ref in source.memory_imports]

    @staticmethod
    def _stored_bytes(session: Session) -> int:
        items = session.scalar(select(func.coalesce(func.sum(func.length(StorageItem.value)), 0)))
        contents = session.scalar(select(func.coalesce(func.sum(func.length(SourceRow.content)), 0)))
        return int(items or 0) + int(contents or 0)

    def _check_quota(self, session: Session) -> None:
        if not self.quota_bytes:
            return
        used = self._stored_bytes(session)
        if used > self.quota_bytes:
            logger.warning(f"Storage quota exceeded: {used} > {self.quota_bytes} bytes")
            raise StorageQuotaError(
                "Storage is full. Please clear some space or export and delete some sources to continue."
            )


# Global instance
_repository: Optional[SourceRepository] = None


def get_repository() -> SourceRepository:
    """Get or create the global repository instance."""
    global _repository
    if _repository is None:
        _repository = SourceRepository()
    return _repository
