"""
Editor Store Database Models
SQLAlchemy models for sources and their per-key data.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


def translations_key(source_id: str) -> str:
    return f"translations_{source_id}"


def memories_key(source_id: str) -> str:
    return f"memories_{source_id}"


def delimiters_key(source_id: str) -> str:
    return f"delimiters_{source_id}"


def source_keys(source_id: str) -> list:
    return [translations_key(source_id), memories_key(source_id), delimiters_key(source_id)]


class SourceRow(Base):
    """A source document and its segmentation/compression settings."""

    __tablename__ = "sources"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    segmentation_rule: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    compression: Mapped[bool] = mapped_column(Boolean, default=False)
    compression_level: Mapped[int] = mapped_column(Integer, default=1)
    memory_imports: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self):
        return f"<Source {self.filename} ({self.id})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "content": self.content,
            "segmentationRule": self.segmentation_rule,
            "compression": self.compression,
            "compressionLevel": self.compression_level,
            "memoryImports": list(self.memory_imports or []),
        }


class StorageItem(Base):
    """One independently readable/writable value (translations, memories, delimiters)."""

    __tablename__ = "storage_items"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self):
        return f"<StorageItem {self.key} ({len(self.value)} chars)>"


def get_engine(database_url: str):
    """Create SQLAlchemy engine."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, echo=False, connect_args=connect_args)


def create_tables(engine):
    """Create all editor tables."""
    Base.metadata.create_all(engine)
    return engine
