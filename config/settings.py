#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Segmentation ==========
    default_segmentation_rule: str = "\n"

    # ========== Compression ==========
    # Applied to newly created sources; each source keeps its own flag/level
    default_compression: bool = False
    default_compression_level: int = 1  # -1 (zlib default) or 0..9

    # ========== Storage ==========
    database_url: Optional[str] = None
    database_dir: Path = BASE_DIR / "data"
    database_name: str = "cat_editor"
    storage_quota_bytes: int = 5 * 1024 * 1024  # 0 = unlimited

    # ========== Background jobs ==========
    background_threshold_chars: int = 20000
    job_workers: int = 2

    # ========== Logging ==========
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logs_dir: Path = BASE_DIR / "data" / "logs"
    log_max_size_mb: int = 10
    log_backup_count: int = 3

    # ========== API ==========
    cors_origins: str = ""  # Empty = use default dev origins

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @field_validator("default_compression_level")
    @classmethod
    def _check_compression_level(cls, value: int) -> int:
        if not -1 <= value <= 9:
            raise ValueError("compression level must be between -1 and 9")
        return value

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        for dir_path in [self.database_dir, self.logs_dir]:
            dir_path.mkdir(exist_ok=True, parents=True)

    def get_database_url(self) -> str:
        """SQLAlchemy URL for the editor store."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_dir / (self.database_name + '.db')}"

    def get_cors_origins(self) -> list:
        """Get CORS origins as a list. Falls back to dev defaults if empty."""
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ]


settings = Settings()
