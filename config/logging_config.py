"""
Logging setup: console plus a rotating file under ``settings.logs_dir``.
"""
import logging
import logging.handlers
from typing import Optional

from .settings import settings


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Configured logger; handlers are attached once per name."""
    logger = logging.getLogger(name or "cat_editor")
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    formatter = logging.Formatter(settings.log_format)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_file = settings.logs_dir / "cat_editor.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=settings.log_max_size_mb * 1024 * 1024,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
