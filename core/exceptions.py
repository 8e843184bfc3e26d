"""
Editor engine exceptions.

Every error carries a short ``title`` for display next to the message, so
callers can surface it without knowing the concrete type.
"""
from typing import Optional


class EngineError(Exception):
    """Base exception for the editor engine"""
    title = "Error"

    def __init__(self, message: str, title: Optional[str] = None):
        if title:
            self.title = title
        self.message = message
        super().__init__(message)


class ValidationError(EngineError):
    """Input rejected before any state was touched"""
    title = "Validation Error"


class InvalidSegmentationRuleError(ValidationError):
    """Segmentation rule is not a valid regular expression"""
    title = "Invalid Segmentation Rule"

    def __init__(self, rule: str, reason: str):
        self.rule = rule
        self.reason = reason
        super().__init__(f"Invalid segmentation rule {rule!r}: {reason}")


class DataError(EngineError):
    """Stored value could not be decompressed or parsed"""
    title = "Decompression Error"

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(
            f"Failed to read data for key {key}: {reason}. The data may be corrupt."
        )


class CompressionError(EngineError):
    """Value could not be compressed for saving"""
    title = "Compression Error"

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Failed to save data for key {key}: {reason}")


class StorageError(EngineError):
    """Write to the store failed"""
    title = "Storage Error"


class StorageQuotaError(StorageError):
    """Write would exceed the configured storage quota"""
    title = "Storage Quota Exceeded"


class SourceNotFoundError(EngineError):
    """No source with the requested id"""
    title = "Source Not Found"

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(f"Source not found: {source_id}")


class ImportConflictError(EngineError):
    """Imported source filename collides with an existing source"""
    title = "Import Conflict"

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f'A source with the filename "{filename}" already exists.')


class StaleJobError(EngineError):
    """Background result was superseded by a newer request"""
    title = "Stale Result"
