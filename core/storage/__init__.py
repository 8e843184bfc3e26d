"""
Editor Store

Persistence for sources and their translations, memories and delimiters.

Key components:
- SourceRepository: source rows and key/value items, atomic multi-key commits
- codec: JSON with optional zlib/base64 compression
- bundle: single-source import/export
"""

from .repository import SourceRepository, get_repository
from .codec import encode_value, decode_value
from .bundle import export_bundle, import_bundle, dumps_bundle, loads_bundle
from .models import translations_key, memories_key, delimiters_key

__all__ = [
    "SourceRepository",
    "get_repository",
    "encode_value",
    "decode_value",
    "export_bundle",
    "import_bundle",
    "dumps_bundle",
    "loads_bundle",
    "translations_key",
    "memories_key",
    "delimiters_key",
]
