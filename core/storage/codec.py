"""
Storage value codec.

Values are JSON. A source with compression enabled stores them as
zlib-deflated, base64-encoded JSON instead.
"""
import base64
import binascii
import json
import zlib
from typing import Any

from core.exceptions import CompressionError, DataError

MIN_LEVEL = -1  # zlib default
MAX_LEVEL = 9


def compress_text(text: str, level: int = 1) -> str:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"compression level must be between {MIN_LEVEL} and {MAX_LEVEL}")
    return base64.b64encode(zlib.compress(text.encode("utf-8"), level)).decode("ascii")


def decompress_text(raw: str) -> str:
    return zlib.decompress(base64.b64decode(raw, validate=True)).decode("utf-8")


def _looks_like_json(raw: str) -> bool:
    return raw.lstrip()[:1] in ("{", "[", '"')


def encode_value(key: str, value: Any, compression: bool = False, level: int = 1) -> str:
    """
    Serialize a value for storage.

    Raises:
        CompressionError: if the value cannot be serialized or compressed
    """
    try:
        text = json.dumps(value, ensure_ascii=False)
        if not compression:
            return text
        return compress_text(text, level)
    except (TypeError, ValueError, zlib.error) as e:
        raise CompressionError(key, str(e)) from e


def decode_value(key: str, raw: str, compression: bool = False) -> Any:
    """
    Parse a stored value.

    Plain JSON is accepted for compressed sources too, since values may
    predate compression being switched on.

    Raises:
        DataError: if the value cannot be decompressed or parsed
    """
    try:
        if compression and not _looks_like_json(raw):
            raw = decompress_text(raw)
        return json.loads(raw)
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError) as e:
        raise DataError(key, str(e)) from e
