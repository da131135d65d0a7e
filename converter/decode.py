"""
Uploaded file bytes -> text.

Encoding is detected best-effort via charset-normalizer; a UTF-8 BOM is
dropped so it does not end up in the first CSV header.
"""

from __future__ import annotations

from typing import Tuple

from charset_normalizer import from_bytes

from . import rules
from .logger import get_logger

log = get_logger(__name__)

_UTF8_NAMES = ("utf_8", "utf8")


def decode_upload(raw: bytes) -> Tuple[str, str]:
    """
    Decode upload bytes, returning (text, encoding_used).

    Raises UnicodeDecodeError when neither the detected encoding nor UTF-8
    can decode the bytes.
    """
    if not raw:
        return "", rules.UPLOAD_ENCODING_FALLBACK

    match = from_bytes(raw).best()
    encoding = match.encoding if match is not None else rules.UPLOAD_ENCODING_FALLBACK

    if raw.startswith(b"\xef\xbb\xbf") and encoding.lower().replace("-", "_") in _UTF8_NAMES:
        encoding = "utf-8-sig"

    try:
        return raw.decode(encoding), encoding
    except (UnicodeDecodeError, LookupError):
        log.warning("decode with detected %s failed, retrying as utf-8", encoding)

    return raw.decode("utf-8-sig"), "utf-8-sig"
