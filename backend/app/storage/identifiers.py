"""
Slug and object key generation for new uploads.

Slugs are the public part of a share link; object keys are where the
bytes live in the bucket. Both are generated without coordination, so
uniqueness comes from a millisecond clock plus random components.
"""
import base64
import re
import secrets
import time
import uuid
from typing import Tuple

OBJECT_KEY_PREFIX = "uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with an underscore."""
    return _UNSAFE_CHARS.sub("_", name)


def split_extension(filename: str) -> Tuple[str, str]:
    """
    Split a filename into (base, extension).

    The extension is whatever follows the last dot, unless that dot is the
    first character (".bashrc" has no extension).
    """
    dot = filename.rfind(".")
    if dot <= 0:
        return filename, ""
    return filename[:dot], filename[dot + 1:]


def generate_slug(timestamp_ms: int) -> str:
    """
    Build a URL-safe slug: base36 clock, a dash, then 128 random bits
    in unpadded base64url.
    """
    token = base64.urlsafe_b64encode(secrets.token_bytes(16)).rstrip(b"=").decode("ascii")
    return f"{_to_base36(timestamp_ms)}-{token}"


def generate_object_key(filename: str, timestamp_ms: int) -> str:
    """
    Generate a unique object key for the upload.

    Pattern: uploads/{timestamp_ms}/{uuid}/{sanitized_name}[.{ext}]
    """
    base, extension = split_extension(filename)
    safe_base = sanitize_name(base) or "file"
    safe_extension = sanitize_name(extension)

    name = f"{safe_base}.{safe_extension}" if safe_extension else safe_base
    return f"{OBJECT_KEY_PREFIX}/{timestamp_ms}/{uuid.uuid4().hex}/{name}"


def new_upload_identifiers(filename: str) -> Tuple[str, str]:
    """
    Create the (slug, object_key) pair for a new upload.

    The slug never contains any part of the filename.
    """
    timestamp_ms = time.time_ns() // 1_000_000
    return generate_slug(timestamp_ms), generate_object_key(filename, timestamp_ms)
