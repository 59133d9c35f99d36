"""
Naming and placement policy for stored media.

Keys look like ``<folder>/<timestamp_ms>-<field_name>.<extension>``.
The timestamp comes from a per-backend MonotonicClock, so two uploads
handled by the same process never share a timestamp. Separate processes
can still collide within the same millisecond.
"""

import threading
import time
from collections.abc import Callable

Clock = Callable[[], int]

SAFE_SEGMENT_CHARS = "._-"
SAFE_FIELD_CHARS = "_-"
DEFAULT_FIELD_NAME = "file"


def _is_safe(char: str, extra: str) -> bool:
    return (char.isascii() and char.isalnum()) or char in extra


def extract_extension(original_name: str) -> str:
    """
    Extract the lowercase extension from a client file name.

    Uses the substring after the last dot, so ``photo.v2.PNG`` gives ``png``.

    Args:
        original_name: Client-supplied file name

    Returns:
        Lowercase extension, or "" if the name has none
    """
    if not original_name or "." not in original_name:
        return ""
    return original_name.rsplit(".", 1)[1].strip().lower()


def sanitize_segment(segment: str) -> str:
    """Keep only ASCII alphanumerics and ``._-`` in a path segment."""
    safe = "".join(c for c in segment if _is_safe(c, SAFE_SEGMENT_CHARS))
    if safe in {".", ".."}:
        return ""
    return safe


def sanitize_field_name(field_name: str) -> str:
    """
    Reduce a field name to ASCII alphanumerics, ``_`` and ``-``.

    Dots are dropped so the field can never add an extension segment.
    """
    safe = "".join(c for c in field_name if _is_safe(c, SAFE_FIELD_CHARS))
    return safe or DEFAULT_FIELD_NAME


def sanitize_folder(folder: str) -> str:
    """
    Normalize a logical folder into a relative, traversal-free path.

    Args:
        folder: Folder such as "public/recipes/images"

    Returns:
        Sanitized folder with empty, "." and ".." segments removed
    """
    parts = (sanitize_segment(part) for part in folder.replace("\\", "/").split("/"))
    return "/".join(part for part in parts if part)


def build_object_name(field_name: str, extension: str, timestamp_ms: int) -> str:
    """
    Build the file name segment of a storage key.

    Args:
        field_name: Logical role of the file (e.g. "picture")
        extension: Lowercase extension without the dot
        timestamp_ms: Millisecond timestamp

    Returns:
        Name in the form ``<timestamp_ms>-<field_name>.<extension>``

    Raises:
        ValueError: If the extension is empty
    """
    extension = "".join(c for c in extension.lower() if _is_safe(c, ""))
    if not extension:
        raise ValueError("Cannot build an object name without an extension")
    field = sanitize_field_name(field_name)
    return f"{timestamp_ms}-{field}.{extension}"


def build_object_key(
    folder: str,
    field_name: str,
    original_name: str,
    timestamp_ms: int,
) -> str:
    """
    Derive the full storage key for an upload.

    Pure function of its inputs: the same arguments always give the same key.

    Args:
        folder: Folder path, may be empty
        field_name: Logical role of the file
        original_name: Client file name (source of the extension)
        timestamp_ms: Millisecond timestamp

    Returns:
        ``<folder>/<name>``, or just ``<name>`` when the folder is empty
    """
    name = build_object_name(field_name, extract_extension(original_name), timestamp_ms)
    folder = sanitize_folder(folder)
    if not folder:
        return name
    return f"{folder}/{name}"


class MonotonicClock:
    """
    Millisecond wall clock that never repeats a value.

    Returns ``max(now_ms, last + 1)`` so concurrent calls within the same
    millisecond still get distinct timestamps.
    """

    def __init__(self, source: Callable[[], float] = time.time):
        self._source = source
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        now_ms = int(self._source() * 1000)
        with self._lock:
            self._last = max(now_ms, self._last + 1)
            return self._last
