# goes_browser/utils/path_codec.py
"""
Path Codec

Reversible mapping between source-relative image paths and cache keys.

A cache key is the percent-encoded UTF-8 form of the relative path: every
byte outside ``A-Z a-z 0-9 - _ . ~`` becomes ``%XX``. Path separators, ``%``,
spaces, control characters and non-ASCII text are therefore all encoded and
the key is a single safe filesystem entry name. A leading ``.`` is encoded as
well so keys never look like hidden files (the renderer's temp files) and
never equal ``.`` or ``..``. Keys are capped at MAX_CACHE_KEY_LENGTH so both
the cache entry and its temp file fit within NAME_MAX.
"""

import re
from urllib.parse import quote, unquote

from ..constants import MAX_CACHE_KEY_LENGTH, THUMBNAIL_FILE_EXTENSION
from ..exceptions import InvalidPathError, MalformedKeyError

_KEY_PATTERN = re.compile(r"(?:[A-Za-z0-9\-_.~]|%[0-9A-Fa-f]{2})+")
_KEY_ALPHABET = re.compile(r"[A-Za-z0-9\-_.~%]+")


def encode(relative_path: str) -> str:
    """
    Encode a relative path into a cache key.

    Args:
        relative_path: Source-tree-relative path (forward-slash segments)

    Returns:
        Filesystem-safe cache key

    Raises:
        InvalidPathError: For an empty path, a NUL byte, undecodable text, or a
            path whose key is too long for a single filename
    """
    if not relative_path:
        raise InvalidPathError(relative_path, "empty path")
    if "\x00" in relative_path:
        raise InvalidPathError(relative_path, "path contains a NUL byte")

    try:
        key = quote(relative_path, safe="", encoding="utf-8", errors="strict")
    except UnicodeEncodeError:
        raise InvalidPathError(relative_path, "path is not valid UTF-8")
    if key.startswith("."):
        key = "%2E" + key[1:]
    if len(key) > MAX_CACHE_KEY_LENGTH:
        raise InvalidPathError(
            relative_path,
            f"encoded path is {len(key)} characters, "
            f"cache keys are limited to {MAX_CACHE_KEY_LENGTH}",
        )
    return key


def decode(key: str) -> str:
    """
    Decode a cache key back into the exact relative path it was built from.

    Raises:
        MalformedKeyError: If the key has characters outside the codec
            alphabet, a truncated escape, or escapes that are not UTF-8
    """
    if not key:
        raise MalformedKeyError(key, "empty key")
    if not _KEY_ALPHABET.fullmatch(key):
        raise MalformedKeyError(key, "characters outside the key alphabet")
    if not _KEY_PATTERN.fullmatch(key):
        raise MalformedKeyError(key, "truncated or invalid percent escape")

    try:
        relative_path = unquote(key, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedKeyError(key, f"escapes are not valid UTF-8 ({e.reason})")

    if "\x00" in relative_path:
        raise MalformedKeyError(key, "decodes to a path containing a NUL byte")
    return relative_path


def cache_filename(relative_path: str) -> str:
    """Cache entry filename (``<key>.jpg``) for a relative path."""
    return f"{encode(relative_path)}{THUMBNAIL_FILE_EXTENSION}"


def relative_path_from_cache_filename(filename: str) -> str:
    """
    Inverse of cache_filename().

    Raises:
        MalformedKeyError: If the name lacks the cache extension or its key is malformed
    """
    if not filename.endswith(THUMBNAIL_FILE_EXTENSION):
        raise MalformedKeyError(filename, "missing cache file extension")
    return decode(filename[: -len(THUMBNAIL_FILE_EXTENSION)])
