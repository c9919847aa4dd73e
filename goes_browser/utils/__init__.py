"""
Utility functions for the GOES imagery browser.

Path encoding for cache keys, path validation, and router helpers.
"""

from .path_codec import cache_filename, decode, encode, relative_path_from_cache_filename

__all__ = [
    "cache_filename",
    "decode",
    "encode",
    "relative_path_from_cache_filename",
]
