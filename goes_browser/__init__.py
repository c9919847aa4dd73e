"""
GOES imagery browser.

Browses a mounted tree of satellite imagery and serves cached, fixed-width
JPEG previews rendered by an isolated worker pool.
"""

__version__ = "1.0.0"
