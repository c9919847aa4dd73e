"""
Services module for the GOES imagery browser.

Business logic between the HTTP layer and the workers.

Available Services:
- DirectoryIndexer: One-level directory listings and depth-first walks of the source tree
- ThumbnailCacheService: Read-through preview cache, turns misses into render jobs
- ReconciliationService: Diffs the source tree against the cache and queues missing previews
- ChannelService: Reloadable channel metadata lookups

Subdirectory Services:
- logger: loguru-backed service loggers (in logger/)
- thumbnail_pipeline: Decode/resize/publish of a single preview (in thumbnail_pipeline/)
"""
