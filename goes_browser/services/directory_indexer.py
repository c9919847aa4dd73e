# goes_browser/services/directory_indexer.py
"""
Directory Indexer

Lists the source tree one level at a time, classifying entries as files or
directories and filtering files by extension. Used by the reconciliation
scan (recursively, via walk_files) and by the listing endpoint.

Directory reads go to a network share, so everything here is synchronous and
callers on the event loop should go through asyncio.to_thread().
"""

import os
from pathlib import Path
from typing import AbstractSet, Iterator, List, Optional, Union

from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import DirectoryUnavailableError
from ..models.source_entry_model import SourceEntry
from ..utils.file_helpers import join_relative, normalize_relative_path, resolve_under_root
from .logger import get_service_logger

logger = get_service_logger(LoggerName.DIRECTORY_INDEXER, LogSource.FILESYSTEM)


def has_extension(filename: str, extensions: Optional[AbstractSet[str]]) -> bool:
    """Case-insensitive extension check; None accepts everything."""
    if extensions is None:
        return True
    return os.path.splitext(filename)[1].lower() in extensions


class DirectoryIndexer:
    """Reads directory listings below a single configured source root."""

    def __init__(self, source_root: Union[str, Path]):
        self.source_root = Path(source_root)

    def list_directory(
        self,
        relative_path: str = "",
        extensions: Optional[AbstractSet[str]] = None,
    ) -> List[SourceEntry]:
        """
        List one directory level (not recursive).

        Directories are always included so callers can recurse; files only
        when their extension is in `extensions` (or always if it is None).
        Order is whatever the filesystem returns.

        Args:
            relative_path: Directory relative to the source root ("" for the root)
            extensions: Lower-case extensions with leading dot, or None for all files

        Raises:
            InvalidPathError: If the path escapes the source root
            DirectoryUnavailableError: If the directory is missing or unreadable
        """
        normalized = normalize_relative_path(relative_path)
        full_path = resolve_under_root(self.source_root, normalized)

        logger.debug(
            f"Listing files in directory: {full_path}",
            extra_context={"relative_path": normalized},
        )

        entries: List[SourceEntry] = []
        try:
            with os.scandir(full_path) as it:
                for entry in it:
                    # Symlinked directories are not followed, so walks cannot loop
                    try:
                        is_directory = entry.is_dir(follow_symlinks=False)
                    except OSError:
                        is_directory = False

                    if not is_directory and not has_extension(entry.name, extensions):
                        continue

                    entries.append(
                        SourceEntry(
                            filename=entry.name,
                            relative_path=join_relative(normalized, entry.name),
                            is_directory=is_directory,
                        )
                    )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise DirectoryUnavailableError(normalized or "/", e.strerror) from e
        except OSError as e:
            logger.error(
                f"Error reading directory: {full_path}",
                exception=e,
                error_context={"relative_path": normalized},
            )
            raise DirectoryUnavailableError(normalized or "/", e.strerror) from e

        return entries

    def walk_files(
        self,
        relative_path: str = "",
        extensions: Optional[AbstractSet[str]] = None,
    ) -> Iterator[str]:
        """
        Yield the relative path of every matching file below relative_path, depth-first.

        A subdirectory that disappears or becomes unreadable mid-walk is
        logged and skipped. The starting directory being unavailable raises.

        Raises:
            InvalidPathError: If the path escapes the source root
            DirectoryUnavailableError: If the starting directory is unavailable
        """
        root_entries = self.list_directory(relative_path, extensions)
        stack = [iter(root_entries)]

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            if not entry.is_directory:
                yield entry.relative_path
                continue

            try:
                stack.append(iter(self.list_directory(entry.relative_path, extensions)))
            except DirectoryUnavailableError as e:
                logger.warning(
                    f"Skipping unavailable subdirectory {entry.relative_path}: {e}",
                    emoji=LogEmoji.WARNING,
                    extra_context={"relative_path": entry.relative_path},
                )
