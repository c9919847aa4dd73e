# goes_browser/utils/file_helpers.py
"""
File Helper Functions

Path normalisation and the security checks every relative path goes through
before it touches the filesystem.
"""

from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import InvalidPathError
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.UTILITY, LogSource.FILESYSTEM)


def normalize_relative_path(relative_path: str) -> str:
    """
    Normalise a client-supplied relative path to forward-slash segments.

    Empty and "." segments are dropped, so "" and "." both mean the root.

    Raises:
        InvalidPathError: For absolute paths, ".." segments or NUL bytes
    """
    if "\x00" in relative_path:
        raise InvalidPathError(relative_path, "path contains a NUL byte")

    if (
        PurePosixPath(relative_path).is_absolute()
        or PureWindowsPath(relative_path).is_absolute()
        or relative_path.startswith("\\")
    ):
        raise InvalidPathError(relative_path, "absolute paths are not allowed")

    segments = [s for s in relative_path.split("/") if s not in ("", ".")]
    if ".." in segments:
        raise InvalidPathError(relative_path, "parent directory references are not allowed")

    return "/".join(segments)


def resolve_under_root(root: Union[str, Path], relative_path: str) -> Path:
    """
    Resolve a relative path below root, rejecting anything that escapes it.

    Args:
        root: Configured root directory
        relative_path: Client-supplied relative path

    Returns:
        Resolved absolute Path inside root

    Raises:
        InvalidPathError: If the path is malformed or resolves outside root
    """
    normalized = normalize_relative_path(relative_path)
    base_path = Path(root).resolve()
    full_path = (base_path / normalized).resolve()

    # Security check: symlinks may still point outside the root
    try:
        full_path.relative_to(base_path)
    except ValueError:
        logger.warning(
            f"Path traversal attempt detected: {relative_path}",
            emoji=LogEmoji.SECURITY,
            extra_context={
                "operation": "path_validation",
                "relative_path": relative_path,
                "root": str(base_path),
                "security_violation": "path_traversal",
            },
        )
        raise InvalidPathError(relative_path)

    return full_path


def join_relative(parent: str, name: str) -> str:
    """Join a relative directory path and an entry name with "/"."""
    return f"{parent}/{name}" if parent else name
