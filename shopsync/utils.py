"""Utility functions for shopsync."""

from pathlib import Path
from typing import Union

# =============================================================================
# Constants for theme assets
# =============================================================================

# Top-level folders of a theme; anything else under the theme folder is ignored
THEME_DIRECTORIES: tuple[str, ...] = (
    "assets",
    "blocks",
    "config",
    "layout",
    "locales",
    "sections",
    "snippets",
    "templates",
)

# Assets with these extensions travel base64-encoded as ``attachment``
BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".svg",
        ".ico",
        ".woff",
        ".woff2",
        ".ttf",
        ".eot",
        ".pdf",
        ".zip",
        ".mp4",
        ".webm",
        ".mp3",
        ".wav",
        ".webp",
    }
)


def is_binary_file(path: Union[str, Path]) -> bool:
    """Check whether an asset must be uploaded as a base64 attachment.

    Args:
        path: Asset key or file path

    Returns:
        True for binary asset types

    Examples:
        >>> is_binary_file("assets/logo.PNG")
        True
        >>> is_binary_file("layout/theme.liquid")
        False
    """
    return Path(str(path)).suffix.lower() in BINARY_EXTENSIONS


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    size: float = size_bytes
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
