"""Local file index: resource files and their metadata sidecars."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

META_EXTENSION = ".meta"


@dataclass
class LocalFile:
    """A resource materialized on disk."""

    handle: str
    """Stable logical name, the join key with remote resources"""

    file_path: Path
    """Path to the resource's content file"""

    metadata: Optional[dict[str, Any]] = None
    """Sidecar contents, or None when no usable sidecar exists"""


def metadata_path(file_path: Path) -> Path:
    """Return the sidecar path for a resource file (``<file>.meta``)."""
    return file_path.with_name(file_path.name + META_EXTENSION)


def read_metadata(file_path: Path) -> Optional[dict[str, Any]]:
    """Load the metadata sidecar of a resource file.

    A missing sidecar returns None silently. An unreadable or malformed one
    returns None and logs a warning, so one bad sidecar never aborts a sync.

    Args:
        file_path: Path to the resource file (not the sidecar)

    Returns:
        Metadata mapping or None
    """
    meta_path = metadata_path(file_path)
    if not meta_path.exists():
        return None

    try:
        with open(meta_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to read metadata from {meta_path}: {e}")
        return None

    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring metadata in {meta_path}: expected a mapping")
        return None
    return data


def write_metadata(file_path: Path, metadata: dict[str, Any]) -> Path:
    """Write the metadata sidecar of a resource file.

    Args:
        file_path: Path to the resource file
        metadata: Record to serialize

    Returns:
        Path of the written sidecar
    """
    meta_path = metadata_path(file_path)
    with open(meta_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(metadata, f, sort_keys=False, allow_unicode=True)
    return meta_path


def _is_sidecar(path: Path) -> bool:
    return path.name.endswith(META_EXTENSION)


def collect_local_files(
    directory: Path,
    file_extension: str,
    recursive: bool = False,
    subdirectories: Optional[tuple[str, ...]] = None,
) -> list[LocalFile]:
    """Scan a directory for resource files.

    Flat scans look at direct children ending in ``file_extension`` and strip
    the extension to get the handle. Recursive scans (theme assets) walk the
    whole tree, keep files whose first path component is in
    ``subdirectories`` and use the relative POSIX path as handle.

    Args:
        directory: Directory to scan
        file_extension: Suffix of resource files ("" accepts any file)
        recursive: Walk subdirectories
        subdirectories: Allowed top-level folders for recursive scans

    Returns:
        LocalFile records sorted by handle; empty if the directory is missing

    Examples:
        >>> files = collect_local_files(Path("out/pages"), ".html")
        >>> [f.handle for f in files]
        ['about', 'contact']
    """
    if not directory.is_dir():
        logger.debug(f"Local directory {directory} does not exist, nothing to scan")
        return []

    files: list[LocalFile] = []

    if recursive:
        for path in directory.rglob("*"):
            if not path.is_file() or _is_sidecar(path):
                continue
            relative = path.relative_to(directory)
            if subdirectories is not None and (
                len(relative.parts) < 2 or relative.parts[0] not in subdirectories
            ):
                logger.debug(f"Skipping {relative.as_posix()}: not a resource path")
                continue
            if file_extension and not path.name.endswith(file_extension):
                continue
            files.append(
                LocalFile(
                    handle=relative.as_posix(),
                    file_path=path,
                    metadata=read_metadata(path),
                )
            )
    else:
        for path in directory.iterdir():
            if not path.is_file() or _is_sidecar(path):
                continue
            if not path.name.endswith(file_extension):
                continue
            handle = path.name[: len(path.name) - len(file_extension)]
            if not handle:
                continue
            files.append(
                LocalFile(handle=handle, file_path=path, metadata=read_metadata(path))
            )

    files.sort(key=lambda f: f.handle)
    logger.debug(f"Found {len(files)} local file(s) in {directory}")
    return files
