from __future__ import annotations

from typing import TYPE_CHECKING

from prrs.config import SKIPPED_DIRECTORIES, SOURCE_EXTENSIONS
from prrs.logging import logger

if TYPE_CHECKING:
    from pathlib import Path


def is_source_file(path: Path) -> bool:
    """Check whether a file has one of the summarized source extensions.

    Args:
        path (Path): the file path to check

    Returns:
        bool: True if the extension (case-insensitive) is in ``SOURCE_EXTENSIONS``
    """
    return path.suffix.lower() in SOURCE_EXTENSIONS


def is_skipped_directory(path: Path) -> bool:
    """Check whether a directory is a version-control, dependency or build-output folder.

    Only directories are skipped: a regular file named ``dist`` is kept.

    Args:
        path (Path): the entry to check

    Returns:
        bool: True if the entry is a directory named in ``SKIPPED_DIRECTORIES``
    """
    return path.name in SKIPPED_DIRECTORIES and path.is_dir()


def list_entries(folder: Path) -> list[Path]:
    """List the direct entries of a folder in a deterministic order.

    The file system gives no ordering guarantee, so entries are sorted by name.
    Errors such as permission denial propagate.

    Args:
        folder (Path): the folder to list

    Returns:
        list[Path]: the entries, minus skipped directories, sorted by name
    """
    entries = sorted(folder.iterdir(), key=lambda p: p.name)
    kept = [entry for entry in entries if not is_skipped_directory(entry)]
    if len(kept) != len(entries):
        logger.debug("Ignored %d directories in %s", len(entries) - len(kept), folder)
    return kept


def read_source_text(path: Path) -> str | None:
    """Read a source file as UTF-8 text.

    Dangling symlinks and special files are not regular files and are skipped.
    Other read errors, such as permission denial, propagate.

    Args:
        path (Path): the file to read

    Returns:
        str | None: the content, or None if the entry is not a readable UTF-8 regular file
    """
    if not path.is_file():
        logger.warning("Skipping entry that is not a regular file: %s", path)
        return None
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("Skipping undecodable file: %s", path)
        return None
