"""Deletion of selected node_modules directories."""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Optional

from npkl.models import DeletionResult, DirectoryEntry
from npkl.scanner import TARGET_NAME

log = logging.getLogger(__name__)


def is_path_safe(path: Path) -> bool:
    """
    Check if a path is safe to delete.

    Only real (non-symlink) paths named node_modules qualify.

    Args:
        path: Path to check

    Returns:
        True if safe to delete, False otherwise
    """
    if path.name != TARGET_NAME:
        return False

    if path.is_symlink():
        return False

    return True


def delete_path(path: Path, dry_run: bool = False) -> Optional[str]:
    """
    Recursively delete a directory.

    Args:
        path: Directory to delete
        dry_run: If True, don't actually delete

    Returns:
        Error message, or None on success
    """
    if not is_path_safe(path):
        return f"Refusing to delete {path}: not a {TARGET_NAME} directory"

    if not os.path.isdir(path):
        return f"Not a directory: {path}"

    if dry_run:
        return None

    try:
        shutil.rmtree(path)
    except PermissionError as e:
        return f"Permission denied: {e}"
    except OSError as e:
        return f"OS error: {e}"

    return None


def delete_directories(
    entries: list[DirectoryEntry],
    dry_run: bool = False,
    progress_callback: Optional[Callable[[DeletionResult], None]] = None,
) -> list[DeletionResult]:
    """
    Delete each entry, carrying on past failures.

    Args:
        entries: Directories to delete
        dry_run: If True, don't actually delete
        progress_callback: Optional callback(result) after each entry

    Returns:
        One DeletionResult per entry, in the same order
    """
    results: list[DeletionResult] = []

    for entry in entries:
        error = delete_path(Path(entry.path), dry_run=dry_run)

        if error:
            log.info("Failed to delete %s: %s", entry.path, error)
        else:
            log.info("%s %s", "Would delete" if dry_run else "Deleted", entry.path)

        result = DeletionResult(
            path=entry.path,
            bytes_freed=0 if error else entry.size_bytes,
            success=error is None,
            error=error,
            dry_run=dry_run,
        )
        results.append(result)

        if progress_callback:
            progress_callback(result)

    return results
