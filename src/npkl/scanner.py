"""Discovery of node_modules directories.

The tree is walked depth first with children in name order, so two scans of
an unchanged tree report the same directories in the same order. A matched
directory is sized and never descended into: a node_modules nested inside
another one is part of the outer entry's size, not an entry of its own.
"""

import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Generator, Optional, Union

from npkl.errors import FilesystemError
from npkl.models import DirectoryEntry, ScanResult
from npkl.sizer import get_directory_size

log = logging.getLogger(__name__)

TARGET_NAME = "node_modules"


def _walk(path: str, pattern: str) -> Generator[str, None, None]:
    with os.scandir(path) as it:
        children = sorted(it, key=lambda e: e.name)

    for entry in children:
        if not entry.is_dir(follow_symlinks=False):
            continue
        if entry.name == pattern:
            yield entry.path
        else:
            yield from _walk(entry.path, pattern)


def find_matching_directories(
    root: Union[str, Path],
    pattern: str = TARGET_NAME,
) -> Generator[str, None, None]:
    """
    Find directories named exactly ``pattern`` below ``root``.

    ``root`` itself is checked first. Matches are not recursed into.

    Args:
        root: Directory to start searching from
        pattern: Directory name to match (case-sensitive, no globbing)

    Yields:
        Paths to matching directories, in pre-order

    Raises:
        FilesystemError: If ``root`` cannot be stat'ed or any directory cannot be listed
    """
    root_str = os.fspath(root)
    try:
        st = os.stat(root_str)
    except OSError as e:
        raise FilesystemError.from_os_error(e, root_str) from e

    if not stat.S_ISDIR(st.st_mode):
        return

    if os.path.basename(os.path.normpath(root_str)) == pattern:
        yield root_str
        return

    try:
        yield from _walk(root_str, pattern)
    except OSError as e:
        raise FilesystemError.from_os_error(e, root_str) from e


def find_node_modules(
    root: Union[str, Path],
    *,
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[str, int], None]] = None,
) -> ScanResult:
    """
    Find every node_modules directory below ``root`` and size it.

    Args:
        root: Directory to scan
        max_workers: Thread count used for file size lookups
        progress_callback: Optional callback(path, size_bytes) for each found directory

    Returns:
        ScanResult with entries in discovery order

    Raises:
        FilesystemError: On the first traversal or sizing failure; nothing partial is returned
    """
    root_str = os.fspath(root)
    entries: list[DirectoryEntry] = []

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="npkl-size") as executor:
        for found in find_matching_directories(root_str):
            size = get_directory_size(found, executor=executor)
            entries.append(DirectoryEntry(path=found, size_bytes=size))
            log.debug("Found %s (%d bytes)", found, size)

            if progress_callback:
                progress_callback(found, size)

    log.info("Found %d %s directories under %s", len(entries), TARGET_NAME, root_str)
    return ScanResult(root=root_str, entries=entries)
