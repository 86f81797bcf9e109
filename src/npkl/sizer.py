"""Concurrent directory size calculation.

The tree walk runs on the calling thread. Every file it meets is handed to a
thread pool as its own unit of work, which stats the file and adds its size to
a tally shared by that one call. The call only returns once every unit it
dispatched has finished.

Error policy: the first per-file error is kept and every later one is dropped.
Units still in flight are not cancelled; they are waited for, and then the
whole calculation fails with no partial total.
"""

import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Generator, Optional, Union

from npkl.errors import FilesystemError

log = logging.getLogger(__name__)


class SizeTally:
    """Running byte total plus a single slot for the first error seen."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._error: Optional[OSError] = None

    @property
    def total(self) -> int:
        with self._lock:
            return self._total

    @property
    def error(self) -> Optional[OSError]:
        with self._lock:
            return self._error

    def add(self, size: int) -> None:
        with self._lock:
            self._total += size

    def record_error(self, exc: OSError) -> bool:
        """Keep ``exc`` unless an error is already recorded.

        Returns:
            True if ``exc`` was kept, False if it was dropped
        """
        with self._lock:
            if self._error is not None:
                return False
            self._error = exc
            return True


def _file_size(path: str) -> int:
    """Size of a single entry, without following symlinks."""
    return os.lstat(path).st_size


def _size_file(path: str, tally: SizeTally) -> None:
    try:
        size = _file_size(path)
    except OSError as e:
        if not tally.record_error(e):
            log.debug("Dropped error for %s: %s", path, e)
        return
    tally.add(size)


def iter_files(path: str) -> Generator[str, None, None]:
    """
    Yield every non-directory entry below ``path``, depth first.

    Directories are descended but never yielded. Symlinks are not followed.

    Raises:
        OSError: If a directory cannot be listed
    """
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                yield from iter_files(entry.path)
            else:
                yield entry.path


def get_directory_size(
    path: Union[str, Path],
    *,
    max_workers: Optional[int] = None,
    executor: Optional[Executor] = None,
) -> int:
    """
    Calculate the total size of all files below a directory.

    Args:
        path: Directory to size
        max_workers: Thread count for a private pool (ignored with ``executor``)
        executor: Pool to dispatch per-file work to; a private one is created if omitted

    Returns:
        Total size in bytes

    Raises:
        FilesystemError: If the walk fails or any file could not be stat'ed
    """
    if executor is None:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="npkl-size") as pool:
            return get_directory_size(path, executor=pool)

    root = os.fspath(path)
    tally = SizeTally()
    futures: list[Future] = []

    try:
        for file_path in iter_files(root):
            futures.append(executor.submit(_size_file, file_path, tally))
    except OSError as e:
        wait(futures)
        raise FilesystemError.from_os_error(e, root) from e

    # Join-all, stragglers included, before looking at the error slot
    wait(futures)
    for future in futures:
        future.result()

    error = tally.error
    if error is not None:
        log.debug("Discarding partial total of %d bytes for %s", tally.total, root)
        raise FilesystemError.from_os_error(error, root) from error

    log.debug("Sized %s: %d bytes across %d files", root, tally.total, len(futures))
    return tally.total
