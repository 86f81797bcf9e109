"""Error types for npkl."""

from typing import Optional


class NpklError(Exception):
    """Base class for all npkl errors."""


class FilesystemError(NpklError):
    """A stat, directory listing or removal failed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")

    @classmethod
    def from_os_error(cls, exc: OSError, path: Optional[str] = None) -> "FilesystemError":
        """Build from an OSError, preferring the filename the OS reported."""
        filename = exc.filename if exc.filename is not None else path
        return cls(str(filename) if filename is not None else "?", exc.strerror or str(exc))


class TerminalConfigError(NpklError):
    """Raw mode could not be enabled or the terminal could not be restored."""


class InputError(NpklError):
    """Reading from the input source failed."""
