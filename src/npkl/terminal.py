"""Raw-mode terminal handling.

Input is switched to raw mode so single key presses (including Ctrl+C) arrive
as bytes. Output post-processing is left on so newlines still return the
carriage and the rich console can print normally.
"""

import logging
import os
import termios
import tty
from contextlib import contextmanager
from typing import IO, Generator

from npkl.errors import InputError, TerminalConfigError

log = logging.getLogger(__name__)

# ESC [ A is the longest sequence we decode
READ_SIZE = 3


def _fileno(stream: IO) -> int:
    try:
        return stream.fileno()
    except (AttributeError, ValueError, OSError) as e:
        raise TerminalConfigError(f"input is not a terminal ({e})") from e


@contextmanager
def raw_mode(stream: IO) -> Generator[int, None, None]:
    """
    Put the terminal behind ``stream`` into raw input mode.

    The saved attributes are restored exactly once when the block exits,
    however it exits.

    Yields:
        The file descriptor in raw mode

    Raises:
        TerminalConfigError: If raw mode cannot be entered or the terminal cannot be restored
    """
    fd = _fileno(stream)
    try:
        saved = termios.tcgetattr(fd)
    except termios.error as e:
        raise TerminalConfigError(f"cannot read terminal attributes: {e}") from e

    try:
        tty.setraw(fd, termios.TCSADRAIN)
        attrs = termios.tcgetattr(fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
    except termios.error as e:
        _restore(fd, saved)
        raise TerminalConfigError(f"cannot enter raw mode: {e}") from e

    log.debug("Terminal fd %d in raw mode", fd)
    try:
        yield fd
    finally:
        _restore(fd, saved)


def _restore(fd: int, saved: list) -> None:
    try:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    except termios.error as e:
        raise TerminalConfigError(f"cannot restore terminal: {e}") from e
    log.debug("Terminal fd %d restored", fd)


def read_key(stream: IO) -> bytes:
    """
    Block until the next key press and return its bytes.

    Raises:
        InputError: If the read fails or the input is closed
    """
    try:
        data = os.read(stream.fileno(), READ_SIZE)
    except (OSError, ValueError) as e:
        raise InputError(f"cannot read input: {e}") from e
    if not data:
        raise InputError("input closed")
    return data
