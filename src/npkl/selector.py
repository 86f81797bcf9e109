"""Interactive selection of directories to delete.

The selector is a small state machine driven one key at a time:

    BROWSING --Enter--> CONFIRMING
    BROWSING --Ctrl+C--> TERMINATED

Space toggles the entry under the cursor and the arrow keys move the cursor,
clamped to the list (no wrap-around). Every other key is ignored.
"""

from enum import Enum
from typing import Callable, Optional

from npkl.models import DirectoryEntry

CTRL_C = b"\x03"
SPACE = b" "
ENTER_KEYS = (b"\r", b"\n")
ARROW_UP = b"\x1b[A"
ARROW_DOWN = b"\x1b[B"


class Key(str, Enum):
    """Decoded key press."""

    UP = "up"
    DOWN = "down"
    TOGGLE = "toggle"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    OTHER = "other"


class State(str, Enum):
    """Selector state."""

    BROWSING = "browsing"
    CONFIRMING = "confirming"
    TERMINATED = "terminated"


def decode_key(data: bytes) -> Key:
    """Map the bytes of one raw-mode read to a key."""
    if not data:
        return Key.OTHER
    if data[:1] == CTRL_C:
        return Key.CANCEL
    if data[:1] in ENTER_KEYS:
        return Key.CONFIRM
    if data[:1] == SPACE:
        return Key.TOGGLE
    if data[:3] == ARROW_UP:
        return Key.UP
    if data[:3] == ARROW_DOWN:
        return Key.DOWN
    return Key.OTHER


class Selector:
    """Cursor and selection state over a list of entries.

    Entries are toggled in place; nothing is added or removed.
    """

    def __init__(self, entries: list[DirectoryEntry]):
        self.entries = entries
        self.cursor = 0
        self.state = State.BROWSING
        for entry in self.entries:
            entry.selected = False

    @property
    def last_index(self) -> int:
        return max(0, len(self.entries) - 1)

    @property
    def selected_entries(self) -> list[DirectoryEntry]:
        return [e for e in self.entries if e.selected]

    @property
    def selected_bytes(self) -> int:
        return sum(e.size_bytes for e in self.entries if e.selected)

    def handle(self, key: Key) -> State:
        """Apply one key press and return the new state."""
        if self.state is not State.BROWSING:
            raise RuntimeError(f"Selector is {self.state.value}, not browsing")

        if key is Key.CANCEL:
            self.state = State.TERMINATED
        elif key is Key.CONFIRM:
            self.state = State.CONFIRMING
        elif key is Key.TOGGLE:
            if self.entries:
                self.entries[self.cursor].toggle()
        elif key is Key.UP:
            self.cursor = max(0, self.cursor - 1)
        elif key is Key.DOWN:
            self.cursor = min(self.last_index, self.cursor + 1)

        return self.state


def select_entries(
    entries: list[DirectoryEntry],
    read: Callable[[], bytes],
    render: Callable[[list[DirectoryEntry], int], None],
) -> Optional[list[DirectoryEntry]]:
    """
    Run the browse loop until the user confirms or cancels.

    Args:
        entries: Entries to choose from, mutated in place
        read: Blocking read of one key press worth of bytes
        render: Callback(entries, cursor) that redraws the list

    Returns:
        Selected entries in discovery order on confirm (possibly empty),
        None if the user cancelled
    """
    selector = Selector(entries)
    render(selector.entries, selector.cursor)

    while True:
        state = selector.handle(decode_key(read()))
        if state is State.TERMINATED:
            return None
        if state is State.CONFIRMING:
            return selector.selected_entries
        render(selector.entries, selector.cursor)
