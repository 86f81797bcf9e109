"""Data models for npkl."""

from typing import Optional

from pydantic import BaseModel, Field


class DirectoryEntry(BaseModel):
    """One discovered node_modules directory."""

    path: str = Field(..., description="Path to the node_modules directory")
    size_bytes: int = Field(..., ge=0, description="Total size of contained files, computed once")
    selected: bool = Field(False, description="Whether the user picked this entry for deletion")

    @property
    def size_human(self) -> str:
        """Human-readable size string (binary units)."""
        from npkl.display import format_size

        return format_size(self.size_bytes)

    def toggle(self) -> None:
        """Flip the selection flag."""
        self.selected = not self.selected


class ScanResult(BaseModel):
    """Directories found by one scan, in discovery order."""

    root: str = Field(..., description="Directory that was scanned")
    entries: list[DirectoryEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def total_bytes(self) -> int:
        """Size of every discovered directory."""
        return sum(e.size_bytes for e in self.entries)

    @property
    def selected_entries(self) -> list[DirectoryEntry]:
        """Selected entries, in discovery order."""
        return [e for e in self.entries if e.selected]

    @property
    def selected_bytes(self) -> int:
        """Total size of selected entries."""
        return sum(e.size_bytes for e in self.entries if e.selected)


class DeletionResult(BaseModel):
    """Result of deleting a single directory."""

    path: str = Field(..., description="Directory that was deleted")
    bytes_freed: int = Field(0, description="Bytes freed by the deletion")
    success: bool = Field(True, description="Whether the deletion succeeded")
    error: Optional[str] = Field(None, description="Error message if failed")
    dry_run: bool = Field(False, description="Whether this was a dry run")
