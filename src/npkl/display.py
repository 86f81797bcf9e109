"""Rich terminal display for npkl."""

from rich.console import Console
from rich.control import Control
from rich.markup import escape

from npkl.errors import InputError
from npkl.models import DeletionResult, DirectoryEntry

console = Console()

KB = 1024
MB = 1024 * KB
GB = 1024 * MB
TB = 1024 * GB

HEADER = "Found node_modules directories:"
HELP_LINE = "Use up/down arrows to navigate, space to select, Enter to confirm"
SEPARATOR = "-" * 40


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (binary units)."""
    if size_bytes >= TB:
        return f"{size_bytes / TB:.2f} TB"
    elif size_bytes >= GB:
        return f"{size_bytes / GB:.2f} GB"
    elif size_bytes >= MB:
        return f"{size_bytes / MB:.2f} MB"
    elif size_bytes >= KB:
        return f"{size_bytes / KB:.2f} KB"
    else:
        return f"{size_bytes} bytes"


def clear_screen() -> None:
    """Home the cursor and clear the screen."""
    console.control(Control.home(), Control.clear())


def format_entry_line(entry: DirectoryEntry, is_current: bool) -> str:
    """One list row: cursor marker, check box, path and size."""
    cursor = "> " if is_current else "  "
    mark = "[✓]" if entry.selected else "[ ]"
    return f"{cursor}{mark} {entry.path} ({format_size(entry.size_bytes)})"


def show_selection(entries: list[DirectoryEntry], cursor: int) -> None:
    """Redraw the selection list with the running total of selected sizes."""
    clear_screen()
    console.print(f"[bold]{HEADER}[/bold]")
    console.print(f"[dim]{HELP_LINE}[/dim]")
    console.print()

    total_selected = 0
    for i, entry in enumerate(entries):
        if entry.selected:
            total_selected += entry.size_bytes
        line = escape(format_entry_line(entry, i == cursor))
        if i == cursor:
            line = f"[bold cyan]{line}[/bold cyan]"
        elif entry.selected:
            line = f"[green]{line}[/green]"
        console.print(line, soft_wrap=True, highlight=False)

    console.print(f"\n{SEPARATOR}")
    console.print(f"Total size of selected directories: [bold]{format_size(total_selected)}[/bold]")


def show_scanning_status(root: str):
    """Spinner shown while the scan runs."""
    return console.status(f"[bold blue]Scanning {escape(root)} for node_modules...[/bold blue]")


def show_deletion_preview(entries: list[DirectoryEntry], dry_run: bool = False) -> None:
    """List the directories about to be deleted and their total size."""
    if dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]\n")

    console.print("[bold]The following directories will be deleted:[/bold]")
    total = 0
    for entry in entries:
        console.print(f"- {escape(entry.path)} ({format_size(entry.size_bytes)})", soft_wrap=True)
        total += entry.size_bytes
    console.print(f"\n[bold]Total size: {format_size(total)}[/bold]")


def show_deletion_result(result: DeletionResult) -> None:
    """Display result of a single deletion."""
    path = escape(result.path)
    if not result.success:
        console.print(
            f"[red]✗ Error deleting {path}: {escape(result.error or 'unknown error')}[/red]", soft_wrap=True
        )
    elif result.dry_run:
        console.print(f"[yellow]Would delete: {path}[/yellow]", soft_wrap=True)
    else:
        console.print(f"[green]✓[/green] Successfully deleted: {path}", soft_wrap=True)


def show_deletion_summary(results: list[DeletionResult]) -> None:
    """Display totals after a deletion run."""
    freed = sum(r.bytes_freed for r in results if r.success)
    success_count = sum(1 for r in results if r.success)
    failure_count = len(results) - success_count
    dry_run = any(r.dry_run for r in results)

    console.print()
    label = "Would free" if dry_run else "Space freed"
    console.print(f"[bold]{label}:[/bold] {format_size(freed)} in {success_count} directories")
    if failure_count:
        console.print(f"[red]Failed: {failure_count}[/red]")


def confirm_deletion(message: str = "Confirm deletion (Y/N): ") -> bool:
    """Ask for confirmation; only a case-insensitive Y confirms."""
    try:
        response = console.input(f"\n{message}")
    except EOFError as e:
        raise InputError("input closed before confirmation") from e
    return response.strip().upper() == "Y"
