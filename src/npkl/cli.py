"""CLI interface for npkl."""

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from npkl import __version__
from npkl.cleaner import delete_directories
from npkl.display import (
    clear_screen,
    confirm_deletion,
    console,
    show_deletion_preview,
    show_deletion_result,
    show_deletion_summary,
    show_scanning_status,
    show_selection,
)
from npkl.errors import FilesystemError, InputError, TerminalConfigError
from npkl.models import DirectoryEntry
from npkl.scanner import find_node_modules
from npkl.selector import select_entries
from npkl.terminal import raw_mode, read_key

# Create Typer app
app = typer.Typer(
    name="npkl",
    help="Find node_modules directories, pick the ones to remove, and delete them",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"npkl version {__version__}")
        raise typer.Exit()


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _abort(message: str, error: Exception) -> NoReturn:
    console.print(f"[red]{message}: {escape(str(error))}[/red]", soft_wrap=True)
    raise typer.Exit(1)


def _choose(entries: list[DirectoryEntry]) -> Optional[list[DirectoryEntry]]:
    """Run the browse loop with stdin in raw mode."""
    stream = sys.stdin
    with raw_mode(stream):
        return select_entries(entries, read=lambda: read_key(stream), render=show_selection)


@app.command()
def main(
    root: Optional[Path] = typer.Argument(
        None,
        help="Directory to scan (defaults to the current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        show_default=False,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted without deleting"),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        envvar="NPKL_WORKERS",
        help="Threads used to read file sizes",
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-V", count=True, help="Increase log verbosity (-V info, -VV debug)"
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Find node_modules directories under ROOT and delete the ones you pick."""
    _setup_logging(verbose)

    if root is None:
        try:
            root_dir = os.getcwd()
        except OSError as e:
            _abort("Error getting current directory", e)
    else:
        root_dir = str(root)

    try:
        with show_scanning_status(root_dir):
            result = find_node_modules(root_dir, max_workers=workers)
    except FilesystemError as e:
        _abort("Error searching directories", e)

    if result.is_empty:
        console.print("[yellow]No node_modules directories found.[/yellow]")
        return

    try:
        selected = _choose(result.entries)
    except TerminalConfigError as e:
        _abort("Error configuring terminal", e)
    except InputError as e:
        _abort("Error reading input", e)

    clear_screen()

    if selected is None:
        console.print("[yellow]Operation cancelled.[/yellow]")
        return

    if not selected:
        console.print("[yellow]Nothing selected for deletion.[/yellow]")
        return

    show_deletion_preview(selected, dry_run=dry_run)

    if not dry_run:
        try:
            confirmed = confirm_deletion()
        except InputError as e:
            _abort("Error reading input", e)
        except KeyboardInterrupt:
            confirmed = False
            console.print()

        if not confirmed:
            console.print("[yellow]Operation cancelled.[/yellow]")
            return

    console.print()
    results = delete_directories(selected, dry_run=dry_run, progress_callback=show_deletion_result)
    show_deletion_summary(results)

    if any(not r.success for r in results):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
