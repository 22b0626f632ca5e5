"""CLI entry point for poolkeeper."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from poolkeeper.core.exceptions import PoolkeeperError
from poolkeeper.logs import setup_logging


if TYPE_CHECKING:
    from poolkeeper import Maintenance


app = typer.Typer(
    name="poolkeeper",
    help="Garbage collection for package repository metadata and pool.",
    no_args_is_help=True,
)
db_app = typer.Typer(help="Manage the metadata store.", no_args_is_help=True)
mirror_app = typer.Typer(help="Manage remote repository mirrors.", no_args_is_help=True)

app.add_typer(db_app, name="db")
app.add_typer(mirror_app, name="mirror")


@app.callback()
def configure(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log each cleanup phase to stderr.",
    ),
) -> None:
    """Configure logging before any command runs."""
    setup_logging(verbose=verbose)


def fail(error: PoolkeeperError) -> typer.Exit:
    """Print an error with its recovery hint and return the exit to raise."""
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    return typer.Exit(1)


def load_maintenance() -> Maintenance:
    """Create Maintenance for the project containing the current directory.

    Raises:
        typer.Exit: If the project settings cannot be loaded.
    """
    from poolkeeper import Maintenance

    try:
        return Maintenance.from_directory()
    except PoolkeeperError as e:
        raise fail(e) from None


def format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def main() -> None:
    """Entry point for the CLI."""
    app()
