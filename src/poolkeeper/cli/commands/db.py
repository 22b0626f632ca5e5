"""Database cleanup command for CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from poolkeeper.cli.main import db_app, fail, format_size, load_maintenance
from poolkeeper.core.exceptions import (
    CompactionError,
    FileDeleteError,
    PoolkeeperError,
)
from poolkeeper.progress import RichProgressReporter


if TYPE_CHECKING:
    from poolkeeper.core.models import CleanupResult


def _print_result(result: CleanupResult) -> None:
    verb = "Would delete" if result.dry_run else "Deleted"
    typer.echo(f"Referenced packages: {result.live_packages}")
    typer.echo(f"{verb} {result.deleted_packages} unreferenced package(s).")
    typer.echo(f"{verb} {result.deleted_files} unreferenced file(s).")
    if result.deleted_files:
        label = "Disk space that would be freed" if result.dry_run else "Disk space freed"
        typer.echo(f"{label}: {format_size(result.freed_bytes)}")


@db_app.command()
def cleanup(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be deleted without deleting anything.",
    ),
) -> None:
    """Remove unreferenced packages and pool files.

    Package records no mirror, local repo or snapshot refers to are deleted
    from the database, then files in the package pool that no remaining
    package uses are deleted.
    """
    maintenance = load_maintenance()

    try:
        with RichProgressReporter(transient=True) as reporter:
            result = maintenance.cleanup(progress=reporter, dry_run=dry_run)
    except (FileDeleteError, CompactionError) as e:
        # the run got past the metadata sweep; report what was deleted
        if e.result is not None:
            _print_result(e.result)
        raise fail(e) from None
    except PoolkeeperError as e:
        raise fail(e) from None

    _print_result(result)
