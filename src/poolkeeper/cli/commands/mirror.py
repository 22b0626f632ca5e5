"""Mirror drop command for CLI."""

from __future__ import annotations

import typer

from poolkeeper.cli.main import fail, load_maintenance, mirror_app
from poolkeeper.core.exceptions import DependentsExistError, PoolkeeperError


@mirror_app.command()
def drop(
    name: str = typer.Argument(..., help="Name of the mirror to drop."),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Drop the mirror even if snapshots were created from it.",
    ),
) -> None:
    """Delete a remote repository mirror.

    Package data is not deleted, as other mirrors or snapshots may still
    use it; run 'poolkeeper db cleanup' to reclaim it. A mirror used as the
    source of a snapshot is kept unless --force is given.
    """
    maintenance = load_maintenance()

    try:
        mirror = maintenance.drop_mirror(name, force=force)
    except DependentsExistError as e:
        typer.echo(f"Mirror `{e.name}` was used to create following snapshots:")
        for snapshot in e.dependents:
            typer.echo(f" * {snapshot}")
        raise fail(e) from None
    except PoolkeeperError as e:
        raise fail(e) from None

    typer.echo(f"Mirror `{mirror.name}` has been removed.")
