"""CLI for poolkeeper."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @db_app.command())
from poolkeeper.cli.commands import db as _db_module  # noqa: F401
from poolkeeper.cli.commands import mirror as _mirror_module  # noqa: F401
from poolkeeper.cli.main import app, main


__all__ = ["app", "main"]
