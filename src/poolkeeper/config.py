"""Configuration utilities for poolkeeper.

This module provides project root discovery and resolves where the
metadata store and the package pool live.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from poolkeeper.core.exceptions import ConfigurationError


CONFIG_DIR = ".poolkeeper"
CONFIG_FILE = "config.toml"
DEFAULT_DATABASE = f"{CONFIG_DIR}/db/poolkeeper.sqlite"
DEFAULT_POOL = f"{CONFIG_DIR}/pool"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved locations of a repository.

    Attributes:
        root: Project root directory.
        database_path: Path to the SQLite metadata store.
        pool_location: Pool directory, or an s3://bucket/prefix URI.
    """

    root: Path
    database_path: Path
    pool_location: str


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root directory by walking up from start directory.

    Searches for marker files in the following priority order:
    1. .poolkeeper - Explicit project marker
    2. pyproject.toml - Python project root
    3. .git - Version control root

    Args:
        start: Directory to start searching from. If None, uses current directory.

    Returns:
        Path to project root directory. Returns start directory if no markers found.
    """
    if start is None:
        start = Path.cwd()

    markers = [CONFIG_DIR, "pyproject.toml", ".git"]
    current = start.resolve()

    for parent in [current, *current.parents]:
        for marker in markers:
            if (parent / marker).exists():
                return parent

    return start.resolve()


def load_settings(root: Path) -> Settings:
    """Resolve settings for the project at root.

    Precedence, lowest first: built-in defaults, keys ``database`` and
    ``pool`` in .poolkeeper/config.toml, then the POOLKEEPER_DATABASE and
    POOLKEEPER_POOL environment variables. Relative paths are resolved
    against root.

    Raises:
        ConfigurationError: If the config file is not valid TOML or has
            values of the wrong type.
    """
    database = DEFAULT_DATABASE
    pool = DEFAULT_POOL

    config_path = root / CONFIG_DIR / CONFIG_FILE
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

        for name in ("database", "pool"):
            if name in data and not isinstance(data[name], str):
                raise ConfigurationError(
                    f"'{name}' in {config_path} must be a string"
                )
        database = data.get("database", database)
        pool = data.get("pool", pool)

    database = os.environ.get("POOLKEEPER_DATABASE") or database
    pool = os.environ.get("POOLKEEPER_POOL") or pool

    database_path = Path(database)
    if not database_path.is_absolute():
        database_path = root / database_path

    if "://" not in pool and not Path(pool).is_absolute():
        pool = str(root / pool)

    return Settings(root=root, database_path=database_path, pool_location=pool)
