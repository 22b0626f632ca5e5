"""Error handling patterns with recovery hints.

This example demonstrates how to handle common errors and use
the recovery_hint property to provide actionable guidance.
"""

from poolkeeper import (
    DependentsExistError,
    EntityLoadError,
    EntityNotFoundError,
    FileDeleteError,
    Maintenance,
    PoolkeeperError,
)


maintenance = Maintenance.from_directory()


# Pattern 1: Drop a mirror only if nothing depends on it
def drop_if_unused(maintenance: Maintenance, name: str) -> bool:
    """Drop a mirror, reporting dependent snapshots instead of failing."""
    try:
        maintenance.drop_mirror(name)
    except DependentsExistError as e:
        print(f"Mirror {e.name} is still used by:")
        for snapshot in e.dependents:
            print(f" * {snapshot}")
        print(f"Hint: {e.recovery_hint}")
        return False
    except EntityNotFoundError as e:
        # recovery_hint lists existing mirrors
        print(f"Hint: {e.recovery_hint}")
        return False
    return True


# Pattern 2: Distinguish "nothing happened" from "partially done"
def cleanup_reporting_state(maintenance: Maintenance) -> None:
    """Run cleanup and explain what state the repository is in on failure."""
    try:
        maintenance.cleanup()
    except EntityLoadError as e:
        # Raised before any deletion
        print(f"Could not load {e.kind} {e.name}; repository unchanged")
    except FileDeleteError as e:
        # Metadata already swept; rerunning resumes the pool sweep
        print(f"Stuck at {e.path}: {e.cause}")
        print(f"Removed {e.deleted_files} file(s) before that")
        print(f"Hint: {e.recovery_hint}")


# Pattern 3: Catch-all for any library error
def safe_cleanup(maintenance: Maintenance) -> bool:
    """Run cleanup, catching any poolkeeper error."""
    try:
        maintenance.cleanup()
    except PoolkeeperError as e:
        print(f"Error: {e}")
        if e.recovery_hint:
            print(f"Hint: {e.recovery_hint}")
        return False
    return True


if __name__ == "__main__":
    drop_if_unused(maintenance, "wheezy-main")
    cleanup_reporting_state(maintenance)
