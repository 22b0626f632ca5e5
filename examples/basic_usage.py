"""Basic usage: reclaim space in a repository.

This example shows the simplest way to run garbage collection over the
repository containing the current directory.
"""

from poolkeeper import Maintenance, RichProgressReporter


# Settings come from .poolkeeper/config.toml (or the defaults under
# .poolkeeper/) in the nearest directory with a project marker.
maintenance = Maintenance.from_directory()

# Preview first: nothing is deleted
preview = maintenance.cleanup(dry_run=True)
print(f"Would delete {preview.deleted_packages} package(s)")
print(f"Would delete {preview.deleted_files} file(s), {preview.freed_bytes} bytes")

# Run it for real with progress bars
with RichProgressReporter() as reporter:
    result = maintenance.cleanup(progress=reporter)

print(f"Referenced packages: {result.live_packages}")
print(f"Deleted {result.deleted_packages} package(s) and {result.deleted_files} file(s)")
