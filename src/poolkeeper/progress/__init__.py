"""Progress reporting adapters."""

from poolkeeper.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
