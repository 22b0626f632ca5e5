"""Rich progress bars for the cleanup steps."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


if TYPE_CHECKING:
    from types import TracebackType

    from poolkeeper.core.ports import ProgressCallback


class RichProgressReporter:
    """Show each cleanup step as a bar on stderr.

    Steps with an unknown size (the pool listing) spin until they finish;
    their final count becomes the total. Rendering goes to stderr so that
    command output on stdout stays clean.

    Example:
        with RichProgressReporter(transient=True) as reporter:
            result = maintenance.cleanup(progress=reporter)
    """

    def __init__(self, transient: bool = False, console: Console | None = None) -> None:
        """Create the reporter. The display starts on first use.

        Args:
            transient: Clear the bars when the display stops.
            console: Console to render on; defaults to stderr.
        """
        self.console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓"),
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=transient,
        )
        self._steps: dict[str, TaskID] = {}
        self._running = False

    def __enter__(self) -> RichProgressReporter:
        self._ensure_running()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stop()

    def _ensure_running(self) -> None:
        if not self._running:
            self._progress.start()
            self._running = True

    def stop(self) -> None:
        """Stop rendering. Safe to call more than once."""
        if self._running:
            self._progress.stop()
            self._running = False

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Add a bar for a step.

        Args:
            name: Step description shown next to the bar.
            total: Number of items, or 0 if not known up front.

        Returns:
            Callback taking (done, total).
        """
        self._ensure_running()
        step = self._progress.add_task(name, total=total or None)
        self._steps[name] = step

        def advance(done: int, total: int) -> None:
            self._progress.update(step, completed=done, total=total or None)

        return advance

    def finish_task(self, name: str) -> None:
        """Fill the bar of a step; steps never started are ignored."""
        step = self._steps.pop(name, None)
        if step is None:
            return
        task = self._progress.tasks[step]
        final = task.completed if task.total is None else task.total
        self._progress.update(step, total=final, completed=final)
