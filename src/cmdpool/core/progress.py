"""Progress reporting for scheduling sessions.

The pool reports to a ProgressSink: the total number of units at start,
one unit per admission and one per completion, and every recorded
failure as a warning when the session ends.
"""

import logging
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ..models import ProcessError

logger = logging.getLogger(__name__)


@runtime_checkable
class ProgressSink(Protocol):
    """Receiver of scheduling progress."""

    def start(self, total: int) -> None: ...

    def set_message(self, message: str) -> None: ...

    def advance(self, step: int = 1) -> None: ...

    def warn(self, error: ProcessError) -> None: ...

    def finish(self) -> None: ...


class NullProgressSink:
    """Sink that discards everything."""

    def start(self, total: int) -> None:
        pass

    def set_message(self, message: str) -> None:
        pass

    def advance(self, step: int = 1) -> None:
        pass

    def warn(self, error: ProcessError) -> None:
        pass

    def finish(self) -> None:
        pass


class LoggingProgressSink:
    """Sink that reports progress as log lines."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger
        self.total = 0
        self.current = 0
        self.message = ""

    def start(self, total: int) -> None:
        self.total = total
        self.current = 0
        self.log.info(f"Starting {total // 2} command(s)")

    def set_message(self, message: str) -> None:
        self.message = message

    def advance(self, step: int = 1) -> None:
        self.current += step
        self.log.debug(f"[{self.current}/{self.total}] {self.message}")

    def warn(self, error: ProcessError) -> None:
        self.log.warning(f"{error.command}: {error.error.strip()}")

    def finish(self) -> None:
        self.log.info(f"Finished {self.current}/{self.total} unit(s)")


class RichProgressSink:
    """Sink that renders a progress bar on a Rich console.

    The bar shows units done, elapsed time and the command line that
    was started last. Warnings are printed as panels below the bar.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def start(self, total: int) -> None:
        self._progress = Progress(
            MofNCompleteColumn(),
            BarColumn(complete_style="green", style="red"),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TextColumn("{task.description}"),
            console=self.console,
        )
        self._task = self._progress.add_task("", total=total)
        self._progress.start()

    def set_message(self, message: str) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, description=message)

    def advance(self, step: int = 1) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.advance(self._task, step)

    def warn(self, error: ProcessError) -> None:
        self.finish()
        self.console.print(
            Panel(
                error.error.rstrip() or "(no output)",
                title=f"[bold]{error.command}[/bold]",
                title_align="left",
                border_style="yellow",
            )
        )

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
