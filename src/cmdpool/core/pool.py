"""Bounded-concurrency scheduler for external commands.

ProcessPool moves handles from a FIFO pending queue into an active set of
at most ``limit`` members, polls the active set until processes finish,
and files each finished handle under completed. Failures (non-empty
error output) are collected rather than raised.

Scheduling is cooperative polling from the calling thread: every tick
admits work into free slots, then checks each active process once, then
sleeps for ``poll_interval``. All parallelism lives in the child
processes, so the collections need no locking.
"""

import logging
import time
from collections import deque
from collections.abc import Iterable, Sequence

from ..constants import DEFAULT_LIMIT, EXIT_EXECUTABLE_NOT_FOUND, POLL_INTERVAL
from ..models import PoolSummary, ProcessError
from ..services import ProcessHandle, find_entry_point, find_executable
from .progress import NullProgressSink, ProgressSink
from .rewrite import CommandRewrite, identity_rewrite, prefix_rewrite

logger = logging.getLogger(__name__)

CommandSpec = str | Sequence[str] | ProcessHandle


class PoolStateError(Exception):
    """Pool used out of lifecycle order."""


def _to_handle(command: CommandSpec) -> ProcessHandle:
    if isinstance(command, ProcessHandle):
        return command
    return ProcessHandle(command)


def _check_handles(handles: Iterable[ProcessHandle]) -> None:
    """Reject handles that could not each be started once by the pool."""
    seen: set[int] = set()
    for handle in handles:
        if id(handle) in seen:
            raise ValueError(f"Handle given more than once: {handle.command_line}")
        if handle.is_started():
            raise ValueError(f"Handle already started: {handle.command_line}")
        seen.add(id(handle))


class ProcessPool:
    """Run a fixed list of commands with at most ``limit`` at a time.

    A pool is single-use: it is built from a command list, ``run()`` is
    called once, and the results are read afterwards.

    With ``continue_on_error(False)`` the session stops at the first
    failure it observes. Processes still in the active set at that point
    are left running and are not reaped; call ``wait_active()`` to block
    until they exit.
    """

    def __init__(
        self,
        commands: Iterable[CommandSpec],
        binary: str | None = None,
        sub_path: str | None = None,
        rewrite: CommandRewrite | None = None,
    ) -> None:
        self._pending: deque[ProcessHandle] = deque(_to_handle(c) for c in commands)
        _check_handles(self._pending)
        self._active: list[ProcessHandle] = []
        self._completed: list[ProcessHandle] = []
        self._errors: list[ProcessError] = []
        self._total = len(self._pending)

        self._limit = DEFAULT_LIMIT
        self._poll_interval = POLL_INTERVAL
        self._continue_on_error = True
        self._active_session = False
        self._has_run = False
        self._aborted = False
        self._sink: ProgressSink = NullProgressSink()

        self._custom_rewrite = rewrite
        self._rewrite: CommandRewrite = rewrite if rewrite is not None else identity_rewrite
        self._sub_path = sub_path if sub_path is not None else find_entry_point()
        self._binary = binary or ""
        if rewrite is None:
            self.set_binary(binary if binary is not None else find_executable())

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_limit(self, limit: int = DEFAULT_LIMIT) -> "ProcessPool":
        """Set the maximum number of concurrently active processes.

        Raises:
            ValueError: If limit is not a positive integer
            PoolStateError: If a session is running
        """
        self._ensure_idle("change the limit")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"Limit must be a positive integer, got {limit!r}")
        self._limit = limit
        return self

    def set_binary(self, binary: str | None) -> "ProcessPool":
        """Set the executable placed in front of every command.

        Exits the host process when no executable is given, since no
        rewritten command could run.
        """
        self._ensure_idle("change the binary")
        if not binary:
            logger.error("Unable to find an executable to run commands with.")
            raise SystemExit(EXIT_EXECUTABLE_NOT_FOUND)
        self._binary = binary
        self._rebuild_rewrite()
        return self

    def set_sub_path(self, sub_path: str) -> "ProcessPool":
        """Set the entry point placed between the binary and each command."""
        self._ensure_idle("change the sub-path")
        self._sub_path = sub_path
        self._rebuild_rewrite()
        return self

    def continue_on_error(self, continue_: bool = True) -> "ProcessPool":
        """Choose whether a failing process stops the session."""
        self._continue_on_error = continue_
        return self

    def set_progress_sink(self, sink: ProgressSink | None) -> "ProcessPool":
        """Attach a progress sink; None detaches it."""
        self._sink = sink if sink is not None else NullProgressSink()
        return self

    def set_poll_interval(self, seconds: float) -> "ProcessPool":
        """Set the sleep between poll ticks."""
        if seconds <= 0:
            raise ValueError(f"Poll interval must be positive, got {seconds!r}")
        self._poll_interval = seconds
        return self

    def _rebuild_rewrite(self) -> None:
        if self._custom_rewrite is None:
            self._rewrite = prefix_rewrite(self._binary, self._sub_path)

    def _ensure_idle(self, action: str) -> None:
        if self._active_session:
            raise PoolStateError(f"Cannot {action} while the pool is running")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def total(self) -> int:
        return self._total

    @property
    def pending(self) -> list[ProcessHandle]:
        return list(self._pending)

    @property
    def active(self) -> list[ProcessHandle]:
        return list(self._active)

    @property
    def completed(self) -> list[ProcessHandle]:
        return list(self._completed)

    @property
    def aborted(self) -> bool:
        """True if the last session stopped early on a failure."""
        return self._aborted

    def is_active(self) -> bool:
        """Return True while run() is executing."""
        return self._active_session

    def has_open_processes(self) -> bool:
        """Return True while any process is pending or active."""
        return bool(self._pending) or bool(self._active)

    def get_errors(self) -> list[ProcessError]:
        """Failures recorded so far, in the order they were observed."""
        return list(self._errors)

    def summary(self) -> PoolSummary:
        """Describe the current state of the pool."""
        return PoolSummary(
            total=self._total,
            completed=len(self._completed),
            pending=len(self._pending),
            active=len(self._active),
            aborted=self._aborted,
            errors=self.get_errors(),
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run every pending command and block until the session ends.

        Raises:
            PoolStateError: If run() was already called on this pool
        """
        if self._has_run:
            raise PoolStateError("ProcessPool.run() can only be called once")
        self._has_run = True

        self._start()
        try:
            while self.has_open_processes():
                if not self.step():
                    self._aborted = True
                    logger.info("Stopping after first failure; active processes left running")
                    break
                time.sleep(self._poll_interval)
        finally:
            self._finish()

    def step(self) -> bool:
        """Run one poll tick: admit into free slots, then reap.

        Returns:
            False if a failure was seen and the session should stop
        """
        self._admit()
        return self._reap()

    def wait_active(self) -> None:
        """Block until every process left in the active set has exited.

        The handles stay where they are; this only waits.
        """
        for handle in list(self._active):
            handle.wait()

    def _start(self) -> None:
        self._active_session = True
        logger.debug(f"Session started: {self._total} command(s), limit {self._limit}")
        self._sink.start(self._total * 2)

    def _admit(self) -> None:
        while len(self._active) < self._limit and self._pending:
            handle = self._pending.popleft()
            command_line = self._rewrite(handle.command_line)
            handle.start(command_line)
            self._active.append(handle)
            logger.debug(f"Admitted: {command_line}")
            self._sink.set_message(command_line)
            self._sink.advance()

    def _reap(self) -> bool:
        for handle in list(self._active):
            if handle.is_running():
                continue

            error_output = handle.get_error_output()
            if error_output:
                error = ProcessError(
                    command=handle.command_line,
                    error=error_output,
                    exit_code=handle.exit_code,
                )
                self._errors.append(error)
                logger.warning(f"Process failed: {handle.command_line}")
                if not self._continue_on_error:
                    return False

            self._active.remove(handle)
            self._completed.append(handle)
            logger.debug(f"Completed (exit {handle.exit_code}): {handle.command_line}")
            self._sink.advance()

        return True

    def _finish(self) -> None:
        self._active_session = False
        self._sink.finish()
        for error in self._errors:
            self._sink.warn(error)
        logger.debug(
            f"Session finished: {len(self._completed)}/{self._total} completed, "
            f"{len(self._errors)} error(s)"
        )
