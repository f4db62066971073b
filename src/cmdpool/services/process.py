"""Process handle wrapping one external command.

A handle is created before scheduling, started once, and then polled
until it finishes. Output is spooled to temporary files rather than
pipes, so a child writing more than a pipe buffer never blocks while
the controller is only polling.
"""

import logging
import shlex
import subprocess
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


class ProcessStateError(Exception):
    """Handle used out of lifecycle order."""


class ProcessHandle:
    """One external command invocation.

    Handles compare by identity. The command line may be changed until
    the process is started; after that the handle is only read.
    """

    def __init__(
        self,
        command: str | Sequence[str],
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        if isinstance(command, str):
            self._command_line = command
        else:
            self._command_line = shlex.join(command)
        self.cwd = cwd
        self.env = dict(env) if env is not None else None

        self._process: subprocess.Popen[bytes] | None = None
        self._stdout: IO[bytes] | None = None
        self._stderr: IO[bytes] | None = None
        self._started = False
        self._exit_code: int | None = None
        self._output = ""
        self._error_output = ""

    def __repr__(self) -> str:
        if not self._started:
            state = "pending"
        elif self.is_running():
            state = "running"
        else:
            state = f"exited {self._exit_code}"
        return f"<ProcessHandle {self._command_line!r} {state}>"

    @property
    def command_line(self) -> str:
        """Command line text that is (or will be) executed."""
        return self._command_line

    @command_line.setter
    def command_line(self, value: str) -> None:
        if self._started:
            raise ProcessStateError("Cannot change the command line of a started process")
        self._command_line = value

    @property
    def pid(self) -> int | None:
        """OS process ID, once started."""
        return self._process.pid if self._process is not None else None

    @property
    def exit_code(self) -> int | None:
        """Exit status, or None while pending or running."""
        self.is_running()
        return self._exit_code

    def start(self, command_line: str | None = None) -> None:
        """Launch the command through the shell.

        Args:
            command_line: Optional final command line to run instead of the
                          one the handle was created with

        Raises:
            ProcessStateError: If the handle was already started
        """
        if self._started:
            raise ProcessStateError(f"Process already started: {self._command_line}")
        if command_line is not None:
            self._command_line = command_line
        self._started = True

        self._stdout = tempfile.TemporaryFile()
        self._stderr = tempfile.TemporaryFile()
        try:
            self._process = subprocess.Popen(
                self._command_line,
                shell=True,
                cwd=self.cwd,
                env=self.env,
                stdin=subprocess.DEVNULL,
                stdout=self._stdout,
                stderr=self._stderr,
            )
        except OSError as e:
            # Launch failures surface as error output, like a failing command
            logger.debug(f"Failed to start {self._command_line!r}: {e}")
            self._exit_code = 127
            self._error_output = str(e) or e.__class__.__name__
            self._close_files()
            return

        logger.debug(f"Started PID {self._process.pid}: {self._command_line}")

    def is_started(self) -> bool:
        """Return True once start() has been called."""
        return self._started

    def is_running(self) -> bool:
        """Non-blocking check whether the process is still executing."""
        if self._process is None or self._exit_code is not None:
            return False
        returncode = self._process.poll()
        if returncode is None:
            return True
        self._finish(returncode)
        return False

    def is_finished(self) -> bool:
        """Return True once the process was started and has exited."""
        return self._started and not self.is_running()

    def wait(self) -> int | None:
        """Block until the process exits.

        Returns:
            Exit status, or None if the handle was never started
        """
        if self._process is not None and self._exit_code is None:
            self._finish(self._process.wait())
        return self._exit_code

    def get_output(self) -> str:
        """Captured standard output; empty until the process finished."""
        self.is_running()
        return self._output

    def get_error_output(self) -> str:
        """Captured standard error; empty until the process finished."""
        self.is_running()
        return self._error_output

    def _finish(self, returncode: int) -> None:
        self._exit_code = returncode
        self._output = self._read(self._stdout)
        self._error_output = self._read(self._stderr)
        self._close_files()

    @staticmethod
    def _read(stream: IO[bytes] | None) -> str:
        if stream is None:
            return ""
        stream.seek(0)
        return stream.read().decode(errors="replace")

    def _close_files(self) -> None:
        for stream in (self._stdout, self._stderr):
            if stream is not None:
                stream.close()
        self._stdout = None
        self._stderr = None
