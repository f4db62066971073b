"""Tests for ProcessHandle."""

from pathlib import Path

import pytest

from cmdpool.services import ProcessHandle, ProcessStateError


class TestCommandLine:
    """Tests for command line handling before start."""

    def test_string_command_is_kept_verbatim(self) -> None:
        """String commands are used as the command line as-is."""
        handle = ProcessHandle("echo hello")
        assert handle.command_line == "echo hello"

    def test_argv_command_is_shell_quoted(self) -> None:
        """Argument lists are joined with shell quoting."""
        handle = ProcessHandle(["echo", "hello world"])
        assert handle.command_line == "echo 'hello world'"

    def test_command_line_can_change_before_start(self) -> None:
        """Command line is mutable until the process starts."""
        handle = ProcessHandle("echo a")
        handle.command_line = "echo b"
        assert handle.command_line == "echo b"

    def test_command_line_is_frozen_after_start(self) -> None:
        """Changing the command line of a started process fails."""
        handle = ProcessHandle("true")
        handle.start()
        handle.wait()
        with pytest.raises(ProcessStateError):
            handle.command_line = "false"

    def test_handles_compare_by_identity(self) -> None:
        """Two handles for the same command are distinct."""
        assert ProcessHandle("true") != ProcessHandle("true")


class TestLifecycle:
    """Tests for start, polling and captured output."""

    def test_not_started_handle_is_not_running(self) -> None:
        """A pending handle reports neither running nor finished."""
        handle = ProcessHandle("true")
        assert handle.is_started() is False
        assert handle.is_running() is False
        assert handle.is_finished() is False
        assert handle.exit_code is None
        assert handle.pid is None

    def test_start_with_override_runs_given_command_line(self) -> None:
        """start() accepts the final command line to run."""
        handle = ProcessHandle("echo original")
        handle.start("echo rewritten")
        handle.wait()
        assert handle.command_line == "echo rewritten"
        assert handle.get_output() == "rewritten\n"

    def test_captures_stdout_and_exit_code(self) -> None:
        """Standard output and exit status are captured."""
        handle = ProcessHandle("echo out; exit 3")
        handle.start()
        assert handle.wait() == 3
        assert handle.exit_code == 3
        assert handle.get_output() == "out\n"
        assert handle.get_error_output() == ""
        assert handle.is_finished() is True

    def test_captures_stderr(self) -> None:
        """Standard error is captured separately from stdout."""
        handle = ProcessHandle("echo boom >&2")
        handle.start()
        handle.wait()
        assert handle.get_error_output() == "boom\n"
        assert handle.get_output() == ""

    def test_running_process_reports_running(self) -> None:
        """A sleeping process is running until it exits."""
        handle = ProcessHandle("sleep 0.5")
        handle.start()
        assert handle.is_running() is True
        assert handle.pid is not None
        handle.wait()
        assert handle.is_running() is False

    def test_large_output_does_not_block(self) -> None:
        """Output beyond a pipe buffer does not stall the child."""
        handle = ProcessHandle("head -c 200000 /dev/zero | tr '\\0' x")
        handle.start()
        assert handle.wait() == 0
        assert len(handle.get_output()) == 200000

    def test_start_twice_raises(self) -> None:
        """A handle can only be started once."""
        handle = ProcessHandle("true")
        handle.start()
        with pytest.raises(ProcessStateError, match="already started"):
            handle.start()
        handle.wait()

    def test_launch_failure_becomes_error_output(self, tmp_path: Path) -> None:
        """An OS error at launch finishes the handle with error output."""
        handle = ProcessHandle("true", cwd=tmp_path / "missing")
        handle.start()
        assert handle.is_running() is False
        assert handle.is_finished() is True
        assert handle.exit_code == 127
        assert handle.get_error_output() != ""

    def test_runs_in_given_working_directory(self, tmp_path: Path) -> None:
        """cwd is applied to the child process."""
        handle = ProcessHandle("pwd", cwd=tmp_path)
        handle.start()
        handle.wait()
        assert handle.get_output().strip() == str(tmp_path.resolve())

    def test_env_is_passed_to_child(self) -> None:
        """env replaces the child environment."""
        handle = ProcessHandle("echo $GREETING", env={"GREETING": "hi", "PATH": "/usr/bin:/bin"})
        handle.start()
        handle.wait()
        assert handle.get_output() == "hi\n"
