"""Shared test fixtures for cmdpool tests."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cmdpool.models import ProcessError


class RecordingSink:
    """Progress sink that keeps every call for inspection."""

    def __init__(self) -> None:
        self.total: int | None = None
        self.messages: list[str] = []
        self.advanced = 0
        self.warnings: list[ProcessError] = []
        self.finished = False
        self.calls: list[str] = []

    def start(self, total: int) -> None:
        self.total = total
        self.calls.append("start")

    def set_message(self, message: str) -> None:
        self.messages.append(message)
        self.calls.append("set_message")

    def advance(self, step: int = 1) -> None:
        self.advanced += step
        self.calls.append("advance")

    def warn(self, error: ProcessError) -> None:
        self.warnings.append(error)
        self.calls.append("warn")

    def finish(self) -> None:
        self.finished = True
        self.calls.append("finish")


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def sink() -> RecordingSink:
    """Create a recording progress sink."""
    return RecordingSink()


@pytest.fixture
def in_tmp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Change cwd to a temporary directory for the duration of the test."""
    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)
