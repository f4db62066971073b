"""CLI command implementations for cmdpool.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .init import init
from .run import read_commands, run

__all__ = [
    "init",
    "read_commands",
    "run",
]
