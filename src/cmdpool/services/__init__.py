"""External process integrations for cmdpool.

This package provides the pieces that touch the operating system:
- process: ProcessHandle, one external command run through the shell
- executable: host interpreter and entry-point discovery
"""

from .executable import find_entry_point, find_executable
from .process import ProcessHandle, ProcessStateError

__all__ = [
    "ProcessHandle",
    "ProcessStateError",
    "find_entry_point",
    "find_executable",
]
