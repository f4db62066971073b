"""Host executable discovery.

The default command rewrite re-invokes the current interpreter with the
current entry point, so each scheduled command runs as a sub-command of
the host program.
"""

import os
import shutil
import sys


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_executable() -> str | None:
    """Find the interpreter that should run rewritten commands.

    Returns:
        Path to the running interpreter, or the first python on PATH,
        or None if nothing runnable can be found
    """
    if sys.executable and _is_executable(sys.executable):
        return sys.executable
    for name in ("python3", "python"):
        found = shutil.which(name)
        if found:
            return found
    return None


def find_entry_point() -> str:
    """Return the script path the host process was started with."""
    return sys.argv[0] if sys.argv else ""
