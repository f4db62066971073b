"""Command rewrite hooks.

A rewrite hook turns the command text a caller submitted into the final
command line that is started. Hooks are pure: they return new text and
never touch the handle.
"""

from collections.abc import Callable

CommandRewrite = Callable[[str], str]


def prefix_rewrite(prefix: str | None, sub_path: str | None = None) -> CommandRewrite:
    """Build a hook that prepends an invocation prefix and sub-path.

    Args:
        prefix: Executable (or wrapper) placed first on the command line
        sub_path: Entry point placed between the prefix and the command

    Returns:
        Function mapping ``cmd`` to ``"<prefix> <sub_path> <cmd>"``;
        empty parts are left out rather than producing double spaces
    """
    head = " ".join(part for part in (prefix, sub_path) if part)

    def rewrite(command: str) -> str:
        return f"{head} {command}" if head else command

    return rewrite


def identity_rewrite(command: str) -> str:
    """Run commands exactly as given."""
    return command
