"""Console and JSON output for cmdpool CLI.

Human-readable text goes to the Rich console (stderr); ``--json`` mode
prints one JSON document per command on stdout instead.
"""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console

from .models import PoolSummary


@dataclass
class OutputContext:
    """Where and how command results are printed."""

    console: Console
    json_mode: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print a console-only message; silent in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Print ``data`` in JSON mode, else ``message`` if there is one."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Report a failure; ``data`` is merged into the JSON document."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Report success; ``data`` is merged into the JSON document."""
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")

    def report(self, summary: PoolSummary) -> bool:
        """Print the outcome of a pool session.

        Returns:
            True if no process failed
        """
        data = summary.model_dump(mode="json") | {"failed": summary.failed}
        message = (
            f"Completed {summary.completed}/{summary.total} command(s), "
            f"{summary.failed} failed"
        )
        if summary.ok:
            self.success(message, data)
            return True
        self.error(message, data)
        if summary.aborted:
            self.print(
                f"Stopped after the first failure: {summary.pending} not started, "
                f"{summary.active} still active",
                style="yellow",
            )
        return False


# Set by the cli.py main callback
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context, or a plain console one outside the CLI."""
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    global _ctx
    _ctx = ctx
