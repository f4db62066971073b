"""cmdpool: bounded-concurrency runner for external commands."""

__version__ = "0.1.0"
