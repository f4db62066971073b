"""Pydantic data models for cmdpool.

This package defines the data structures shared by the scheduler,
the lock manager and the CLI:
- Failure records collected during a session (ProcessError)
- Lock file records (Lock)
- Session outcome reports (PoolSummary)

Example:
    >>> from cmdpool.models import ProcessError
    >>> ProcessError(command="sh -c 'exit 1'", error="boom").model_dump()
"""

from .error import ProcessError
from .lock import Lock
from .summary import PoolSummary

__all__ = [
    "Lock",
    "PoolSummary",
    "ProcessError",
]
