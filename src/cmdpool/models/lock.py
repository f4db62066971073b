"""Lock model for single-instance job execution.

The record is written into the lock file so that a second invocation
can report who is holding the lock.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Exclusive-run lock record.

    Attributes:
        name: Logical lock name (command identifier plus suffix).
        pid: Process ID of the lock holder.
        command: Command line of the holding process.
        started_at: When the lock was acquired.
    """

    name: str = Field(description="Logical lock name")
    pid: int = Field(description="Process ID holding the lock")
    command: str = Field(default="", description="Command line of the holder")
    started_at: datetime = Field(default_factory=datetime.now)
