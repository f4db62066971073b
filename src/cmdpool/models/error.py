"""Failure record for a finished process."""

from pydantic import BaseModel, ConfigDict, Field


class ProcessError(BaseModel):
    """A process that finished with non-empty error output.

    Attributes:
        command: Command line the process ran with (after rewriting).
        error: Captured standard error text.
        exit_code: Exit status, if the process got far enough to have one.
    """

    model_config = ConfigDict(frozen=True)

    command: str = Field(description="Command line that was executed")
    error: str = Field(description="Captured standard error output")
    exit_code: int | None = Field(default=None, description="Process exit status")
