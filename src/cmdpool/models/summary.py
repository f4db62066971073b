"""Summary model for a finished scheduling session."""

from pydantic import BaseModel, Field

from .error import ProcessError


class PoolSummary(BaseModel):
    """Outcome of a ProcessPool session."""

    total: int = Field(description="Number of commands given to the pool")
    completed: int = Field(default=0, description="Processes reaped as finished")
    pending: int = Field(default=0, description="Processes never started")
    active: int = Field(default=0, description="Processes left in the active set")
    aborted: bool = Field(default=False, description="True if fail-fast stopped the run")
    errors: list[ProcessError] = Field(default_factory=list, description="Failures in order")

    @property
    def failed(self) -> int:
        """Number of recorded failures."""
        return len(self.errors)

    @property
    def ok(self) -> bool:
        """True if the session recorded no failures."""
        return not self.errors
