"""Poller data types."""

from dataclasses import dataclass
from enum import Enum

from penpard.errors import PenpardError

# Engine status string -> progress percent surfaced to the caller.
PROGRESS_BY_STATUS: dict[str, int] = {
    "queued": 0,
    "uploading": 30,
    "uploaded": 35,
    "analyzing": 50,
    "permissions": 60,
    "components": 70,
    "code_analysis": 80,
    "reporting": 90,
    "completed": 100,
}


class PollOutcome(str, Enum):
    """How a tracking session ended."""

    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class StatusSnapshot:
    """One answer from a status source."""

    status: str
    message: str | None = None


@dataclass(frozen=True)
class PollUpdate:
    """Progress report emitted once per status query."""

    scan_id: str
    status: str
    progress: int
    message: str | None = None
    attempt: int = 0
    outcome: PollOutcome | None = None
    error: PenpardError | None = None

    @property
    def is_final(self) -> bool:
        return self.outcome is not None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (PollOutcome.COMPLETED, PollOutcome.STOPPED)
