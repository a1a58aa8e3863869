"""Analysis job polling."""

from .models import PROGRESS_BY_STATUS, PollOutcome, PollUpdate, StatusSnapshot
from .poller import AnalysisPoller
from .session import TrackingSession, start_tracking
from .sources import HttpStatusSource, StatusSource, StoreStatusSource

__all__ = [
    "AnalysisPoller",
    "HttpStatusSource",
    "PROGRESS_BY_STATUS",
    "PollOutcome",
    "PollUpdate",
    "StatusSnapshot",
    "StatusSource",
    "StoreStatusSource",
    "TrackingSession",
    "start_tracking",
]
