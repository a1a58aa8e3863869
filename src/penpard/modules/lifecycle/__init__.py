"""Scan lifecycle state machine."""

from .manager import LifecycleManager, is_report_eligible
from .states import (
    REPORT_ELIGIBLE_STATUSES,
    STOPPED_BY_USER_MESSAGE,
    TERMINAL_STATUSES,
    TRANSITIONS,
    is_terminal,
    is_valid_transition,
)

__all__ = [
    "LifecycleManager",
    "REPORT_ELIGIBLE_STATUSES",
    "STOPPED_BY_USER_MESSAGE",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "is_report_eligible",
    "is_terminal",
    "is_valid_transition",
]
