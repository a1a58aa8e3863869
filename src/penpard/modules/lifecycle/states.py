"""Scan status graph."""

from penpard.db.models import ScanStatus

TRANSITIONS: dict[ScanStatus, frozenset[ScanStatus]] = {
    ScanStatus.QUEUED: frozenset({ScanStatus.RUNNING, ScanStatus.FAILED, ScanStatus.STOPPED}),
    ScanStatus.RUNNING: frozenset(
        {ScanStatus.COMPLETED, ScanStatus.FAILED, ScanStatus.STOPPED}
    ),
    ScanStatus.COMPLETED: frozenset(),
    ScanStatus.FAILED: frozenset(),
    ScanStatus.STOPPED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, nxt in TRANSITIONS.items() if not nxt)
REPORT_ELIGIBLE_STATUSES = frozenset({ScanStatus.COMPLETED, ScanStatus.STOPPED})

STOPPED_BY_USER_MESSAGE = "Scan stopped by user"


def parse_status(value: str | ScanStatus) -> ScanStatus | None:
    try:
        return ScanStatus(value)
    except ValueError:
        return None


def is_terminal(status: str | ScanStatus) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def is_valid_transition(current: str | ScanStatus, target: str | ScanStatus) -> bool:
    source = parse_status(current)
    destination = parse_status(target)
    if source is None or destination is None:
        return False
    return destination in TRANSITIONS[source]
