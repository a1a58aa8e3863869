"""Authoritative scan lifecycle state machine."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from penpard.db.models import Scan, ScanStatus
from penpard.errors import IllegalTransition, NotFound

from .states import (
    REPORT_ELIGIBLE_STATUSES,
    STOPPED_BY_USER_MESSAGE,
    is_valid_transition,
    parse_status,
)

if TYPE_CHECKING:
    from penpard.modules.store import FindingStore

logger = logging.getLogger(__name__)


def is_report_eligible(scan: Scan) -> bool:
    """True only for completed or stopped scans."""
    return parse_status(scan.status) in REPORT_ELIGIBLE_STATUSES


class LifecycleManager:
    """Applies status transitions to scans in the finding store."""

    def __init__(self, store: FindingStore):
        self.store = store

    def _require_scan(self, scan_id: str) -> Scan:
        scan = self.store.get_scan(scan_id)
        if scan is None:
            raise NotFound(f"Scan not found: {scan_id}")
        return scan

    def transition(
        self, scan_id: str, new_status: str | ScanStatus, *, error: str | None = None
    ) -> Scan:
        """
        Move a scan to ``new_status``.

        The write is conditional on the status read beforehand, so two
        concurrent transitions from the same source cannot both succeed.

        Raises:
            NotFound: unknown scan.
            IllegalTransition: terminal source, target outside the graph,
                missing error message for ``failed``, or a lost race.
        """
        scan = self._require_scan(scan_id)
        current = scan.status
        target = parse_status(new_status)

        if target is None or not is_valid_transition(current, target):
            raise IllegalTransition(
                f"Cannot move scan {scan_id} from {current} to {new_status}",
                current=current,
                target=str(getattr(new_status, "value", new_status)),
            )

        values: dict = {"status": target.value}
        if target is ScanStatus.FAILED:
            if not error:
                raise IllegalTransition(
                    f"Scan {scan_id} cannot fail without an error message",
                    current=current,
                    target=target.value,
                )
            values["error_message"] = error
        elif error:
            values["error_message"] = error

        if target in (ScanStatus.COMPLETED, ScanStatus.STOPPED, ScanStatus.FAILED):
            values["completed_at"] = datetime.now(UTC)
        if target is not ScanStatus.RUNNING:
            values["phase"] = None

        if not self.store.compare_and_set_status(scan_id, current, values):
            latest = self._require_scan(scan_id)
            raise IllegalTransition(
                f"Scan {scan_id} changed to {latest.status} before {target.value} was applied",
                current=latest.status,
                target=target.value,
            )

        logger.info("Scan %s: %s -> %s", scan_id, current, target.value)
        return self._require_scan(scan_id)

    def start(self, scan_id: str) -> Scan:
        return self.transition(scan_id, ScanStatus.RUNNING)

    def complete(self, scan_id: str) -> Scan:
        return self.transition(scan_id, ScanStatus.COMPLETED)

    def fail(self, scan_id: str, error: str) -> Scan:
        return self.transition(scan_id, ScanStatus.FAILED, error=error)

    def stop(self, scan_id: str) -> Scan:
        """Caller-initiated early termination."""
        return self.transition(scan_id, ScanStatus.STOPPED, error=STOPPED_BY_USER_MESSAGE)

    def record_phase(self, scan_id: str, phase: str) -> Scan:
        """Record an engine sub-status; only legal while the scan is running."""
        scan = self._require_scan(scan_id)
        if scan.status != ScanStatus.RUNNING.value or not self.store.set_phase(scan_id, phase):
            raise IllegalTransition(
                f"Scan {scan_id} is not running; cannot record phase {phase}",
                current=scan.status,
                target=ScanStatus.RUNNING.value,
            )
        logger.debug("Scan %s phase: %s", scan_id, phase)
        return self._require_scan(scan_id)

    def is_report_eligible(self, scan: Scan) -> bool:
        return is_report_eligible(scan)
