"""Scan record helpers for FindingStore."""

import json
import uuid

from sqlalchemy import update

from penpard.db.models import Scan, ScanStatus, ScanType


class ScanMixin:
    """Provide scan creation, lookup and conditional status writes."""

    def create_scan(
        self,
        target: str,
        user_id: int,
        scan_type: str = ScanType.WEB.value,
        *,
        rate_limit: int = 5,
        recursion_depth: int = 2,
        use_nuclei: bool = False,
        use_ffuf: bool = False,
        idor_users: list[dict] | None = None,
        scan_id: str | None = None,
    ) -> Scan:
        """Create a queued scan record."""
        kind = ScanType(scan_type).value
        scan = Scan(
            id=scan_id or str(uuid.uuid4()),
            user_id=user_id,
            type=kind,
            target=target,
            status=ScanStatus.QUEUED.value,
            rate_limit=rate_limit,
            recursion_depth=recursion_depth,
            use_nuclei=use_nuclei,
            use_ffuf=use_ffuf,
            idor_users_json=json.dumps(idor_users) if idor_users else None,
        )
        self.session.add(scan)
        self.session.commit()
        return scan

    def get_scan(self, scan_id: str) -> Scan | None:
        """Get a scan by id, reloading its stored state."""
        return (
            self.session.query(Scan)
            .filter_by(id=scan_id)
            .populate_existing()
            .one_or_none()
        )

    def list_scans(self, user_id: int | None = None, limit: int = 50) -> list[Scan]:
        """List scans, newest first."""
        query = self.session.query(Scan)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return query.order_by(Scan.created_at.desc()).limit(limit).all()

    def compare_and_set_status(self, scan_id: str, expected: str, values: dict) -> bool:
        """Write ``values`` only if the stored status still equals ``expected``."""
        result = self.session.execute(
            update(Scan)
            .where(Scan.id == scan_id, Scan.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    def set_phase(self, scan_id: str, phase: str) -> bool:
        """Record an engine sub-status for a running scan."""
        return self.compare_and_set_status(
            scan_id, ScanStatus.RUNNING.value, {"phase": phase}
        )
