"""Report row helpers for FindingStore."""

from datetime import UTC, datetime

from penpard.db.models import Report


class ReportRowMixin:
    """Provide access to the stored report row of a scan."""

    def get_report_row(self, scan_id: str) -> Report | None:
        return (
            self.session.query(Report)
            .filter_by(scan_id=scan_id)
            .populate_existing()
            .one_or_none()
        )

    def upsert_report_row(self, scan_id: str, file_path: str, fmt: str) -> Report:
        """Insert or replace the report row keyed by scan id."""
        row = self.get_report_row(scan_id)
        if row is None:
            row = Report(scan_id=scan_id)
            self.session.add(row)
        row.file_path = file_path
        row.format = fmt
        row.created_at = datetime.now(UTC)
        self.session.commit()
        return row
