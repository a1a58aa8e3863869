"""Finding helpers for FindingStore."""

from penpard.db.models import Finding, Severity
from penpard.modules.findings import normalize_severity


class FindingMixin:
    """Provide read access to findings and the engine-side insert."""

    def add_finding(
        self,
        scan_id: str,
        name: str,
        severity: str,
        description: str = "",
        *,
        cvss_score: float | None = None,
        cvss_vector: str | None = None,
        cwe: str | None = None,
        cve: str | None = None,
        request: str | None = None,
        response: str | None = None,
        evidence: str | None = None,
        screenshot_path: str | None = None,
        remediation: str | None = None,
    ) -> Finding:
        """Persist a finding reported by the analysis engine."""
        if self.get_scan(scan_id) is None:
            raise ValueError(f"Scan not found: {scan_id}")

        finding = Finding(
            scan_id=scan_id,
            name=name,
            severity=Severity(normalize_severity(severity)).value,
            description=description,
            cvss_score=cvss_score,
            cvss_vector=cvss_vector,
            cwe=cwe,
            cve=cve,
            request=request,
            response=response,
            evidence=evidence,
            screenshot_path=screenshot_path,
            remediation=remediation,
        )
        self.session.add(finding)
        self.session.commit()
        return finding

    def get_findings(self, scan_id: str) -> list[Finding]:
        """Get all findings of a scan in insertion order."""
        return (
            self.session.query(Finding)
            .filter_by(scan_id=scan_id)
            .order_by(Finding.id.asc())
            .all()
        )
