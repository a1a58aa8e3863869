"""JSON report rendering."""

import json
from dataclasses import asdict

from penpard import __version__

from .view import ReportView


def render_json(view: ReportView) -> bytes:
    report_data = {
        "report_metadata": {
            "generated_at": view.generated_at.isoformat(),
            "tool": "PenPard",
            "version": __version__,
        },
        "scan": {
            "id": view.scan_id,
            "target": view.target,
            "type": view.scan_type,
            "status": view.status,
            "created_at": view.created_at.isoformat() if view.created_at else None,
            "completed_at": view.completed_at.isoformat() if view.completed_at else None,
            "duration": view.duration,
        },
        "summary": {
            "risk": {"label": view.risk.label, "score": view.risk.score},
            "total_findings": view.total,
            "by_severity": view.counts,
            "cvss_average": view.cvss_average,
            "cvss_max": view.cvss_max,
            "executive_summary": view.executive_summary,
            "summary_enhanced": view.summary_enhanced,
        },
        "findings": [asdict(finding) for finding in view.findings],
        "remediation_priority": [
            {
                "label": bucket.label,
                "finding_ids": [finding.id for finding in bucket.findings],
            }
            for bucket in view.priorities
        ],
    }
    return json.dumps(report_data, indent=2).encode("utf-8")
