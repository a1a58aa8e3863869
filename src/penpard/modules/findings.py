"""Helpers for grouping and ranking findings."""

from typing import Any

SEVERITY_ORDER = ["critical", "high", "medium", "low", "info"]

SEVERITY_LABELS = {
    "critical": "Critical",
    "high": "High",
    "medium": "Medium",
    "low": "Low",
    "info": "Informational",
}


def normalize_severity(value: Any) -> str:
    severity = str(getattr(value, "value", value) or "").lower()
    return "info" if severity == "informational" else severity


def group_by_severity(findings: list[Any]) -> dict[str, list[Any]]:
    """Group findings by normalized severity."""
    grouped = {severity: [] for severity in SEVERITY_ORDER}
    for finding in findings:
        severity = normalize_severity(getattr(finding, "severity", ""))
        if severity in grouped:
            grouped[severity].append(finding)
    return grouped


def severity_counts(findings: list[Any]) -> dict[str, int]:
    return {severity: len(items) for severity, items in group_by_severity(findings).items()}


def top_by_cvss(findings: list[Any], limit: int = 5) -> list[Any]:
    """Highest CVSS first; ties keep store order."""
    return sorted(findings, key=lambda f: -(f.cvss_score or 0.0))[:limit]
