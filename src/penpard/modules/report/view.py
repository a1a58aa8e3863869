"""Format-independent content of a report."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from penpard.modules.enhance.models import EnhancementResult, FindingAnnotation, HighlightBox
from penpard.modules.findings import (
    SEVERITY_LABELS,
    SEVERITY_ORDER,
    normalize_severity,
    severity_counts,
)

SECTION_TITLES = [
    "Executive Summary",
    "Scope & Methodology",
    "Risk Overview",
    "Findings Summary",
    "Detailed Findings",
    "Remediation Priority",
    "Disclaimer",
]

METHODOLOGY_PHASES = [
    (
        "Reconnaissance",
        "Automated discovery of endpoints, parameters, and application structure.",
    ),
    (
        "Mapping & Analysis",
        "Analysis of application architecture, authentication flows, and attack surface.",
    ),
    (
        "Vulnerability Testing",
        "Targeted testing for OWASP Top 10 vulnerabilities including SQL Injection, "
        "Cross-Site Scripting, Broken Access Control, SSRF and IDOR.",
    ),
    (
        "Exploitation & Validation",
        "Suspected vulnerabilities were re-tested with additional payloads to confirm "
        "exploitability and reduce false positives.",
    ),
    (
        "Reporting",
        "Findings were classified using CVSS scoring and mapped to CWE/CVE identifiers "
        "where applicable.",
    ),
]

STANDARDS = [
    "OWASP Testing Guide v4.2",
    "OWASP Top 10 (2021)",
    "OWASP API Security Top 10 (2023)",
    "CVSS v4.0 Scoring Framework",
    "CWE (Common Weakness Enumeration)",
    "PTES (Penetration Testing Execution Standard)",
]

# (label, severities, description)
PRIORITY_BUCKETS = [
    (
        "Immediate (24-48 hours)",
        ("critical",),
        "These vulnerabilities pose an immediate threat and can lead to full system "
        "compromise, data breach, or service disruption.",
    ),
    (
        "Short-term (1-2 weeks)",
        ("high",),
        "High-severity findings that could be exploited to gain unauthorized access or "
        "extract sensitive data.",
    ),
    (
        "Medium-term (1-3 months)",
        ("medium",),
        "Moderate-risk issues that should be addressed as part of the regular development "
        "cycle.",
    ),
    (
        "Long-term / Hardening",
        ("low", "info"),
        "Low-risk findings and informational items for defense-in-depth improvements.",
    ),
]

DISCLAIMER = [
    "This report was generated with the assistance of PenPard, an AI-powered penetration "
    "testing tool.",
    'This report is provided "as is" for informational purposes only. The findings are '
    "based on the state of the application at the time of testing and may not reflect the "
    "current security posture.",
    "Automated testing may not identify all vulnerabilities. The absence of findings does "
    "not guarantee the application is free from security issues. Findings should be "
    "validated by qualified security professionals before remediation is applied in "
    "production environments.",
    "This report is confidential and intended solely for the authorized recipient.",
    "The testing was conducted with proper authorization. The assessors assume no "
    "liability for any damage, loss, or disruption resulting from the use of information "
    "contained in this report.",
]


_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


@dataclass(frozen=True)
class RiskRating:
    label: str
    score: int


@dataclass
class FindingView:
    """One finding as rendered, with any enhanced text already applied."""

    id: int
    number: int
    name: str
    severity: str
    description: str
    remediation: str
    description_enhanced: bool = False
    remediation_enhanced: bool = False
    cvss_score: float | None = None
    cvss_vector: str | None = None
    cwe: str | None = None
    cve: str | None = None
    request: str | None = None
    response: str | None = None
    evidence: str | None = None
    highlights: list[str] = field(default_factory=list)
    screenshot_path: str | None = None
    screenshot_highlights: list[HighlightBox] = field(default_factory=list)

    @property
    def severity_label(self) -> str:
        return SEVERITY_LABELS.get(self.severity, self.severity.capitalize())


@dataclass
class PriorityBucket:
    label: str
    description: str
    findings: list[FindingView]


@dataclass
class ReportView:
    scan_id: str
    target: str
    scan_type: str
    status: str
    created_at: datetime | None
    completed_at: datetime | None
    generated_at: datetime
    duration: str
    risk: RiskRating
    counts: dict[str, int]
    executive_summary: str
    summary_enhanced: bool
    findings: list[FindingView]
    priorities: list[PriorityBucket]
    cvss_average: float | None = None
    cvss_max: float | None = None
    sections: list[str] = field(default_factory=lambda: list(SECTION_TITLES))
    methodology: list[tuple[str, str]] = field(default_factory=lambda: list(METHODOLOGY_PHASES))
    standards: list[str] = field(default_factory=lambda: list(STANDARDS))
    disclaimer: list[str] = field(default_factory=lambda: list(DISCLAIMER))

    @property
    def total(self) -> int:
        return len(self.findings)

    @property
    def scope(self) -> str:
        return f"The assessment targeted {self.target}."


def risk_rating(counts: dict[str, int]) -> RiskRating:
    """Overall risk from severity counts."""
    if counts.get("critical", 0) > 0:
        return RiskRating("CRITICAL", 10)
    if counts.get("high", 0) > 2:
        return RiskRating("HIGH", 8)
    if counts.get("high", 0) > 0:
        return RiskRating("HIGH", 7)
    if counts.get("medium", 0) > 3:
        return RiskRating("MEDIUM", 5)
    if counts.get("medium", 0) > 0:
        return RiskRating("MEDIUM", 4)
    if sum(counts.values()) > 0:
        return RiskRating("LOW", 2)
    return RiskRating("NONE", 0)


def format_duration(start: datetime | None, end: datetime | None) -> str:
    if start is None or end is None:
        return "N/A"
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    seconds = int((end - start).total_seconds())
    if seconds < 0:
        return "N/A"
    minutes, secs = divmod(seconds, 60)
    if minutes > 60:
        hours, minutes = divmod(minutes, 60)
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def format_date(value: datetime | None) -> str:
    return value.strftime("%b %d, %Y") if value else "N/A"


def static_summary(target: str, created_at: datetime | None, counts: dict[str, int]) -> str:
    total = sum(counts.values())
    if total == 0:
        return (
            f"A security assessment was performed on {target}. No vulnerabilities were "
            "identified during the testing period. However, the absence of findings does not "
            "guarantee the application is free of vulnerabilities."
        )
    noun = "vulnerability" if total == 1 else "vulnerabilities"
    return (
        f"A security assessment was performed on {target} on {format_date(created_at)}. "
        f"The assessment identified {total} {noun} across the application: "
        f"{counts['critical']} Critical, {counts['high']} High, {counts['medium']} Medium, "
        f"{counts['low']} Low, and {counts['info']} Informational. "
        f"The overall risk level is assessed as {risk_rating(counts).label}."
    )


def _finding_view(
    number: int,
    finding: Any,
    enhancement: EnhancementResult | None,
    annotation: FindingAnnotation | None,
) -> FindingView:
    description = finding.description or ""
    remediation = finding.remediation or ""
    description_enhanced = remediation_enhanced = False
    if enhancement is not None:
        if finding.id in enhancement.descriptions:
            description = enhancement.descriptions[finding.id]
            description_enhanced = True
        if finding.id in enhancement.remediations:
            remediation = enhancement.remediations[finding.id]
            remediation_enhanced = True

    view = FindingView(
        id=finding.id,
        number=number,
        name=printable(finding.name),
        severity=normalize_severity(finding.severity),
        description=printable(description),
        remediation=printable(remediation),
        description_enhanced=description_enhanced,
        remediation_enhanced=remediation_enhanced,
        cvss_score=finding.cvss_score,
        cvss_vector=finding.cvss_vector,
        cwe=printable(finding.cwe) or None,
        cve=printable(finding.cve) or None,
        request=printable(finding.request) or None,
        response=printable(finding.response) or None,
        evidence=printable(finding.evidence) or None,
    )
    if annotation is not None:
        view.highlights = [printable(h) for h in annotation.text_highlights]
        view.screenshot_path = annotation.screenshot_path
        view.screenshot_highlights = list(annotation.screenshot_highlights)
    return view


def build_report_view(
    scan: Any,
    findings: list[Any],
    enhancement: EnhancementResult | None = None,
    annotations: dict[int, FindingAnnotation] | None = None,
    generated_at: datetime | None = None,
) -> ReportView:
    """Assemble everything a renderer needs; findings keep store order."""
    annotations = annotations if annotations is not None else (
        enhancement.annotations if enhancement is not None else {}
    )
    views = [
        _finding_view(number, finding, enhancement, annotations.get(finding.id))
        for number, finding in enumerate(findings, start=1)
    ]
    counts = severity_counts(findings)
    scores = [f.cvss_score for f in findings if f.cvss_score]

    summary_enhanced = enhancement is not None and bool(enhancement.summary)
    summary = (
        enhancement.summary
        if summary_enhanced
        else static_summary(scan.target, scan.created_at, counts)
    )

    priorities = [
        PriorityBucket(label, description, [v for v in views if v.severity in severities])
        for label, severities, description in PRIORITY_BUCKETS
    ]

    return ReportView(
        scan_id=scan.id,
        target=printable(scan.target),
        scan_type=scan.type,
        status=scan.status,
        created_at=scan.created_at,
        completed_at=scan.completed_at,
        generated_at=generated_at or datetime.now(UTC),
        duration=format_duration(scan.created_at, scan.completed_at),
        risk=risk_rating(counts),
        counts={severity: counts[severity] for severity in SEVERITY_ORDER},
        executive_summary=printable(summary),
        summary_enhanced=summary_enhanced,
        findings=views,
        priorities=priorities,
        cvss_average=round(sum(scores) / len(scores), 1) if scores else None,
        cvss_max=max(scores) if scores else None,
    )


def printable(text: str | None) -> str:
    """Drop control characters that XML-based formats cannot hold."""
    if not text:
        return ""
    return _XML_INVALID.sub("", text)


def clip(text: str | None, limit: int) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else text[: limit - 3] + "..."


def split_highlights(text: str, highlights: list[str]) -> list[tuple[str, bool]]:
    """Split text into (segment, highlighted) pieces; longer highlights win."""
    if not text:
        return []
    needles = sorted({h for h in highlights if h}, key=len, reverse=True)
    if not needles:
        return [(text, False)]

    pieces: list[tuple[str, bool]] = []
    position = 0
    while position < len(text):
        best: tuple[int, str] | None = None
        for needle in needles:
            index = text.find(needle, position)
            if index != -1 and (best is None or index < best[0]):
                best = (index, needle)
        if best is None:
            pieces.append((text[position:], False))
            break
        index, needle = best
        if index > position:
            pieces.append((text[position:index], False))
        pieces.append((needle, True))
        position = index + len(needle)
    return pieces
