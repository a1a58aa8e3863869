"""Markdown report rendering."""

from penpard.modules.findings import SEVERITY_LABELS, SEVERITY_ORDER

from .view import FindingView, ReportView, clip, format_date

EVIDENCE_LIMIT = 3000


def render_finding_markdown(finding: FindingView) -> str:
    """Render a single finding as Markdown."""
    md = f"### 5.{finding.number} {finding.name}\n\n**Severity:** {finding.severity_label}\n"
    if finding.cvss_score is not None:
        md += f"**CVSS:** {finding.cvss_score:g}"
        md += f" (`{finding.cvss_vector}`)\n" if finding.cvss_vector else "\n"
    if finding.cwe:
        md += f"**CWE:** {finding.cwe}\n"
    if finding.cve:
        md += f"**CVE:** {finding.cve}\n"

    md += f"\n**Description:**\n{finding.description or 'No description provided.'}\n\n"

    for label, content in (
        ("Request", finding.request),
        ("Response", finding.response),
        ("Evidence", finding.evidence),
    ):
        if content:
            md += f"**{label}:**\n```\n{clip(content, EVIDENCE_LIMIT)}\n```\n\n"

    if finding.highlights:
        md += "**Key indicators:** " + ", ".join(f"`{h}`" for h in finding.highlights[:6]) + "\n\n"

    if finding.remediation:
        md += f"**Remediation:**\n{finding.remediation}\n\n"

    md += "---\n\n"
    return md


def render_markdown(view: ReportView) -> bytes:
    md = f"""# Security Assessment Report

**Target:** {view.target}
**Assessment date:** {format_date(view.created_at)}
**Overall risk:** {view.risk.label} ({view.risk.score}/10)
**Report ID:** {view.scan_id}

---

## 1. Executive Summary

{view.executive_summary}

## 2. Scope & Methodology

{view.scope}

"""
    for number, (title, description) in enumerate(view.methodology, start=1):
        md += f"{number}. **{title}**: {description}\n"

    md += "\n## 3. Risk Overview\n\n| Severity | Count |\n|----------|-------|\n"
    for severity in SEVERITY_ORDER:
        md += f"| {SEVERITY_LABELS[severity]} | {view.counts[severity]} |\n"
    md += f"| **Total** | **{view.total}** |\n\n"

    md += "## 4. Findings Summary\n\n"
    if view.findings:
        md += "| # | Vulnerability | Severity | CVSS |\n|---|---|---|---|\n"
        for f in view.findings:
            score = f"{f.cvss_score:g}" if f.cvss_score is not None else "N/A"
            md += f"| {f.number} | {f.name} | {f.severity_label} | {score} |\n"
    else:
        md += "*No vulnerabilities were identified during this assessment.*\n"

    md += "\n## 5. Detailed Findings\n\n"
    for finding in view.findings:
        md += render_finding_markdown(finding)

    md += "## 6. Remediation Priority\n\n"
    for bucket in view.priorities:
        md += f"### {bucket.label} ({len(bucket.findings)})\n\n{bucket.description}\n\n"
        for finding in bucket.findings:
            md += f"- #{finding.number} {finding.name}\n"
        md += "\n"

    md += "## 7. Disclaimer\n\n" + "\n\n".join(view.disclaimer) + "\n"
    md += f"\n---\n\n*Generated by PenPard on {view.generated_at.isoformat()}*\n"
    return md.encode("utf-8")
