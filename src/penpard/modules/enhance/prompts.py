"""Prompt builders for report enhancement."""

from typing import Any

from penpard.modules.findings import SEVERITY_ORDER, severity_counts, top_by_cvss

REQUEST_LIMIT = 1500
RESPONSE_LIMIT = 1000
EVIDENCE_LIMIT = 500
HIGHLIGHT_EVIDENCE_LIMIT = 2000
SUMMARY_TOP_FINDINGS = 5

DESCRIPTION_SYSTEM_PROMPT = (
    "You are a senior penetration tester writing formal security assessment reports. "
    "Write clear, professional vulnerability descriptions."
)
REMEDIATION_SYSTEM_PROMPT = (
    "You are a senior application security engineer providing specific, actionable "
    "remediation advice."
)
SUMMARY_SYSTEM_PROMPT = (
    "You are a cybersecurity consultant writing executive summaries for penetration "
    "test reports. Be concise and professional."
)
HIGHLIGHT_SYSTEM_PROMPT = (
    "You are a security report annotation assistant. You ONLY respond with valid JSON arrays."
)
SCREENSHOT_SYSTEM_PROMPT = (
    "You are a security report screenshot annotation assistant. You ONLY respond with "
    "valid JSON arrays of coordinate objects."
)


def _na(value: Any) -> str:
    return str(value) if value not in (None, "") else "N/A"


def _clip(value: Any, limit: int) -> str:
    return str(value)[:limit] if value else ""


def description_prompt(finding: Any) -> str:
    request = _clip(finding.request, REQUEST_LIMIT)
    response = _clip(finding.response, RESPONSE_LIMIT)
    evidence = _clip(finding.evidence, EVIDENCE_LIMIT)

    sections = [
        "You are a senior penetration tester writing a professional security assessment "
        "report. Rewrite and enhance the following vulnerability description to be clear, "
        "comprehensive, and suitable for both technical and executive audiences.",
        "VULNERABILITY:\n"
        f"- Name: {finding.name}\n"
        f"- Severity: {finding.severity}\n"
        f"- CVSS Score: {_na(finding.cvss_score)}\n"
        f"- CWE: {_na(finding.cwe)}\n"
        f"- CVE: {_na(finding.cve)}",
        f"ORIGINAL DESCRIPTION:\n{finding.description or 'No description provided.'}",
    ]
    if request:
        sections.append(f"HTTP REQUEST EVIDENCE:\n{request}")
    if response:
        sections.append(f"HTTP RESPONSE EVIDENCE:\n{response}")
    if evidence:
        sections.append(f"ADDITIONAL EVIDENCE:\n{evidence}")
    sections.append(
        "REQUIREMENTS:\n"
        "1. Start with a clear 1-2 sentence summary of what the vulnerability is\n"
        "2. Explain how it was discovered, referencing the request/response if available\n"
        "3. Describe the potential business impact\n"
        "4. Be specific: reference actual endpoints, parameters and payloads\n"
        "5. Keep it professional and suitable for a formal security report\n"
        "6. Maximum 300 words\n"
        "7. Do NOT include remediation advice (that is a separate section)\n\n"
        "Write the enhanced description as plain text (no markdown, no headers, "
        "no bullet points)."
    )
    return "\n\n".join(sections)


def remediation_prompt(finding: Any) -> str:
    return (
        "You are a senior application security engineer. Enhance the following remediation "
        "advice to be more specific, actionable, and include code examples where "
        "appropriate.\n\n"
        "VULNERABILITY:\n"
        f"- Name: {finding.name}\n"
        f"- Severity: {finding.severity}\n"
        f"- CWE: {_na(finding.cwe)}\n\n"
        f"ORIGINAL REMEDIATION:\n{finding.remediation}\n\n"
        "REQUIREMENTS:\n"
        "1. Make it specific and actionable\n"
        "2. Include a brief code example if relevant (e.g. parameterized queries for SQLi, "
        "output encoding for XSS)\n"
        "3. Reference industry standards (OWASP, CIS, etc.) where applicable\n"
        "4. Keep it under 200 words\n"
        "5. Write as plain text\n\n"
        "Write the enhanced remediation as plain text."
    )


def format_top_findings(findings: list[Any], limit: int = SUMMARY_TOP_FINDINGS) -> str:
    lines = [
        f"- [{str(f.severity).upper()}] {f.name} (CVSS: {_na(f.cvss_score)})"
        for f in top_by_cvss(findings, limit)
    ]
    return "\n".join(lines)


def summary_prompt(scan: Any, findings: list[Any]) -> str:
    counts = severity_counts(findings)
    count_line = ", ".join(
        f"{severity.capitalize()}: {counts[severity]}" for severity in SEVERITY_ORDER
    )
    created = scan.created_at.isoformat() if scan.created_at else "N/A"
    return (
        "You are a cybersecurity consultant writing an executive summary for a penetration "
        "test report. Write a concise, professional executive summary.\n\n"
        "TEST DETAILS:\n"
        f"- Target: {scan.target}\n"
        f"- Test Type: {scan.type} application penetration test\n"
        f"- Date: {created}\n"
        f"- Total Findings: {len(findings)}\n"
        f"  - {count_line}\n\n"
        f"TOP FINDINGS:\n{format_top_findings(findings) or 'No findings.'}\n\n"
        "REQUIREMENTS:\n"
        "1. 2-3 paragraphs maximum\n"
        "2. Start with the overall risk assessment\n"
        "3. Highlight the most critical issues and their potential business impact\n"
        "4. End with a brief recommendation\n"
        "5. Professional tone suitable for C-level executives\n"
        "6. Do NOT use bullet points or headers; write flowing prose\n"
        "7. Maximum 200 words\n\n"
        "Write the executive summary as plain text."
    )


def highlight_prompt(finding: Any) -> str:
    request = _clip(finding.request, HIGHLIGHT_EVIDENCE_LIMIT) or "N/A"
    response = _clip(finding.response, HIGHLIGHT_EVIDENCE_LIMIT) or "N/A"
    evidence = _clip(finding.evidence, EVIDENCE_LIMIT)
    extra = f"\n\nADDITIONAL EVIDENCE:\n{evidence}" if evidence else ""
    return (
        "Identify the EXACT text strings that should be highlighted with red boxes in a "
        "penetration test report to draw attention to the key evidence of a vulnerability.\n\n"
        "VULNERABILITY:\n"
        f"- Name: {finding.name}\n"
        f"- Severity: {finding.severity}\n"
        f"- CVSS: {_na(finding.cvss_score)}\n"
        f"- CWE: {_na(finding.cwe)}\n"
        f"- Description: {_clip(finding.description, EVIDENCE_LIMIT)}\n\n"
        f"HTTP REQUEST:\n{request}\n\n"
        f"HTTP RESPONSE:\n{response}{extra}\n\n"
        "Highlight the payload, the vulnerable parameter or endpoint, response indicators "
        "proving the issue, and the response time for time-based attacks. Each string must "
        "appear verbatim in the request or response. Maximum 6 highlights, 5-50 characters "
        "each.\n\n"
        'Example output: ["\' OR 1=1--", "mysql_fetch_array()", "200 OK"]\n\n'
        "Respond with ONLY a valid JSON array. No explanation."
    )


def screenshot_prompt(finding: Any) -> str:
    return (
        "You are analyzing a screenshot of a web page that contains a vulnerability.\n\n"
        "VULNERABILITY:\n"
        f"- Name: {finding.name}\n"
        f"- Severity: {finding.severity}\n"
        f"- Description: {_clip(finding.description, 300)}\n\n"
        "Identify the areas of the attached image that should be highlighted with red boxes: "
        "input fields holding the payload, visible error messages or leaked data, the URL "
        "bar showing the vulnerable endpoint.\n\n"
        "Return a JSON array of objects with pixel coordinates:\n"
        '[{"x": 100, "y": 200, "width": 300, "height": 50, "label": "SQL injection in '
        'login field"}]\n\n'
        "x,y is the top-left corner. Maximum 4 highlight areas. "
        "Respond with ONLY a valid JSON array."
    )
