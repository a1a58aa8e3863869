"""Word document rendering with python-docx."""

import io

from docx import Document
from docx.enum.text import WD_COLOR_INDEX
from docx.shared import Pt, RGBColor

from penpard.modules.findings import SEVERITY_LABELS, SEVERITY_ORDER

from .view import FindingView, ReportView, clip, format_date, split_highlights

EVIDENCE_LIMIT = 3000

SEVERITY_RGB = {
    "critical": RGBColor(0xDC, 0x26, 0x26),
    "high": RGBColor(0xEA, 0x58, 0x0C),
    "medium": RGBColor(0xD9, 0x77, 0x06),
    "low": RGBColor(0x25, 0x63, 0xEB),
    "info": RGBColor(0x6B, 0x72, 0x80),
}


def _evidence(document, label: str, content: str, highlights: list[str]) -> None:
    document.add_paragraph(label, style="Heading 4")
    paragraph = document.add_paragraph()
    for segment, marked in split_highlights(clip(content, EVIDENCE_LIMIT), highlights):
        run = paragraph.add_run(segment)
        run.font.name = "Courier New"
        run.font.size = Pt(8)
        if marked:
            run.bold = True
            run.font.highlight_color = WD_COLOR_INDEX.YELLOW
            run.font.color.rgb = SEVERITY_RGB["critical"]


def _finding(document, finding: FindingView) -> None:
    heading = document.add_heading(level=2)
    heading.add_run(f"5.{finding.number} {finding.name} ")
    badge = heading.add_run(f"[{finding.severity_label.upper()}]")
    badge.font.color.rgb = SEVERITY_RGB.get(finding.severity, SEVERITY_RGB["info"])

    meta = [
        ("CVSS", f"{finding.cvss_score:g}" if finding.cvss_score is not None else None),
        ("Vector", finding.cvss_vector),
        ("CWE", finding.cwe),
        ("CVE", finding.cve),
    ]
    meta_text = " | ".join(f"{k}: {v}" for k, v in meta if v)
    if meta_text:
        document.add_paragraph(meta_text)

    document.add_paragraph("Description", style="Heading 4")
    document.add_paragraph(finding.description or "No description provided.")

    for label, content in (
        ("Request", finding.request),
        ("Response", finding.response),
        ("Evidence", finding.evidence),
    ):
        if content:
            _evidence(document, label, content, finding.highlights)

    if finding.remediation:
        document.add_paragraph("Remediation", style="Heading 4")
        document.add_paragraph(finding.remediation)


def render_docx(view: ReportView) -> bytes:
    document = Document()
    document.core_properties.title = f"PenPard Report {view.scan_id}"
    document.core_properties.author = "PenPard"

    document.add_heading("Security Assessment Report", level=0)
    document.add_paragraph(view.target)
    document.add_paragraph(
        f"Assessment date: {format_date(view.created_at)} | Overall risk: {view.risk.label}"
    )
    document.add_paragraph(f"Report ID: {view.scan_id}")

    document.add_heading("Table of Contents", level=1)
    for number, title in enumerate(view.sections, start=1):
        document.add_paragraph(f"{number}. {title}")

    document.add_page_break()
    document.add_heading("1. Executive Summary", level=1)
    for paragraph in view.executive_summary.split("\n\n"):
        document.add_paragraph(paragraph.strip())

    document.add_heading("Key Statistics", level=2)
    stats = [
        ("Overall Risk", f"{view.risk.label} ({view.risk.score}/10)"),
        ("Total Vulnerabilities", str(view.total)),
        ("Scan Duration", view.duration),
        ("Target", view.target),
    ]
    if view.cvss_average is not None:
        stats.append(("Average CVSS Score", f"{view.cvss_average:.1f}"))
    if view.cvss_max is not None:
        stats.append(("Highest CVSS Score", f"{view.cvss_max:g}"))
    table = document.add_table(rows=0, cols=2)
    table.style = "Light Grid Accent 1"
    for label, value in stats:
        cells = table.add_row().cells
        cells[0].text = label
        cells[1].text = value

    document.add_heading("2. Scope & Methodology", level=1)
    document.add_paragraph(view.scope)
    for number, (title, description) in enumerate(view.methodology, start=1):
        document.add_paragraph(f"{number}. {title}: {description}")
    for standard in view.standards:
        document.add_paragraph(standard, style="List Bullet")

    document.add_heading("3. Risk Overview", level=1)
    table = document.add_table(rows=1, cols=2)
    table.style = "Light Grid Accent 1"
    table.rows[0].cells[0].text = "Severity"
    table.rows[0].cells[1].text = "Count"
    for severity in SEVERITY_ORDER:
        cells = table.add_row().cells
        cells[0].text = SEVERITY_LABELS[severity]
        cells[1].text = str(view.counts[severity])

    document.add_heading("4. Findings Summary", level=1)
    if view.findings:
        table = document.add_table(rows=1, cols=4)
        table.style = "Light Grid Accent 1"
        for cell, title in zip(table.rows[0].cells, ("#", "Vulnerability", "Severity", "CVSS")):
            cell.text = title
        for finding in view.findings:
            cells = table.add_row().cells
            cells[0].text = str(finding.number)
            cells[1].text = finding.name
            cells[2].text = finding.severity_label
            cells[3].text = f"{finding.cvss_score:g}" if finding.cvss_score is not None else "N/A"
    else:
        document.add_paragraph("No vulnerabilities were identified during this assessment.")

    document.add_page_break()
    document.add_heading("5. Detailed Findings", level=1)
    if not view.findings:
        document.add_paragraph("No vulnerabilities were identified.")
    for finding in view.findings:
        _finding(document, finding)

    document.add_heading("6. Remediation Priority", level=1)
    for bucket in view.priorities:
        document.add_heading(f"{bucket.label} ({len(bucket.findings)})", level=2)
        document.add_paragraph(bucket.description)
        for finding in bucket.findings:
            document.add_paragraph(f"#{finding.number} {finding.name}", style="List Bullet")

    document.add_heading("7. Disclaimer", level=1)
    for paragraph in view.disclaimer:
        document.add_paragraph(paragraph)

    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()
