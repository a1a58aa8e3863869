"""Slide deck rendering with python-pptx."""

import io

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.util import Inches, Pt

from penpard.modules.findings import SEVERITY_LABELS, SEVERITY_ORDER

from .view import FindingView, ReportView, clip, format_date

TITLE_LAYOUT = 0
CONTENT_LAYOUT = 1

SEVERITY_RGB = {
    "critical": RGBColor(0xDC, 0x26, 0x26),
    "high": RGBColor(0xEA, 0x58, 0x0C),
    "medium": RGBColor(0xD9, 0x77, 0x06),
    "low": RGBColor(0x25, 0x63, 0xEB),
    "info": RGBColor(0x6B, 0x72, 0x80),
}


def _bullets(presentation, title: str, lines: list[str], size: int = 16):
    slide = presentation.slides.add_slide(presentation.slide_layouts[CONTENT_LAYOUT])
    slide.shapes.title.text = title
    frame = slide.placeholders[1].text_frame
    frame.word_wrap = True
    for index, line in enumerate(lines or [""]):
        paragraph = frame.paragraphs[0] if index == 0 else frame.add_paragraph()
        paragraph.text = line
        paragraph.font.size = Pt(size)
    return slide


def _finding_slide(presentation, finding: FindingView) -> None:
    slide = presentation.slides.add_slide(presentation.slide_layouts[CONTENT_LAYOUT])
    slide.shapes.title.text = clip(f"{finding.number}. {finding.name}", 80)
    frame = slide.placeholders[1].text_frame
    frame.word_wrap = True

    header = frame.paragraphs[0]
    run = header.add_run()
    run.text = finding.severity_label.upper()
    run.font.bold = True
    run.font.size = Pt(14)
    run.font.color.rgb = SEVERITY_RGB.get(finding.severity, SEVERITY_RGB["info"])
    if finding.cvss_score is not None:
        score = header.add_run()
        score.text = f"  CVSS {finding.cvss_score:g}"
        score.font.size = Pt(14)

    for text in (
        clip(finding.description or "No description provided.", 600),
        f"Remediation: {clip(finding.remediation, 400)}" if finding.remediation else "",
    ):
        if text:
            paragraph = frame.add_paragraph()
            paragraph.text = text
            paragraph.font.size = Pt(12)


def render_pptx(view: ReportView) -> bytes:
    presentation = Presentation()
    presentation.core_properties.title = f"PenPard Report {view.scan_id}"
    presentation.slide_width = Inches(13.333)
    presentation.slide_height = Inches(7.5)

    cover = presentation.slides.add_slide(presentation.slide_layouts[TITLE_LAYOUT])
    cover.shapes.title.text = "Security Assessment Report"
    cover.placeholders[1].text = (
        f"{view.target}\n{format_date(view.created_at)} | Overall risk: {view.risk.label}"
    )

    _bullets(presentation, "Executive Summary", [clip(view.executive_summary, 1200)], size=14)
    _bullets(
        presentation,
        "Risk Overview",
        [f"Overall risk: {view.risk.label} ({view.risk.score}/10)"]
        + [f"{SEVERITY_LABELS[s]}: {view.counts[s]}" for s in SEVERITY_ORDER]
        + [f"Scan duration: {view.duration}"],
    )
    _bullets(
        presentation,
        "Findings Summary",
        [
            f"#{f.number} [{f.severity_label}] {clip(f.name, 70)}"
            for f in view.findings[:12]
        ]
        or ["No vulnerabilities were identified during this assessment."],
        size=14,
    )
    for finding in view.findings:
        _finding_slide(presentation, finding)
    _bullets(
        presentation,
        "Remediation Priority",
        [f"{bucket.label}: {len(bucket.findings)} finding(s)" for bucket in view.priorities],
    )
    _bullets(presentation, "Disclaimer", [clip(p, 200) for p in view.disclaimer], size=11)

    buf = io.BytesIO()
    presentation.save(buf)
    return buf.getvalue()
