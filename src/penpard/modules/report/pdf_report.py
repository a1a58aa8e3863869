"""PDF report rendering with reportlab."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Flowable,
    HRFlowable,
    KeepTogether,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from penpard.modules.findings import SEVERITY_LABELS, SEVERITY_ORDER

from .view import FindingView, ReportView, clip, format_date, split_highlights

logger = logging.getLogger(__name__)

EVIDENCE_LIMIT = 3000

SEVERITY_HEX = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#d97706",
    "low": "#2563eb",
    "info": "#6b7280",
    "none": "#6b7280",
}

SEVERITY_COLORS = {severity: colors.HexColor(value) for severity, value in SEVERITY_HEX.items()}

SEVERITY_BG = {
    "critical": colors.HexColor("#fef2f2"),
    "high": colors.HexColor("#fff7ed"),
    "medium": colors.HexColor("#fffbeb"),
    "low": colors.HexColor("#eff6ff"),
    "info": colors.HexColor("#f9fafb"),
}

PRIMARY = colors.HexColor("#1e293b")
MUTED = colors.HexColor("#64748b")
LINE = colors.HexColor("#e2e8f0")

TABLE_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f1f5f9")),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#334155")),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ("TOPPADDING", (0, 0), (-1, -1), 6),
    ("GRID", (0, 0), (-1, -1), 0.5, LINE),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
]


def _get_styles():
    """Build custom paragraph styles."""
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        "ReportTitle", parent=styles["Title"], fontSize=28, spaceAfter=12, textColor=PRIMARY,
    ))
    styles.add(ParagraphStyle(
        "ReportSubtitle", parent=styles["Normal"], fontSize=12, textColor=MUTED, spaceAfter=6,
    ))
    styles.add(ParagraphStyle(
        "SectionHeading", parent=styles["Heading1"], fontSize=18, spaceBefore=6,
        spaceAfter=12, textColor=PRIMARY,
    ))
    styles.add(ParagraphStyle(
        "SubHeading", parent=styles["Heading3"], fontSize=12, spaceBefore=10, spaceAfter=6,
        textColor=colors.HexColor("#334155"),
    ))
    styles.add(ParagraphStyle("Body", parent=styles["Normal"], fontSize=10, leading=15))
    styles.add(ParagraphStyle(
        "BodySmall", parent=styles["Normal"], fontSize=9, leading=13, textColor=MUTED,
    ))
    styles.add(ParagraphStyle(
        "Evidence", parent=styles["Code"], fontSize=7.5, leading=9.5,
        backColor=colors.HexColor("#f8fafc"), borderPadding=4,
    ))
    return styles


def _text(value: str | None) -> str:
    return escape(value or "").replace("\n", "<br/>")


def _highlighted(text: str, highlights: list[str]) -> str:
    """Escape text for a Paragraph, marking highlights in red."""
    parts = []
    for segment, marked in split_highlights(text, highlights):
        body = escape(segment)
        if marked:
            body = f'<font color="#b91c1c" backColor="#fee2e2"><b>{body}</b></font>'
        parts.append(body)
    return "".join(parts).replace("\n", "<br/>")


class AnnotatedScreenshot(Flowable):
    """A screenshot scaled to the frame width with red highlight boxes drawn on top."""

    def __init__(self, path: str, boxes, max_width: float, max_height: float = 4 * inch):
        super().__init__()
        self.path = path
        self.boxes = boxes
        self.reader = ImageReader(path)
        image_width, image_height = self.reader.getSize()
        self.scale = min(max_width / image_width, max_height / image_height, 1.0)
        self.image_height = image_height
        self.width = image_width * self.scale
        self.height = image_height * self.scale

    def wrap(self, available_width, available_height):
        return self.width, self.height

    def draw(self):
        canvas = self.canv
        canvas.drawImage(self.reader, 0, 0, self.width, self.height)
        canvas.setStrokeColor(colors.HexColor("#dc2626"))
        canvas.setLineWidth(2)
        for box in self.boxes:
            x = box.x * self.scale
            y = (self.image_height - box.y - box.height) * self.scale
            canvas.rect(x, y, box.width * self.scale, box.height * self.scale, stroke=1, fill=0)
            if box.label:
                canvas.setFillColor(colors.HexColor("#dc2626"))
                canvas.setFont("Helvetica-Bold", 7)
                canvas.drawString(x + 2, y + box.height * self.scale + 2, box.label[:60])


def _screenshot(finding: FindingView) -> AnnotatedScreenshot | None:
    """Load the finding's screenshot; unreadable images are left out of the report."""
    if not finding.screenshot_path or not Path(finding.screenshot_path).is_file():
        return None
    try:
        return AnnotatedScreenshot(
            finding.screenshot_path, finding.screenshot_highlights, 6.5 * inch
        )
    except Exception as e:
        logger.warning("Failed to embed screenshot %s: %s", finding.screenshot_path, e)
        return None


def _severity_chart(view: ReportView) -> Drawing:
    drawing = Drawing(6 * inch, 1.8 * inch)
    chart = VerticalBarChart()
    chart.x, chart.y = 30, 20
    chart.width, chart.height = 5.4 * inch, 1.3 * inch
    chart.data = [[view.counts[s] for s in SEVERITY_ORDER]]
    chart.categoryAxis.categoryNames = [SEVERITY_LABELS[s] for s in SEVERITY_ORDER]
    chart.valueAxis.valueMin = 0
    chart.valueAxis.valueMax = max([*view.counts.values(), 1])
    chart.bars.strokeColor = None
    for index, severity in enumerate(SEVERITY_ORDER):
        chart.bars[(0, index)].fillColor = SEVERITY_COLORS[severity]
    drawing.add(chart)
    return drawing


def _page_decorations(view: ReportView):
    def draw(canvas, doc):
        canvas.saveState()
        width, height = doc.pagesize
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(MUTED)
        if doc.page > 1:
            canvas.drawString(doc.leftMargin, height - 12 * mm, "PenPard Security Assessment Report")
            canvas.drawRightString(width - doc.rightMargin, height - 12 * mm, view.target[:70])
        canvas.drawString(doc.leftMargin, 10 * mm, "Confidential")
        canvas.drawRightString(width - doc.rightMargin, 10 * mm, f"Page {doc.page}")
        canvas.restoreState()

    return draw


class PdfReportBuilder:
    """Builds the sectioned PDF document for one report view."""

    def __init__(self, view: ReportView):
        self.view = view
        self.styles = _get_styles()
        self.story: list = []

    def _section(self, number: int) -> None:
        self.story.append(PageBreak())
        self.story.append(
            Paragraph(f"{number}. {self.view.sections[number - 1]}", self.styles["SectionHeading"])
        )

    def _table(self, rows: list[list], widths: list[float], extra: list | None = None) -> Table:
        table = Table(rows, colWidths=widths, repeatRows=1)
        table.setStyle(TableStyle(TABLE_STYLE + (extra or [])))
        return table

    def build_cover(self) -> None:
        view = self.view
        s = self.styles
        self.story += [
            Spacer(1, 1.5 * inch),
            Paragraph("Security Assessment Report", s["ReportTitle"]),
            Paragraph(escape(view.target), s["ReportSubtitle"]),
            HRFlowable(width="100%", thickness=1, color=LINE),
            Spacer(1, 20),
            Paragraph(f"Assessment type: {escape(view.scan_type.capitalize())}", s["Body"]),
            Paragraph(f"Assessment date: {format_date(view.created_at)}", s["Body"]),
            Paragraph(
                f'Overall risk: <font color="{SEVERITY_HEX.get(view.risk.label.lower(), "#64748b")}">'
                f"<b>{view.risk.label}</b></font>",
                s["Body"],
            ),
            Spacer(1, 2.5 * inch),
            Paragraph(f"Report ID: {escape(view.scan_id)}", s["BodySmall"]),
            Paragraph(f"Generated: {view.generated_at.isoformat()}", s["BodySmall"]),
        ]

    def build_table_of_contents(self) -> None:
        self.story.append(PageBreak())
        self.story.append(Paragraph("Table of Contents", self.styles["SectionHeading"]))
        for number, title in enumerate(self.view.sections, start=1):
            self.story.append(Paragraph(f"{number}. {escape(title)}", self.styles["Body"]))

    def build_executive_summary(self) -> None:
        view = self.view
        s = self.styles
        self._section(1)
        for paragraph in view.executive_summary.split("\n\n"):
            self.story.append(Paragraph(_text(paragraph.strip()), s["Body"]))
            self.story.append(Spacer(1, 6))

        self.story.append(Paragraph("Key Statistics", s["SubHeading"]))
        rows = [
            ["Metric", "Value"],
            ["Overall Risk", f"{view.risk.label} ({view.risk.score}/10)"],
            ["Total Vulnerabilities", str(view.total)],
            ["Scan Duration", view.duration],
            ["Target", Paragraph(escape(view.target), s["BodySmall"])],
        ]
        if view.cvss_average is not None:
            rows.append(["Average CVSS Score", f"{view.cvss_average:.1f}"])
        if view.cvss_max is not None:
            rows.append(["Highest CVSS Score", f"{view.cvss_max:g}"])
        self.story.append(self._table(rows, [2.5 * inch, 3.5 * inch]))

    def build_scope_methodology(self) -> None:
        s = self.styles
        self._section(2)
        self.story.append(Paragraph("Scope", s["SubHeading"]))
        self.story.append(Paragraph(escape(self.view.scope), s["Body"]))
        self.story.append(Paragraph("Methodology", s["SubHeading"]))
        for number, (title, description) in enumerate(self.view.methodology, start=1):
            self.story.append(Paragraph(f"<b>{number}. {escape(title)}</b>", s["Body"]))
            self.story.append(Paragraph(escape(description), s["BodySmall"]))
            self.story.append(Spacer(1, 4))
        self.story.append(Paragraph("Standards Reference", s["SubHeading"]))
        for standard in self.view.standards:
            self.story.append(Paragraph(f"&bull; {escape(standard)}", s["BodySmall"]))

    def build_risk_overview(self) -> None:
        view = self.view
        self._section(3)
        self.story.append(_severity_chart(view))
        self.story.append(Spacer(1, 12))
        rows = [["Severity", "Count"]] + [
            [SEVERITY_LABELS[severity], str(view.counts[severity])]
            for severity in SEVERITY_ORDER
        ]
        extra = [
            ("BACKGROUND", (0, i), (-1, i), SEVERITY_BG[severity])
            for i, severity in enumerate(SEVERITY_ORDER, start=1)
        ]
        self.story.append(self._table(rows, [2 * inch, 1.5 * inch], extra))

    def build_findings_summary(self) -> None:
        s = self.styles
        self._section(4)
        if not self.view.findings:
            self.story.append(
                Paragraph("No vulnerabilities were identified during this assessment.", s["Body"])
            )
            return
        rows: list[list] = [["#", "Vulnerability", "Severity", "CVSS"]]
        extra = []
        for row_index, finding in enumerate(self.view.findings, start=1):
            rows.append([
                str(finding.number),
                Paragraph(escape(clip(finding.name, 90)), s["BodySmall"]),
                finding.severity_label,
                f"{finding.cvss_score:g}" if finding.cvss_score is not None else "N/A",
            ])
            extra.append(
                ("TEXTCOLOR", (2, row_index), (2, row_index), SEVERITY_COLORS[finding.severity])
            )
        self.story.append(
            self._table(rows, [0.4 * inch, 4 * inch, 1 * inch, 0.7 * inch], extra)
        )

    def _finding_block(self, finding: FindingView) -> list:
        s = self.styles
        color = SEVERITY_HEX.get(finding.severity, "#64748b")
        block: list = [
            Paragraph(
                f"5.{finding.number} {escape(finding.name)} "
                f'<font color="{color}">[{finding.severity_label.upper()}]</font>',
                s["SubHeading"],
            )
        ]
        meta = [
            ("CVSS", f"{finding.cvss_score:g}" if finding.cvss_score is not None else None),
            ("Vector", finding.cvss_vector),
            ("CWE", finding.cwe),
            ("CVE", finding.cve),
        ]
        meta_text = " &nbsp;|&nbsp; ".join(f"<b>{k}:</b> {escape(v)}" for k, v in meta if v)
        if meta_text:
            block.append(Paragraph(meta_text, s["BodySmall"]))

        block.append(Paragraph("<b>Description</b>", s["Body"]))
        block.append(Paragraph(_text(finding.description or "No description provided."), s["Body"]))

        for label, content in (
            ("Request", finding.request),
            ("Response", finding.response),
            ("Evidence", finding.evidence),
        ):
            if content:
                block.append(Paragraph(f"<b>{label}</b>", s["Body"]))
                block.append(
                    Paragraph(
                        _highlighted(clip(content, EVIDENCE_LIMIT), finding.highlights),
                        s["Evidence"],
                    )
                )
                block.append(Spacer(1, 4))

        screenshot = _screenshot(finding)
        if screenshot is not None:
            block.append(Paragraph("<b>Screenshot</b>", s["Body"]))
            block.append(screenshot)

        if finding.remediation:
            block.append(Paragraph("<b>Remediation</b>", s["Body"]))
            block.append(Paragraph(_text(finding.remediation), s["Body"]))
        block.append(HRFlowable(width="100%", thickness=0.5, color=LINE, spaceBefore=8))
        return block

    def build_detailed_findings(self) -> None:
        self._section(5)
        if not self.view.findings:
            self.story.append(Paragraph("No vulnerabilities were identified.", self.styles["Body"]))
            return
        for finding in self.view.findings:
            block = self._finding_block(finding)
            self.story.append(KeepTogether(block[:3]))
            self.story.extend(block[3:])

    def build_remediation_priority(self) -> None:
        s = self.styles
        self._section(6)
        for bucket in self.view.priorities:
            self.story.append(
                Paragraph(f"{escape(bucket.label)} ({len(bucket.findings)})", s["SubHeading"])
            )
            self.story.append(Paragraph(escape(bucket.description), s["BodySmall"]))
            for finding in bucket.findings:
                self.story.append(
                    Paragraph(f"&bull; #{finding.number} {escape(finding.name)}", s["Body"])
                )

    def build_disclaimer(self) -> None:
        self._section(7)
        for paragraph in self.view.disclaimer:
            self.story.append(Paragraph(escape(paragraph), self.styles["BodySmall"]))
            self.story.append(Spacer(1, 8))
        self.story.append(Spacer(1, 20))
        self.story.append(Paragraph("<b>End of Report</b>", self.styles["Body"]))

    def build(self) -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=letter,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=f"PenPard Report {self.view.scan_id}",
            author="PenPard",
        )
        self.build_cover()
        self.build_table_of_contents()
        self.build_executive_summary()
        self.build_scope_methodology()
        self.build_risk_overview()
        self.build_findings_summary()
        self.build_detailed_findings()
        self.build_remediation_priority()
        self.build_disclaimer()
        decorate = _page_decorations(self.view)
        doc.build(self.story, onFirstPage=decorate, onLaterPages=decorate)
        return buf.getvalue()


def render_pdf(view: ReportView) -> bytes:
    return PdfReportBuilder(view).build()
