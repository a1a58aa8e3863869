"""Tests for report views and multi-format synthesis."""

import base64
import io
import json
import logging
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest
from docx import Document
from pptx import Presentation

from penpard.errors import GenerationFailure, UnsupportedFormat
from penpard.modules.enhance import EnhancementResult, FindingAnnotation, HighlightBox
from penpard.modules.report import ReportFormat, ReportSynthesizer
from penpard.modules.report.view import (
    build_report_view,
    format_duration,
    risk_rating,
    split_highlights,
    static_summary,
)

GENERATED_AT = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def _counts(**values):
    counts = {"critical": 0, "high": 0, "medium": 0, "low": 0, "info": 0}
    counts.update(values)
    return counts


class TestReportView:
    @pytest.mark.parametrize(
        ("counts", "label", "score"),
        [
            (_counts(critical=1), "CRITICAL", 10),
            (_counts(high=3), "HIGH", 8),
            (_counts(high=1), "HIGH", 7),
            (_counts(medium=4), "MEDIUM", 5),
            (_counts(medium=1), "MEDIUM", 4),
            (_counts(low=2, info=1), "LOW", 2),
            (_counts(), "NONE", 0),
        ],
    )
    def test_risk_rating(self, counts, label, score):
        rating = risk_rating(counts)

        assert (rating.label, rating.score) == (label, score)

    def test_duration(self):
        start = datetime(2025, 1, 1, 10, 0, 0)
        assert format_duration(start, start + timedelta(minutes=5, seconds=7)) == "5m 7s"
        assert format_duration(start, start + timedelta(hours=2, minutes=3)) == "2h 3m 0s"
        assert format_duration(start, None) == "N/A"

    def test_static_summary(self):
        assert "No vulnerabilities were identified" in static_summary("t", None, _counts())
        summary = static_summary("https://x.test", None, _counts(critical=1, low=1))
        assert "identified 2 vulnerabilities" in summary
        assert "1 Critical, 0 High, 0 Medium, 1 Low, and 0 Informational" in summary
        assert "CRITICAL" in summary

    def test_overlay_falls_back_per_finding(self, store, completed_scan):
        findings = store.get_findings(completed_scan.id)
        enhancement = EnhancementResult(
            descriptions={findings[0].id: "Enhanced SQLi description"},
            remediations={findings[1].id: "Enhanced XSS remediation"},
        )

        view = build_report_view(completed_scan, findings, enhancement, generated_at=GENERATED_AT)

        first, second, third = view.findings
        assert (first.description, first.description_enhanced) == (
            "Enhanced SQLi description",
            True,
        )
        assert first.remediation == "Use parameterized queries."
        assert second.description == "Search term is reflected unescaped."
        assert second.remediation == "Enhanced XSS remediation"
        assert third.description == "Server header discloses version."
        assert not view.summary_enhanced
        assert view.executive_summary.startswith("A security assessment was performed")

    def test_view_statistics(self, store, completed_scan):
        findings = store.get_findings(completed_scan.id)

        view = build_report_view(completed_scan, findings, generated_at=GENERATED_AT)

        assert [f.number for f in view.findings] == [1, 2, 3]
        assert view.counts == _counts(critical=1, high=1, low=1)
        assert view.risk.label == "CRITICAL"
        assert view.cvss_max == 9.8
        assert view.cvss_average == pytest.approx(6.8)
        assert [len(b.findings) for b in view.priorities] == [1, 1, 0, 1]
        assert view.findings[2].severity_label == "Low"

    def test_split_highlights(self):
        segments = split_highlights("id=1 OR 1=1-- done", ["1=1"])

        assert segments == [("id=1 OR ", False), ("1=1", True), ("-- done", False)]
        assert split_highlights("plain", []) == [("plain", False)]


class TestReportSynthesizer:
    def test_pdf(self, store, completed_scan):
        rendered = ReportSynthesizer().synthesize(
            completed_scan, store.get_findings(completed_scan.id), "pdf"
        )

        assert rendered.content.startswith(b"%PDF")
        assert rendered.content_type == "application/pdf"
        assert rendered.filename == f"PenPard-Report-{completed_scan.id}.pdf"

    def test_pdf_without_findings(self, store, sample_scan):
        rendered = ReportSynthesizer().synthesize(sample_scan, [], ReportFormat.PDF)

        assert rendered.content.startswith(b"%PDF")

    def test_docx_sections_and_enhanced_summary(self, store, completed_scan):
        enhancement = EnhancementResult(summary="Executive prose written by the provider.")

        rendered = ReportSynthesizer().synthesize(
            completed_scan, store.get_findings(completed_scan.id), "docx", enhancement
        )

        document = Document(io.BytesIO(rendered.content))
        headings = [p.text for p in document.paragraphs if p.style.name.startswith("Heading")]
        for title in (
            "1. Executive Summary",
            "2. Scope & Methodology",
            "3. Risk Overview",
            "4. Findings Summary",
            "5. Detailed Findings",
            "6. Remediation Priority",
            "7. Disclaimer",
        ):
            assert title in headings
        body = "\n".join(p.text for p in document.paragraphs)
        assert "Executive prose written by the provider." in body

    def test_pptx(self, store, completed_scan):
        rendered = ReportSynthesizer().synthesize(
            completed_scan, store.get_findings(completed_scan.id), "pptx"
        )

        presentation = Presentation(io.BytesIO(rendered.content))
        texts = [
            shape.text_frame.text
            for slide in presentation.slides
            for shape in slide.shapes
            if shape.has_text_frame
        ]
        assert any("SQL Injection in login" in text for text in texts)
        assert len(presentation.slides) >= 3

    @pytest.mark.parametrize("fmt", ["docx", "pptx", "pdf"])
    def test_binary_response_body(self, sample_scan, fmt):
        finding = SimpleNamespace(
            id=1,
            name="Binary\x0b download",
            severity="medium",
            description="Served\x00 file.",
            remediation=None,
            cvss_score=None,
            cvss_vector=None,
            cwe=None,
            cve=None,
            request="GET /download HTTP/1.1",
            response="HTTP/1.1 200 OK\n\n\x00\x1bbinary body",
            evidence="\x07marker",
            screenshot_path=None,
        )

        rendered = ReportSynthesizer().synthesize(sample_scan, [finding], fmt)

        if fmt == "docx":
            document = Document(io.BytesIO(rendered.content))
            body = "\n".join(p.text for p in document.paragraphs)
            assert "HTTP/1.1 200 OK\n\nbinary body" in body
            assert "Binary download" in body
            assert "marker" in body
        else:
            assert rendered.content

    def test_pdf_embeds_annotated_screenshot(self, store, completed_scan, temp_dir):
        screenshot = temp_dir / "login.png"
        screenshot.write_bytes(PNG_1X1)
        findings = store.get_findings(completed_scan.id)
        annotations = {
            findings[0].id: FindingAnnotation(
                screenshot_path=str(screenshot),
                screenshot_highlights=[HighlightBox(0, 0, 1, 1, "payload")],
            )
        }

        rendered = ReportSynthesizer().synthesize(
            completed_scan, findings, "pdf", annotations=annotations
        )

        assert rendered.content.startswith(b"%PDF")
        assert b"/Subtype /Image" in rendered.content

    def test_pdf_skips_unreadable_screenshot(self, store, completed_scan, temp_dir, caplog):
        screenshot = temp_dir / "broken.png"
        screenshot.write_bytes(b"not an image")
        findings = store.get_findings(completed_scan.id)
        annotations = {findings[0].id: FindingAnnotation(screenshot_path=str(screenshot))}

        with caplog.at_level(logging.WARNING, logger="penpard.modules.report.pdf_report"):
            rendered = ReportSynthesizer().synthesize(
                completed_scan, findings, "pdf", annotations=annotations
            )

        assert rendered.content.startswith(b"%PDF")
        assert b"/Subtype /Image" not in rendered.content
        assert "Failed to embed screenshot" in caplog.text

    def test_json_keeps_store_order_and_highlights(self, store, completed_scan):
        findings = store.get_findings(completed_scan.id)
        annotations = {findings[0].id: FindingAnnotation(["1=1"])}

        rendered = ReportSynthesizer().synthesize(
            completed_scan, findings, "json", annotations=annotations, generated_at=GENERATED_AT
        )

        data = json.loads(rendered.content)
        assert [f["name"] for f in data["findings"]] == [
            "SQL Injection in login",
            "Reflected XSS in search",
            "Verbose Server Banner",
        ]
        assert data["findings"][0]["highlights"] == ["1=1"]
        assert data["report_metadata"]["generated_at"] == GENERATED_AT.isoformat()
        assert data["summary"]["risk"] == {"label": "CRITICAL", "score": 10}

    def test_markdown(self, store, completed_scan):
        rendered = ReportSynthesizer().synthesize(
            completed_scan, store.get_findings(completed_scan.id), "md"
        )

        text = rendered.content.decode()
        assert text.startswith("# Security Assessment Report")
        assert "SQL Injection in login" in text
        assert rendered.content_type == "text/markdown"

    def test_unknown_format(self, store, completed_scan):
        with pytest.raises(UnsupportedFormat):
            ReportSynthesizer().synthesize(completed_scan, [], "xlsx")

    def test_renderer_errors_are_wrapped(self, store, completed_scan):
        def broken(view):
            raise KeyError("severity")

        synthesizer = ReportSynthesizer({ReportFormat.MD: broken})

        with pytest.raises(GenerationFailure):
            synthesizer.synthesize(completed_scan, [], "md")
        with pytest.raises(GenerationFailure):
            synthesizer.synthesize(completed_scan, [], "pdf")

    def test_works_with_plain_objects(self):
        scan = SimpleNamespace(
            id="scan-x",
            target="mobile.apk",
            type="mobile",
            status="completed",
            created_at=None,
            completed_at=None,
        )
        finding = SimpleNamespace(
            id=1,
            name="Hardcoded key",
            severity="Informational",
            description="A key is embedded.",
            remediation=None,
            cvss_score=None,
            cvss_vector=None,
            cwe=None,
            cve=None,
            request=None,
            response=None,
            evidence=None,
            screenshot_path=None,
        )

        rendered = ReportSynthesizer().synthesize(scan, [finding], "md")

        assert "Hardcoded key" in rendered.content.decode()
