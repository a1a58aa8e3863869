"""Renders report artifacts in every supported format."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from penpard.errors import GenerationFailure
from penpard.modules.enhance.models import EnhancementResult, FindingAnnotation

from .docx_report import render_docx
from .json_report import render_json
from .markdown_report import render_markdown
from .models import RenderedReport, ReportFormat, report_filename
from .pdf_report import render_pdf
from .pptx_report import render_pptx
from .view import ReportView, build_report_view

logger = logging.getLogger(__name__)

Renderer = Callable[[ReportView], bytes]

RENDERERS: dict[ReportFormat, Renderer] = {
    ReportFormat.PDF: render_pdf,
    ReportFormat.DOCX: render_docx,
    ReportFormat.PPTX: render_pptx,
    ReportFormat.JSON: render_json,
    ReportFormat.MD: render_markdown,
}


class ReportSynthesizer:
    """Builds one artifact from a scan, its findings and optional enhanced text."""

    def __init__(self, renderers: dict[ReportFormat, Renderer] | None = None):
        self.renderers = dict(RENDERERS if renderers is None else renderers)

    def synthesize(
        self,
        scan: Any,
        findings: list[Any],
        fmt: ReportFormat | str = ReportFormat.PDF,
        enhancement: EnhancementResult | None = None,
        annotations: dict[int, FindingAnnotation] | None = None,
        generated_at: datetime | None = None,
    ) -> RenderedReport:
        """
        Render the report.

        Raises:
            UnsupportedFormat: unknown format string.
            GenerationFailure: the renderer failed; no retry is attempted.
        """
        fmt = ReportFormat.parse(fmt)
        renderer = self.renderers.get(fmt)
        if renderer is None:
            raise GenerationFailure(f"No renderer registered for {fmt.value}")

        try:
            view = build_report_view(scan, findings, enhancement, annotations, generated_at)
            content = renderer(view)
        except Exception as e:
            logger.error("Rendering %s report for scan %s failed: %s", fmt.value, scan.id, e)
            raise GenerationFailure(f"Failed to generate {fmt.value} report: {e}") from e

        return RenderedReport(
            content=content,
            content_type=fmt.content_type,
            filename=report_filename(scan.id, fmt),
        )
