"""Report data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from penpard.errors import UnsupportedFormat


class ReportFormat(str, Enum):
    """Artifact formats the synthesizer can produce."""

    PDF = "pdf"
    DOCX = "docx"
    PPTX = "pptx"
    JSON = "json"
    MD = "md"

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]

    @classmethod
    def parse(cls, value: "str | ReportFormat") -> "ReportFormat":
        try:
            return cls(str(getattr(value, "value", value)).lower().lstrip("."))
        except ValueError:
            raise UnsupportedFormat(f"Unsupported report format: {value}") from None


class GenerationMode(str, Enum):
    """Whether report text comes only from findings or is enhanced by the provider."""

    BASELINE = "baseline"
    LLM = "llm"

    @classmethod
    def parse(cls, value: "str | GenerationMode") -> "GenerationMode":
        raw = str(getattr(value, "value", value)).lower()
        if raw == "static":
            return cls.BASELINE
        try:
            return cls(raw)
        except ValueError:
            raise UnsupportedFormat(f"Unsupported generation mode: {value}") from None


CONTENT_TYPES = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ReportFormat.PPTX: "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ReportFormat.JSON: "application/json",
    ReportFormat.MD: "text/markdown",
}


def report_filename(scan_id: str, fmt: ReportFormat) -> str:
    return f"PenPard-Report-{scan_id}.{fmt.value}"


@dataclass(frozen=True)
class RenderedReport:
    """Synthesizer output."""

    content: bytes
    content_type: str
    filename: str


@dataclass(frozen=True)
class ReportArtifact:
    """A report handed back to a caller."""

    scan_id: str
    content: bytes
    content_type: str
    filename: str
    format: ReportFormat
    mode: GenerationMode
    cached: bool = False
    path: Path | None = None
    created_at: datetime | None = None
