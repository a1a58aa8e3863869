"""Reporting module for PenPard."""

from .cache import ReportCache, is_cacheable
from .models import GenerationMode, RenderedReport, ReportArtifact, ReportFormat
from .service import Caller, ReportService
from .storage import ArtifactStorage
from .synthesizer import ReportSynthesizer

__all__ = [
    "ArtifactStorage",
    "Caller",
    "GenerationMode",
    "RenderedReport",
    "ReportArtifact",
    "ReportCache",
    "ReportFormat",
    "ReportService",
    "ReportSynthesizer",
    "is_cacheable",
]
