"""Report cache: only the baseline PDF without image processing is stored."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .models import GenerationMode, RenderedReport, ReportFormat
from .storage import ArtifactStorage

if TYPE_CHECKING:
    from penpard.modules.store import FindingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedReport:
    path: Path
    content: bytes
    created_at: datetime | None


def is_cacheable(fmt: ReportFormat, mode: GenerationMode, image_processing: bool) -> bool:
    """Enhanced and alternative-format renderings are always regenerated."""
    return fmt is ReportFormat.PDF and mode is GenerationMode.BASELINE and not image_processing


class ReportCache:
    def __init__(self, store: FindingStore, storage: ArtifactStorage):
        self.finding_store = store
        self.storage = storage

    def lookup(
        self,
        scan_id: str,
        fmt: ReportFormat,
        mode: GenerationMode,
        image_processing: bool = False,
    ) -> CachedReport | None:
        """Return the stored artifact for a cacheable key, or None on a miss."""
        if not is_cacheable(fmt, mode, image_processing):
            return None
        row = self.finding_store.get_report_row(scan_id)
        if row is None or row.format != fmt.value:
            return None
        if not self.storage.exists(row.file_path):
            logger.info("Cached report for scan %s is missing on disk: %s", scan_id, row.file_path)
            return None
        logger.debug("Report cache hit for scan %s", scan_id)
        return CachedReport(
            path=Path(row.file_path),
            content=self.storage.read(row.file_path),
            created_at=row.created_at,
        )

    def store(
        self,
        scan_id: str,
        fmt: ReportFormat,
        mode: GenerationMode,
        image_processing: bool,
        rendered: RenderedReport,
    ) -> Path | None:
        """Upsert the artifact for a cacheable key; returns its path, or None if not cached."""
        if not is_cacheable(fmt, mode, image_processing):
            return None
        path = self.storage.write(rendered.content, rendered.filename)
        self.finding_store.upsert_report_row(scan_id, str(path), fmt.value)
        logger.info("Cached %s report for scan %s at %s", fmt.value, scan_id, path)
        return path
