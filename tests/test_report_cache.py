"""Tests for report caching and artifact storage."""

import pytest

from penpard.modules.report import (
    ArtifactStorage,
    GenerationMode,
    RenderedReport,
    ReportCache,
    ReportFormat,
    is_cacheable,
)


def _rendered(scan_id: str, content: bytes = b"%PDF-1.4 test") -> RenderedReport:
    return RenderedReport(
        content=content,
        content_type="application/pdf",
        filename=f"PenPard-Report-{scan_id}.pdf",
    )


class TestCacheKey:
    @pytest.mark.parametrize("fmt", list(ReportFormat))
    @pytest.mark.parametrize("mode", list(GenerationMode))
    @pytest.mark.parametrize("image_processing", [False, True])
    def test_only_baseline_pdf_without_images_is_cacheable(self, fmt, mode, image_processing):
        expected = (
            fmt is ReportFormat.PDF and mode is GenerationMode.BASELINE and not image_processing
        )
        assert is_cacheable(fmt, mode, image_processing) is expected


class TestArtifactStorage:
    def test_write_replaces_previous_file(self, temp_dir):
        storage = ArtifactStorage(temp_dir / "reports")

        first = storage.write(b"one", "report.pdf")
        second = storage.write(b"two", "report.pdf")

        assert first == second
        assert storage.read(second) == b"two"
        assert [p.name for p in (temp_dir / "reports").iterdir()] == ["report.pdf"]

    def test_filename_cannot_escape_root(self, temp_dir):
        storage = ArtifactStorage(temp_dir / "reports")

        path = storage.write(b"x", "../../outside.pdf")

        assert path.parent == temp_dir / "reports"


class TestReportCache:
    def test_miss_then_hit(self, store, storage, completed_scan):
        cache = ReportCache(store, storage)
        assert cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.BASELINE) is None

        path = cache.store(
            completed_scan.id,
            ReportFormat.PDF,
            GenerationMode.BASELINE,
            False,
            _rendered(completed_scan.id),
        )

        hit = cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.BASELINE)
        assert hit is not None
        assert hit.path == path
        assert hit.content == b"%PDF-1.4 test"
        assert store.get_report_row(completed_scan.id).file_path == str(path)

    def test_non_cacheable_keys_are_not_stored(self, store, storage, completed_scan):
        cache = ReportCache(store, storage)

        for fmt, mode, images in [
            (ReportFormat.DOCX, GenerationMode.BASELINE, False),
            (ReportFormat.PDF, GenerationMode.LLM, False),
            (ReportFormat.PDF, GenerationMode.BASELINE, True),
        ]:
            assert cache.store(completed_scan.id, fmt, mode, images, _rendered("x")) is None

        assert store.get_report_row(completed_scan.id) is None
        assert not storage.root.exists() or list(storage.root.iterdir()) == []

    def test_lookup_ignores_non_cacheable_keys(self, store, storage, completed_scan):
        cache = ReportCache(store, storage)
        cache.store(
            completed_scan.id,
            ReportFormat.PDF,
            GenerationMode.BASELINE,
            False,
            _rendered(completed_scan.id),
        )

        assert cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.LLM) is None
        assert (
            cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.BASELINE, True)
            is None
        )

    def test_missing_file_is_a_miss(self, store, storage, completed_scan):
        cache = ReportCache(store, storage)
        path = cache.store(
            completed_scan.id,
            ReportFormat.PDF,
            GenerationMode.BASELINE,
            False,
            _rendered(completed_scan.id),
        )
        path.unlink()

        assert cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.BASELINE) is None

    def test_store_upserts_single_row(self, store, storage, completed_scan):
        cache = ReportCache(store, storage)
        for content in (b"%PDF-1 first", b"%PDF-1 second"):
            cache.store(
                completed_scan.id,
                ReportFormat.PDF,
                GenerationMode.BASELINE,
                False,
                _rendered(completed_scan.id, content),
            )

        hit = cache.lookup(completed_scan.id, ReportFormat.PDF, GenerationMode.BASELINE)
        assert hit.content == b"%PDF-1 second"
