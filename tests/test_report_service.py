"""Tests for the caller-facing report operations."""

import io
import json
from unittest.mock import MagicMock

import pytest
from docx import Document

from penpard.ai.llm import GenerationResponse, ProviderConfig
from penpard.errors import (
    Forbidden,
    GenerationFailure,
    NotFound,
    NotReady,
    UnsupportedFormat,
)
from penpard.modules.enhance import EnhancementPipeline
from penpard.modules.enhance.prompts import DESCRIPTION_SYSTEM_PROMPT
from penpard.modules.lifecycle import LifecycleManager
from penpard.modules.report import (
    Caller,
    GenerationMode,
    ReportFormat,
    ReportService,
    ReportSynthesizer,
)

OWNER = Caller(user_id=1)
STRANGER = Caller(user_id=2)
ADMIN = Caller(user_id=99, role="admin")
OPENAI = ProviderConfig(provider="openai", api_key="test-key", model="gpt-4o")


def _enhanced_text(label: str) -> str:
    return f"ENHANCED {label}: " + "a detailed and professional rewrite of the finding. " * 2


def _service(store, storage, provider=None, **kwargs) -> ReportService:
    if provider is not None:
        kwargs.setdefault("provider_config", OPENAI)
        kwargs["pipeline_factory"] = lambda config: EnhancementPipeline(provider)
    return ReportService(store, storage, **kwargs)


def _docx_text(content: bytes) -> str:
    document = Document(io.BytesIO(content))
    return "\n".join(p.text for p in document.paragraphs)


class TestAccessAndReadiness:
    @pytest.mark.asyncio
    async def test_unknown_scan(self, store, storage):
        with pytest.raises(NotFound):
            await _service(store, storage).download_report("missing", OWNER)

    @pytest.mark.asyncio
    async def test_other_users_scan_is_forbidden(self, store, storage, completed_scan):
        with pytest.raises(Forbidden):
            await _service(store, storage).download_report(completed_scan.id, STRANGER)

    @pytest.mark.asyncio
    async def test_elevated_role_sees_all_scans(self, store, storage, completed_scan):
        artifact = await _service(store, storage).download_report(
            completed_scan.id, ADMIN, format="json"
        )

        assert json.loads(artifact.content)["scan"]["id"] == completed_scan.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["queued", "running", "failed"])
    async def test_not_ready_has_no_side_effects(self, store, storage, sample_scan, status):
        lifecycle = LifecycleManager(store)
        if status != "queued":
            lifecycle.start(sample_scan.id)
        if status == "failed":
            lifecycle.fail(sample_scan.id, "engine crashed")
        synthesizer = MagicMock(spec=ReportSynthesizer)

        with pytest.raises(NotReady):
            await _service(store, storage, synthesizer=synthesizer).get_or_create_report(
                sample_scan.id, OWNER
            )

        synthesizer.synthesize.assert_not_called()
        assert store.get_report_row(sample_scan.id) is None
        assert not storage.root.exists()

    @pytest.mark.asyncio
    async def test_format_checked_before_scan_lookup(self, store, storage):
        with pytest.raises(UnsupportedFormat):
            await _service(store, storage).download_report("missing", OWNER, format="xlsx")

    @pytest.mark.asyncio
    async def test_unknown_mode(self, store, storage, completed_scan):
        with pytest.raises(UnsupportedFormat):
            await _service(store, storage).download_report(
                completed_scan.id, OWNER, mode="creative"
            )


class TestGetOrCreateReport:
    @pytest.mark.asyncio
    async def test_generates_then_serves_from_cache(self, store, storage, completed_scan):
        service = _service(store, storage)

        first = await service.get_or_create_report(completed_scan.id, OWNER)
        second = await service.get_or_create_report(completed_scan.id, OWNER)

        assert first.content.startswith(b"%PDF")
        assert first.cached is False
        assert second.cached is True
        assert second.content == first.content
        assert second.path == first.path
        assert first.filename == f"PenPard-Report-{completed_scan.id}.pdf"
        assert first.content_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_miss_records_report_row(self, store, storage, completed_scan):
        artifact = await _service(store, storage).get_or_create_report(completed_scan.id, OWNER)

        row = store.get_report_row(completed_scan.id)
        assert row is not None
        assert (row.file_path, row.format) == (str(artifact.path), "pdf")
        assert storage.read(row.file_path) == artifact.content

    @pytest.mark.asyncio
    async def test_cache_hit_skips_synthesis(self, store, storage, completed_scan):
        await _service(store, storage).get_or_create_report(completed_scan.id, OWNER)
        synthesizer = MagicMock(spec=ReportSynthesizer)

        artifact = await _service(store, storage, synthesizer=synthesizer).get_or_create_report(
            completed_scan.id, OWNER
        )

        assert artifact.cached
        synthesizer.synthesize.assert_not_called()

    @pytest.mark.asyncio
    async def test_stopped_scan_is_reportable(self, store, storage, sample_scan):
        lifecycle = LifecycleManager(store)
        lifecycle.start(sample_scan.id)
        store.add_finding(sample_scan.id, "Open redirect", "medium", "next= is unchecked")
        lifecycle.stop(sample_scan.id)

        artifact = await _service(store, storage).get_or_create_report(sample_scan.id, OWNER)

        assert artifact.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_generation_failure_is_not_cached(self, store, storage, completed_scan):
        def broken(view):
            raise RuntimeError("font missing")

        synthesizer = ReportSynthesizer({ReportFormat.PDF: broken})

        with pytest.raises(GenerationFailure):
            await _service(store, storage, synthesizer=synthesizer).get_or_create_report(
                completed_scan.id, OWNER
            )

        assert store.get_report_row(completed_scan.id) is None


class TestDownloadReport:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("fmt", ["docx", "pptx", "json", "md"])
    async def test_other_formats_are_never_cached(self, store, storage, completed_scan, fmt):
        service = _service(store, storage)

        first = await service.download_report(completed_scan.id, OWNER, format=fmt)
        second = await service.download_report(completed_scan.id, OWNER, format=fmt)

        assert not first.cached and not second.cached
        assert first.format is ReportFormat(fmt)
        assert store.get_report_row(completed_scan.id) is None

    @pytest.mark.asyncio
    async def test_static_alias(self, store, storage, completed_scan):
        artifact = await _service(store, storage).download_report(
            completed_scan.id, OWNER, mode="static"
        )

        assert artifact.mode is GenerationMode.BASELINE
        assert store.get_report_row(completed_scan.id) is not None

    @pytest.mark.asyncio
    async def test_llm_mode_with_failing_provider_matches_baseline(
        self, store, storage, completed_scan, failing_provider
    ):
        baseline = await _service(store, storage).download_report(
            completed_scan.id, OWNER, format="md"
        )
        enhanced = await _service(store, storage, failing_provider).download_report(
            completed_scan.id, OWNER, format="md", mode="llm"
        )

        assert _strip_dates(enhanced.content) == _strip_dates(baseline.content)
        assert store.get_report_row(completed_scan.id) is None

    @pytest.mark.asyncio
    async def test_llm_mode_without_provider_uses_baseline_content(
        self, store, storage, completed_scan
    ):
        artifact = await _service(store, storage).download_report(
            completed_scan.id, OWNER, format="json", mode="llm"
        )

        data = json.loads(artifact.content)
        assert data["summary"]["summary_enhanced"] is False
        assert not any(f["description_enhanced"] for f in data["findings"])

    @pytest.mark.asyncio
    async def test_docx_with_two_of_three_descriptions_enhanced(
        self, store, storage, completed_scan
    ):
        findings = store.get_findings(completed_scan.id)
        provider = MagicMock()

        def generate(system_prompt, user_prompt, images=None):
            if system_prompt == DESCRIPTION_SYSTEM_PROMPT:
                if "Verbose Server Banner" in user_prompt:
                    return GenerationResponse(text="Too short.")
                name = next(f.name for f in findings if f.name in user_prompt)
                return GenerationResponse(text=_enhanced_text(name))
            return GenerationResponse(text=_enhanced_text("OTHER"))

        provider.generate.side_effect = generate

        artifact = await _service(store, storage, provider).download_report(
            completed_scan.id, OWNER, format="docx", mode="llm"
        )

        text = _docx_text(artifact.content)
        assert _enhanced_text("SQL Injection in login").strip() in text
        assert _enhanced_text("Reflected XSS in search").strip() in text
        assert "Server header discloses version." in text
        assert "Too short." not in text
        # Store order is kept in the detailed findings.
        assert (
            text.index("SQL Injection in login [")
            < text.index("Reflected XSS in search [")
            < text.index("Verbose Server Banner [")
        )
        assert store.get_report_row(completed_scan.id) is None

    @pytest.mark.asyncio
    async def test_enhanced_pdf_is_not_cached(self, store, storage, completed_scan, text_provider):
        artifact = await _service(store, storage, text_provider).download_report(
            completed_scan.id, OWNER, mode="llm"
        )

        assert artifact.content.startswith(b"%PDF")
        assert not artifact.cached
        assert artifact.path is None
        assert store.get_report_row(completed_scan.id) is None

    @pytest.mark.asyncio
    async def test_enhancement_uses_token_recorder(self, store, storage, completed_scan):
        service = ReportService(store, storage, provider_config=OPENAI)
        pipeline = service._make_pipeline(OPENAI, completed_scan.id)
        try:
            pipeline.provider.usage_recorder("openai", "gpt-4o", 10, 5)
        finally:
            pipeline.provider.close()

        totals = store.get_token_totals(completed_scan.id)
        assert totals == {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}


class TestCapabilitiesAndStop:
    def test_no_provider(self, store, storage):
        snapshot = _service(store, storage).check_capabilities()

        assert snapshot.to_dict() == {
            "provider_configured": False,
            "vision_supported": False,
            "provider_name": "none",
            "model_name": "none",
        }

    def test_vision_provider(self, store, storage):
        snapshot = ReportService(store, storage, provider_config=OPENAI).check_capabilities()

        assert snapshot.provider_configured
        assert snapshot.vision_supported
        assert snapshot.model_name == "gpt-4o"

    def test_stop_scan_checks_access(self, store, storage, sample_scan):
        service = _service(store, storage)

        with pytest.raises(Forbidden):
            service.stop_scan(sample_scan.id, STRANGER)
        assert service.stop_scan(sample_scan.id, OWNER).status == "stopped"

    @pytest.mark.asyncio
    async def test_start_tracking_reports_store_status(self, store, storage, sample_scan):
        lifecycle = LifecycleManager(store)
        lifecycle.start(sample_scan.id)
        lifecycle.record_phase(sample_scan.id, "reporting")
        service = _service(store, storage)

        async def advance(_seconds):
            lifecycle.complete(sample_scan.id)

        session = service.start_tracking(sample_scan.id, OWNER, interval=0, sleep=advance)
        updates = [u async for u in session]

        assert [(u.status, u.progress) for u in updates] == [("reporting", 90), ("completed", 100)]

    def test_start_tracking_checks_access(self, store, storage, sample_scan):
        with pytest.raises(Forbidden):
            _service(store, storage).start_tracking(sample_scan.id, STRANGER)


def _strip_dates(content: bytes) -> str:
    """Drop lines carrying generation timestamps."""
    return "\n".join(
        line for line in content.decode().splitlines() if "Generated" not in line
    )
