"""Caller-facing report operations."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from penpard.ai.llm import LLMClient, ProviderConfig
from penpard.config import (
    DEFAULT_ENHANCE_CONCURRENCY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_MAX_ATTEMPTS,
)
from penpard.db.models import Scan
from penpard.errors import Forbidden, NotFound, NotReady, PenpardError
from penpard.modules.capabilities import CapabilitySnapshot, probe
from penpard.modules.enhance import EnhancementPipeline, EnhancementResult, HighlightAnnotator
from penpard.modules.enhance.models import FindingAnnotation
from penpard.modules.lifecycle import LifecycleManager, is_report_eligible
from penpard.modules.poller import (
    AnalysisPoller,
    StatusSource,
    StoreStatusSource,
    TrackingSession,
    start_tracking,
)

from .cache import ReportCache
from .models import GenerationMode, ReportArtifact, ReportFormat
from .storage import ArtifactStorage
from .synthesizer import ReportSynthesizer

if TYPE_CHECKING:
    from penpard.modules.store import FindingStore

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[ProviderConfig], EnhancementPipeline]


@dataclass(frozen=True)
class Caller:
    """Identity the operations are performed for."""

    user_id: int
    role: str = "user"

    def can_access(self, scan: Scan) -> bool:
        """Owners see their scans; any elevated role sees all scans."""
        return scan.user_id == self.user_id or self.role != "user"


class ReportService:
    """Scan access checks, report caching, enhancement and synthesis."""

    def __init__(
        self,
        store: FindingStore,
        storage: ArtifactStorage,
        provider_config: ProviderConfig | None = None,
        synthesizer: ReportSynthesizer | None = None,
        pipeline_factory: PipelineFactory | None = None,
        concurrency: int = DEFAULT_ENHANCE_CONCURRENCY,
    ):
        self.store = store
        self.storage = storage
        self.provider_config = provider_config
        self.synthesizer = synthesizer or ReportSynthesizer()
        self.pipeline_factory = pipeline_factory
        self.concurrency = concurrency
        self.cache = ReportCache(store, storage)
        self.lifecycle = LifecycleManager(store)

    def _authorize(self, scan_id: str, caller: Caller) -> Scan:
        scan = self.store.get_scan(scan_id)
        if scan is None:
            raise NotFound(f"Scan not found: {scan_id}")
        if not caller.can_access(scan):
            raise Forbidden(f"Access denied to scan {scan_id}")
        return scan

    def _make_pipeline(self, config: ProviderConfig, scan_id: str) -> EnhancementPipeline:
        if self.pipeline_factory is not None:
            return self.pipeline_factory(config)
        recorder = functools.partial(
            self.store.record_token_usage, scan_id=scan_id, context="report-enhancement"
        )
        client = LLMClient(config, usage_recorder=recorder)
        return EnhancementPipeline(client, concurrency=self.concurrency)

    async def get_or_create_report(self, scan_id: str, caller: Caller) -> ReportArtifact:
        """Return the cached baseline PDF, synthesizing and caching it on a miss."""
        return await self.download_report(scan_id, caller)

    async def download_report(
        self,
        scan_id: str,
        caller: Caller,
        format: ReportFormat | str = ReportFormat.PDF,
        mode: GenerationMode | str = GenerationMode.BASELINE,
        image_processing: bool = False,
    ) -> ReportArtifact:
        """
        Produce a report artifact.

        Raises:
            UnsupportedFormat: unknown format or mode.
            NotFound, Forbidden: unknown scan or no access to it.
            NotReady: the scan is not completed or stopped.
            GenerationFailure: rendering failed.
        """
        fmt = ReportFormat.parse(format)
        gen_mode = GenerationMode.parse(mode)
        scan = self._authorize(scan_id, caller)
        if not is_report_eligible(scan):
            raise NotReady(
                f"Scan {scan_id} is {scan.status}; reports need a completed or stopped scan"
            )

        cached = self.cache.lookup(scan.id, fmt, gen_mode, image_processing)
        if cached is not None:
            return ReportArtifact(
                scan_id=scan.id,
                content=cached.content,
                content_type=fmt.content_type,
                filename=cached.path.name,
                format=fmt,
                mode=gen_mode,
                cached=True,
                path=cached.path,
                created_at=cached.created_at,
            )

        findings = self.store.get_findings(scan.id)
        enhancement: EnhancementResult | None = None
        if gen_mode is GenerationMode.LLM:
            enhancement = await self._enhance(scan, findings, image_processing)
        annotations = (
            enhancement.annotations
            if enhancement is not None
            else await self._baseline_annotations(scan, findings, image_processing)
        )

        rendered = await asyncio.to_thread(
            self.synthesizer.synthesize, scan, findings, fmt, enhancement, annotations
        )
        path = self.cache.store(scan.id, fmt, gen_mode, image_processing, rendered)
        logger.info(
            "Generated %s report for scan %s (mode=%s, image_processing=%s)",
            fmt.value,
            scan.id,
            gen_mode.value,
            image_processing,
        )
        return ReportArtifact(
            scan_id=scan.id,
            content=rendered.content,
            content_type=rendered.content_type,
            filename=rendered.filename,
            format=fmt,
            mode=gen_mode,
            cached=False,
            path=path,
        )

    async def _enhance(
        self, scan: Scan, findings: list[Any], image_processing: bool
    ) -> EnhancementResult | None:
        config = self.provider_config
        if config is None:
            logger.info("No LLM provider configured; generating baseline content")
            return None

        try:
            pipeline = self._make_pipeline(config, scan.id)
        except PenpardError as e:
            logger.warning("LLM provider unavailable, generating baseline content: %s", e)
            return None

        try:
            result = await pipeline.run(scan, findings)
            result.annotations = await pipeline.annotate(
                findings,
                use_llm=True,
                image_processing=image_processing,
                vision_supported=probe(config).vision_supported,
            )
            return result
        finally:
            close = getattr(pipeline.provider, "close", None)
            if callable(close):
                close()

    async def _baseline_annotations(
        self, scan: Scan, findings: list[Any], image_processing: bool
    ) -> dict[int, FindingAnnotation]:
        """Pattern highlights; screenshot boxes only with a vision-capable provider."""
        snapshot = probe(self.provider_config)
        if not (image_processing and snapshot.vision_supported):
            return await HighlightAnnotator().annotate(findings)

        try:
            pipeline = self._make_pipeline(self.provider_config, scan.id)
        except PenpardError as e:
            logger.warning("Screenshot analysis unavailable: %s", e)
            return await HighlightAnnotator().annotate(findings)
        try:
            return await pipeline.annotate(
                findings, use_llm=False, image_processing=True, vision_supported=True
            )
        finally:
            close = getattr(pipeline.provider, "close", None)
            if callable(close):
                close()

    def check_capabilities(self) -> CapabilitySnapshot:
        return probe(self.provider_config)

    def start_tracking(
        self,
        scan_id: str,
        caller: Caller,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        source: StatusSource | None = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ) -> TrackingSession:
        """Start polling a scan; must be called from a running event loop."""
        scan = self._authorize(scan_id, caller)
        poller = AnalysisPoller(
            source or StoreStatusSource(self.store),
            interval=interval,
            max_attempts=max_attempts,
            sleep=sleep,
        )
        return start_tracking(scan.id, poller)

    def stop_scan(self, scan_id: str, caller: Caller) -> Scan:
        self._authorize(scan_id, caller)
        return self.lifecycle.stop(scan_id)
