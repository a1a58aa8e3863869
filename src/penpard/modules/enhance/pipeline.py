"""Concurrent, best-effort enhancement of report text."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

from penpard.config import DEFAULT_ENHANCE_CONCURRENCY

from .highlights import HighlightAnnotator
from .models import EnhancementResult, FindingAnnotation, ItemOutcome
from .prompts import (
    DESCRIPTION_SYSTEM_PROMPT,
    REMEDIATION_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    description_prompt,
    remediation_prompt,
    summary_prompt,
)
from .validation import validate_description, validate_remediation, validate_summary

logger = logging.getLogger(__name__)

SUMMARY_KEY = "summary"


class EnhancementPipeline:
    """
    Produces enhanced descriptions, remediations and an executive summary.

    The three derivations run concurrently. Each generation is one
    ``ItemOutcome``; provider errors and validation rejections become
    outcomes without a value and are never raised to the caller.
    """

    def __init__(self, provider: Any, concurrency: int = DEFAULT_ENHANCE_CONCURRENCY):
        self.provider = provider
        self.concurrency = max(1, concurrency)

    async def _generate(self, system_prompt: str, user_prompt: str) -> str:
        # Provider clients are synchronous.
        response = await asyncio.to_thread(self.provider.generate, system_prompt, user_prompt)
        return response.text

    async def _attempt(
        self,
        key: Hashable,
        work: Callable[[], Awaitable[str]],
        semaphore: asyncio.Semaphore | None = None,
    ) -> ItemOutcome:
        try:
            if semaphore is None:
                return ItemOutcome(key, await work())
            async with semaphore:
                return ItemOutcome(key, await work())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Enhancement of %s skipped: %s", key, e)
            return ItemOutcome(key, error=e)

    async def _batch(
        self,
        findings: list[Any],
        system_prompt: str,
        build_prompt: Callable[[Any], str],
        validate: Callable[[str], str],
    ) -> list[ItemOutcome]:
        semaphore = asyncio.Semaphore(self.concurrency)

        def _work(finding: Any) -> Callable[[], Awaitable[str]]:
            async def run() -> str:
                return validate(await self._generate(system_prompt, build_prompt(finding)))

            return run

        return list(
            await asyncio.gather(
                *(self._attempt(f.id, _work(f), semaphore) for f in findings)
            )
        )

    async def enhance_descriptions(self, findings: list[Any]) -> list[ItemOutcome]:
        return await self._batch(
            findings, DESCRIPTION_SYSTEM_PROMPT, description_prompt, validate_description
        )

    async def enhance_remediations(self, findings: list[Any]) -> list[ItemOutcome]:
        """Findings without original remediation text are skipped."""
        with_remediation = [f for f in findings if (f.remediation or "").strip()]
        return await self._batch(
            with_remediation,
            REMEDIATION_SYSTEM_PROMPT,
            remediation_prompt,
            validate_remediation,
        )

    async def generate_summary(self, scan: Any, findings: list[Any]) -> ItemOutcome:
        async def run() -> str:
            return validate_summary(
                await self._generate(SUMMARY_SYSTEM_PROMPT, summary_prompt(scan, findings))
            )

        return await self._attempt(SUMMARY_KEY, run)

    async def run(
        self,
        scan: Any,
        findings: list[Any],
        *,
        descriptions: bool = True,
        remediations: bool = True,
        summary: bool = True,
    ) -> EnhancementResult:
        """Run the requested derivations and fold their outcomes into one result."""
        result = EnhancementResult()
        jobs: dict[str, Awaitable[Any]] = {}
        if descriptions:
            jobs["descriptions"] = self.enhance_descriptions(findings)
        if remediations:
            jobs["remediations"] = self.enhance_remediations(findings)
        if summary:
            jobs[SUMMARY_KEY] = self.generate_summary(scan, findings)
        if not jobs:
            return result

        gathered = await asyncio.gather(*jobs.values(), return_exceptions=True)
        for name, outcome in zip(jobs, gathered, strict=True):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning("Enhancement derivation %s failed: %s", name, outcome)
                result.failures.append(ItemOutcome(name, error=outcome))
                continue
            outcomes = [outcome] if isinstance(outcome, ItemOutcome) else outcome
            target = {"descriptions": result.descriptions, "remediations": result.remediations}
            for item in outcomes:
                if not item.ok:
                    result.failures.append(item)
                elif name == SUMMARY_KEY:
                    result.summary = item.value
                else:
                    target[name][item.key] = item.value

        logger.info(
            "Enhanced %d descriptions, %d remediations, summary=%s (%d skipped)",
            len(result.descriptions),
            len(result.remediations),
            result.summary is not None,
            len(result.failures),
        )
        return result

    async def annotate(
        self,
        findings: list[Any],
        *,
        use_llm: bool = True,
        image_processing: bool = False,
        vision_supported: bool = False,
    ) -> dict[int, FindingAnnotation]:
        annotator = HighlightAnnotator(
            self.provider, vision_supported=vision_supported, concurrency=self.concurrency
        )
        return await annotator.annotate(
            findings, use_llm=use_llm, image_processing=image_processing
        )
