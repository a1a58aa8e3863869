"""Evidence highlighting for report findings."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any

from penpard.config import DEFAULT_ENHANCE_CONCURRENCY

from .models import FindingAnnotation, HighlightBox
from .prompts import (
    HIGHLIGHT_SYSTEM_PROMPT,
    SCREENSHOT_SYSTEM_PROMPT,
    highlight_prompt,
    screenshot_prompt,
)
from .validation import extract_json_array

logger = logging.getLogger(__name__)

MAX_TEXT_HIGHLIGHTS = 6
MAX_SCREENSHOT_HIGHLIGHTS = 4

# (trigger keywords, strings worth highlighting when any keyword matches)
HIGHLIGHT_RULES: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (
        ("sql", "sqli"),
        (
            "' OR '1'='1", "'OR'1'='1", "' or '1'='1", "1=1", "' OR 1=1", "OR 1=1--",
            "1'='1", "UNION SELECT", "union select", "' OR ''='", "1; DROP", "sleep(",
            "SLEEP(", "WAITFOR", "benchmark(", "' OR TRUE--", "admin'--", "' --",
            "1=1-- -", "' OR '1'='1'--",
        ),
    ),
    (
        ("xss", "cross-site scripting"),
        (
            "<script>", "</script>", "alert(", "onerror=", "onload=", "<img src=",
            "javascript:", "<svg", "document.cookie", "prompt(", "confirm(",
        ),
    ),
    (
        ("auth", "bypass", "login"),
        (
            '"token":', '"authentication":', '"jwt":', '"access_token":',
            "HTTP/1.1 200", "HTTP/2 200", "200 OK",
        ),
    ),
    (("idor", "insecure direct"), ("id=", "user_id=", "userId=", "account_id=")),
    (
        ("ssrf", "server-side request"),
        ("http://127.0.0.1", "http://localhost", "http://169.254", "file://"),
    ),
    (
        ("traversal", "lfi", "local file"),
        ("../", "..\\", "/etc/passwd", "root:x:", "win.ini"),
    ),
    (("time-based", "blind"), ("Response time:", "response_time", "elapsed")),
    (("registration", "validation"), ("201", "200 OK", '"success"', '"status":')),
    (
        ("redirect",),
        ("redirect=", "url=http", "next=http", "return_url=", "Location:"),
    ),
    (
        ("command injection", "os command", "rce"),
        ("| id", "; id", "`id`", "$(id)", "&& id", "; ls", "; cat"),
    ),
    (("jwt", "token"), ("eyJ", 'alg":"none', '"alg":"HS256"', "Bearer ")),
]

_PAYLOAD_PATTERNS = (
    re.compile(r'"payload":\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r'"injected":\s*"([^"]+)"', re.IGNORECASE),
)


def detect_highlight_patterns(finding: Any) -> list[str]:
    """Keyword-driven highlight strings for a finding, deduplicated in order."""
    combined = f"{finding.name or ''} {finding.description or ''}".lower()
    patterns: list[str] = []
    for keywords, strings in HIGHLIGHT_RULES:
        if any(keyword in combined for keyword in keywords):
            patterns.extend(strings)

    if finding.evidence:
        for pattern in _PAYLOAD_PATTERNS:
            match = pattern.search(str(finding.evidence))
            if match:
                patterns.append(match.group(1))
                break

    return [p for p in dict.fromkeys(patterns) if len(p) >= 2]


def parse_text_highlights(answer: str) -> list[str]:
    items = extract_json_array(answer)
    return [s for s in items if isinstance(s, str) and 2 <= len(s) <= 200][
        :MAX_TEXT_HIGHLIGHTS
    ]


def parse_screenshot_highlights(answer: str) -> list[HighlightBox]:
    boxes = []
    for item in extract_json_array(answer):
        if not isinstance(item, dict):
            continue
        coords = [item.get(k) for k in ("x", "y", "width", "height")]
        if not all(isinstance(c, int | float) and not isinstance(c, bool) for c in coords):
            continue
        boxes.append(HighlightBox(*coords, label=str(item.get("label") or "")))
    return boxes[:MAX_SCREENSHOT_HIGHLIGHTS]


class HighlightAnnotator:
    """Computes text and screenshot highlights; every failure degrades to patterns."""

    def __init__(
        self,
        provider: Any | None = None,
        *,
        vision_supported: bool = False,
        concurrency: int = DEFAULT_ENHANCE_CONCURRENCY,
    ):
        self.provider = provider
        self.vision_supported = vision_supported
        self.concurrency = concurrency

    async def annotate(
        self, findings: list[Any], *, use_llm: bool = False, image_processing: bool = False
    ) -> dict[int, FindingAnnotation]:
        if self.provider is None or not (use_llm or image_processing):
            return {f.id: FindingAnnotation(detect_highlight_patterns(f)) for f in findings}

        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def _one(finding: Any) -> tuple[int, FindingAnnotation]:
            async with semaphore:
                return finding.id, await self._annotate_one(
                    finding, use_llm=use_llm, image_processing=image_processing
                )

        pairs = await asyncio.gather(*(_one(f) for f in findings))
        return dict(pairs)

    async def _annotate_one(
        self, finding: Any, *, use_llm: bool, image_processing: bool
    ) -> FindingAnnotation:
        text_highlights: list[str] = []
        if use_llm:
            text_highlights = await self._ask_text_highlights(finding)
        if not text_highlights:
            text_highlights = detect_highlight_patterns(finding)

        annotation = FindingAnnotation(text_highlights)
        screenshot = finding.screenshot_path
        if screenshot and Path(screenshot).is_file():
            annotation.screenshot_path = screenshot
            if image_processing and self.vision_supported:
                annotation.screenshot_highlights = await self._ask_screenshot_highlights(
                    finding, screenshot
                )
        return annotation

    async def _ask_text_highlights(self, finding: Any) -> list[str]:
        try:
            response = await asyncio.to_thread(
                self.provider.generate, HIGHLIGHT_SYSTEM_PROMPT, highlight_prompt(finding)
            )
            return parse_text_highlights(response.text)
        except Exception as e:
            logger.warning(
                "Highlight analysis failed for finding %s, using patterns: %s", finding.id, e
            )
            return []

    async def _ask_screenshot_highlights(self, finding: Any, path: str) -> list[HighlightBox]:
        try:
            response = await asyncio.to_thread(
                self.provider.generate,
                SCREENSHOT_SYSTEM_PROMPT,
                screenshot_prompt(finding),
                [path],
            )
            return parse_screenshot_highlights(response.text)
        except Exception as e:
            logger.warning("Screenshot analysis failed for finding %s: %s", finding.id, e)
            return []
