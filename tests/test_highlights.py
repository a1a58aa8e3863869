"""Tests for evidence highlighting."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from penpard.ai.llm import GenerationResponse
from penpard.modules.enhance import HighlightAnnotator, HighlightBox, detect_highlight_patterns
from penpard.modules.enhance.highlights import (
    parse_screenshot_highlights,
    parse_text_highlights,
)
from penpard.modules.enhance.prompts import HIGHLIGHT_SYSTEM_PROMPT, SCREENSHOT_SYSTEM_PROMPT


def _finding(**overrides):
    values = {
        "id": 1,
        "name": "SQL Injection",
        "description": "Injectable login",
        "severity": "critical",
        "cvss_score": 9.8,
        "cwe": "CWE-89",
        "cve": None,
        "request": "POST /login username=admin' OR 1=1--",
        "response": "HTTP/1.1 200 OK",
        "evidence": None,
        "screenshot_path": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestPatternHighlights:
    def test_sql_injection_keywords(self):
        patterns = detect_highlight_patterns(_finding())

        assert "1=1" in patterns
        assert "UNION SELECT" in patterns
        assert "<script>" not in patterns

    def test_multiple_classes_and_dedup(self):
        patterns = detect_highlight_patterns(
            _finding(name="Open redirect after login", description="auth bypass")
        )

        assert "Location:" in patterns
        assert patterns.count("200 OK") == 1

    def test_payload_extracted_from_evidence(self):
        patterns = detect_highlight_patterns(
            _finding(name="Weird bug", description="", evidence='{"payload": "../../secret"}')
        )

        assert patterns == ["../../secret"]

    def test_unrelated_finding_has_no_patterns(self):
        assert detect_highlight_patterns(_finding(name="Missing HSTS", description="")) == []


class TestParsing:
    def test_text_highlights_capped_at_six(self):
        answer = 'Here you go: ["a1", "b2", "c3", "d4", "e5", "f6", "g7"]'

        assert parse_text_highlights(answer) == ["a1", "b2", "c3", "d4", "e5", "f6"]

    def test_text_highlights_drop_non_strings(self):
        assert parse_text_highlights('[1, "x", "1=1", null]') == ["1=1"]

    def test_screenshot_boxes(self):
        answer = (
            '[{"x": 10, "y": 20, "width": 100, "height": 30, "label": "payload"},'
            ' {"x": "bad", "y": 0, "width": 1, "height": 1},'
            ' {"x": 1, "y": 2, "width": 3, "height": 4}]'
        )

        boxes = parse_screenshot_highlights(answer)

        assert boxes == [
            HighlightBox(10, 20, 100, 30, "payload"),
            HighlightBox(1, 2, 3, 4, ""),
        ]


class TestHighlightAnnotator:
    @pytest.mark.asyncio
    async def test_without_provider_uses_patterns(self):
        annotations = await HighlightAnnotator().annotate([_finding()])

        assert "1=1" in annotations[1].text_highlights

    @pytest.mark.asyncio
    async def test_llm_highlights_preferred(self):
        provider = MagicMock()
        provider.generate.return_value = GenerationResponse(text='["admin\' OR 1=1--"]')

        annotations = await HighlightAnnotator(provider).annotate([_finding()], use_llm=True)

        assert annotations[1].text_highlights == ["admin' OR 1=1--"]
        assert provider.generate.call_args.args[0] == HIGHLIGHT_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_llm_failure_falls_back_to_patterns(self, failing_provider):
        annotations = await HighlightAnnotator(failing_provider).annotate(
            [_finding()], use_llm=True
        )

        assert "1=1" in annotations[1].text_highlights

    @pytest.mark.asyncio
    async def test_screenshot_boxes_need_vision_and_a_file(self, temp_dir):
        screenshot = temp_dir / "shot.png"
        screenshot.write_bytes(b"\x89PNG\r\n\x1a\n")
        provider = MagicMock()

        def generate(system_prompt, user_prompt, images=None):
            if system_prompt == SCREENSHOT_SYSTEM_PROMPT:
                assert images == [str(screenshot)]
                return GenerationResponse(text='[{"x": 5, "y": 5, "width": 50, "height": 10}]')
            return GenerationResponse(text='["1=1"]')

        provider.generate.side_effect = generate
        findings = [
            _finding(id=1, screenshot_path=str(screenshot)),
            _finding(id=2, screenshot_path=str(temp_dir / "missing.png")),
        ]

        with_vision = await HighlightAnnotator(provider, vision_supported=True).annotate(
            findings, use_llm=False, image_processing=True
        )
        without_vision = await HighlightAnnotator(provider, vision_supported=False).annotate(
            findings, use_llm=False, image_processing=True
        )

        assert with_vision[1].screenshot_highlights == [HighlightBox(5, 5, 50, 10)]
        assert with_vision[1].screenshot_path == str(screenshot)
        assert with_vision[2].screenshot_path is None
        assert with_vision[2].screenshot_highlights == []
        assert without_vision[1].screenshot_highlights == []
        assert without_vision[1].screenshot_path == str(screenshot)
