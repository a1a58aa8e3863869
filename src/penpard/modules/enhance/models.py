"""Enhancement result types."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ItemOutcome:
    """Result of one unit of enhancement work: a value or the reason there is none."""

    key: Hashable
    value: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class HighlightBox:
    """Rectangle to draw over a screenshot, in image pixels."""

    x: float
    y: float
    width: float
    height: float
    label: str = ""


@dataclass
class FindingAnnotation:
    """Evidence highlights for one finding."""

    text_highlights: list[str] = field(default_factory=list)
    screenshot_path: str | None = None
    screenshot_highlights: list[HighlightBox] = field(default_factory=list)


@dataclass
class EnhancementResult:
    """Generated text for one pipeline run; never persisted."""

    descriptions: dict[int, str] = field(default_factory=dict)
    remediations: dict[int, str] = field(default_factory=dict)
    summary: str | None = None
    annotations: dict[int, FindingAnnotation] = field(default_factory=dict)
    failures: list[ItemOutcome] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.descriptions or self.remediations or self.summary)
