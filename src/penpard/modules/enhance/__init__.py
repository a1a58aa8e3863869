"""Report enhancement with a text-generation provider."""

from .highlights import HighlightAnnotator, detect_highlight_patterns
from .models import EnhancementResult, FindingAnnotation, HighlightBox, ItemOutcome
from .pipeline import EnhancementPipeline
from .validation import validate_description, validate_remediation, validate_summary

__all__ = [
    "EnhancementPipeline",
    "EnhancementResult",
    "FindingAnnotation",
    "HighlightAnnotator",
    "HighlightBox",
    "ItemOutcome",
    "detect_highlight_patterns",
    "validate_description",
    "validate_remediation",
    "validate_summary",
]
