"""LLM client for PenPard report enhancement."""

from __future__ import annotations

from .api_helpers import GenerationResponse, TokenCounts
from .client import LLMClient, VisionSupport
from .config import (
    DEFAULT_MODELS,
    SUPPORTED_PROVIDERS,
    ProviderConfig,
    get_active_config,
    resolve_provider_config,
)
from .vision import supports_vision

__all__ = [
    "DEFAULT_MODELS",
    "GenerationResponse",
    "LLMClient",
    "ProviderConfig",
    "SUPPORTED_PROVIDERS",
    "TokenCounts",
    "VisionSupport",
    "get_active_config",
    "resolve_provider_config",
    "supports_vision",
]
