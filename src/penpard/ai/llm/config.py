"""Provider configuration resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from penpard.config import get_api_key, get_llm_base_url, get_llm_model, get_llm_provider
from penpard.errors import ProviderUnavailable

if TYPE_CHECKING:
    from penpard.modules.store import FindingStore

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic", "gemini", "deepseek", "openrouter", "ollama")

DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-5",
    "gemini": "gemini-1.5-pro",
    "deepseek": "deepseek-chat",
    "openrouter": "openai/gpt-4o-mini",
    "ollama": "llama3",
}

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


@dataclass(frozen=True)
class ProviderConfig:
    """Explicit provider selection threaded through probe and pipeline calls."""

    provider: str
    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, "unknown")


def _from_setting(row, project_dir: Path | None) -> ProviderConfig:
    settings = row.settings
    provider = row.provider.lower()
    try:
        temperature = float(settings.get("temperature", DEFAULT_TEMPERATURE))
    except (TypeError, ValueError):
        temperature = DEFAULT_TEMPERATURE
    try:
        max_tokens = int(settings.get("max_tokens", DEFAULT_MAX_TOKENS))
    except (TypeError, ValueError):
        max_tokens = DEFAULT_MAX_TOKENS
    return ProviderConfig(
        provider=provider,
        api_key=row.api_key or get_api_key(provider, project_dir),
        model=row.model or DEFAULT_MODELS.get(provider),
        base_url=settings.get("base_url") or None,
        temperature=temperature,
        max_tokens=max_tokens,
    )


def resolve_provider_config(
    store: FindingStore | None = None, project_dir: Path | None = None
) -> ProviderConfig | None:
    """
    Resolve the provider to use for enhancement.

    The active database setting wins; otherwise the ``PENPARD_LLM_*`` keys
    from the environment or config files are used. Returns None when no
    provider is configured, which is a normal state.
    """
    if store is not None:
        row = store.get_active_provider_setting()
        if row is not None:
            if row.provider.lower() not in SUPPORTED_PROVIDERS:
                logger.warning("Ignoring unsupported provider setting: %s", row.provider)
                return None
            return _from_setting(row, project_dir)

    provider = get_llm_provider(project_dir)
    if not provider:
        return None
    provider = provider.lower()
    if provider not in SUPPORTED_PROVIDERS:
        logger.warning("Ignoring unsupported provider: %s", provider)
        return None

    api_key = get_api_key(provider, project_dir)
    if not api_key and provider != "ollama":
        logger.debug("Provider %s has no API key; treating as unconfigured", provider)
        return None

    return ProviderConfig(
        provider=provider,
        api_key=api_key,
        model=get_llm_model(project_dir) or DEFAULT_MODELS.get(provider),
        base_url=get_llm_base_url(project_dir),
    )


def get_active_config(
    store: FindingStore | None = None, project_dir: Path | None = None
) -> ProviderConfig:
    """Like resolve_provider_config, but fails when nothing is configured."""
    config = resolve_provider_config(store, project_dir)
    if config is None:
        raise ProviderUnavailable("No LLM provider configured")
    return config
