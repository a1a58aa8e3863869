"""Core LLM client class."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from penpard.errors import ProviderUnavailable

from .anthropic_impl import generate_anthropic
from .api_helpers import GenerationResponse
from .config import ProviderConfig
from .gemini_impl import generate_gemini
from .ollama_impl import generate_ollama
from .openai_impl import generate_openai
from .vision import supports_vision

logger = logging.getLogger(__name__)

UsageRecorder = Callable[[str, str | None, int, int], Any]

_TRANSPORTS = {
    "openai": generate_openai,
    "openrouter": generate_openai,
    "deepseek": generate_openai,
    "anthropic": generate_anthropic,
    "gemini": generate_gemini,
    "ollama": generate_ollama,
}


@dataclass(frozen=True)
class VisionSupport:
    supported: bool
    provider: str
    model: str


class LLMClient:
    """Client for the configured text-generation provider."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        usage_recorder: UsageRecorder | None = None,
        timeout: float = 60.0,
    ):
        if config.provider not in _TRANSPORTS:
            raise ProviderUnavailable(f"Unknown provider: {config.provider}")
        self.config = config
        self.usage_recorder = usage_recorder
        self.http: httpx.Client | None = httpx.Client(timeout=timeout)
        self._anthropic_client: Any = None  # lazy-init SDK client

    @property
    def anthropic_sdk(self) -> Any:
        """Lazy-initialised Anthropic SDK client."""
        if self._anthropic_client is None:
            import anthropic

            kwargs: dict[str, Any] = {"api_key": self.config.api_key}
            if self.config.base_url:
                kwargs["base_url"] = self.config.base_url
            self._anthropic_client = anthropic.Anthropic(**kwargs)
        return self._anthropic_client

    def close(self) -> None:
        """Close the underlying HTTP client and release the connection pool."""
        if self.http is not None:
            self.http.close()
            self.http = None
        if self._anthropic_client is not None:
            self._anthropic_client.close()
            self._anthropic_client = None

    def __enter__(self) -> LLMClient:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def get_active_config(self) -> ProviderConfig:
        return self.config

    def check_vision_support(self) -> VisionSupport:
        return VisionSupport(
            supported=supports_vision(self.config.provider, self.config.model_name),
            provider=self.config.provider,
            model=self.config.model_name,
        )

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        images: list[str | Path] | None = None,
    ) -> GenerationResponse:
        """
        Generate text from the configured provider.

        Raises ProviderUnavailable when the provider cannot be reached and
        ProviderError when it answers with an error or a malformed payload.
        """
        transport = _TRANSPORTS[self.config.provider]
        response = transport(self, system_prompt, user_prompt, images)
        self._record_usage(response)
        return response

    def _record_usage(self, response: GenerationResponse) -> None:
        if self.usage_recorder is None:
            return
        self.usage_recorder(
            self.config.provider,
            self.config.model_name,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
