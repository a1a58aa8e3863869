"""Capability probe for the configured text-generation provider."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from penpard.ai.llm.vision import supports_vision

if TYPE_CHECKING:
    from penpard.ai.llm import ProviderConfig


@dataclass(frozen=True)
class CapabilitySnapshot:
    provider_configured: bool
    vision_supported: bool
    provider_name: str
    model_name: str

    def to_dict(self) -> dict:
        return asdict(self)


NO_PROVIDER = CapabilitySnapshot(False, False, "none", "none")


def probe(config: ProviderConfig | None) -> CapabilitySnapshot:
    """
    Describe what the given provider can do.

    A missing configuration is a normal state, not an error. Reachability
    is not checked here; an unreachable provider surfaces on first use.
    """
    if config is None:
        return NO_PROVIDER
    return CapabilitySnapshot(
        provider_configured=True,
        vision_supported=supports_vision(config.provider, config.model_name),
        provider_name=config.provider,
        model_name=config.model_name,
    )
