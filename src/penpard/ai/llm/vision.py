"""Vision (image input) support rules per provider."""

import re

_OLLAMA_VISION = ("llava", "vision", "moondream")


def supports_vision(provider: str, model: str | None) -> bool:
    """Return True when the provider/model pair accepts image input."""
    provider = provider.lower()
    name = (model or "").lower()

    if provider in ("openai", "openrouter"):
        return name.startswith(("gpt-4", "o1", "o3")) or "/gpt-4" in name
    if provider == "anthropic":
        if name.startswith(("claude-3", "claude-4")):
            return True
        # Newer families: claude-sonnet-4-5, claude-opus-4-1, ...
        return re.match(r"claude-(opus|sonnet|haiku)-\d", name) is not None
    if provider == "gemini":
        return True
    if provider == "deepseek":
        return "-vl" in name or "vision" in name
    if provider == "ollama":
        return any(marker in name for marker in _OLLAMA_VISION)
    return False
