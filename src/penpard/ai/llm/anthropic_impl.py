"""Anthropic provider implementation using the official SDK."""

from pathlib import Path
from typing import Any

import anthropic

from penpard.errors import ProviderError, ProviderUnavailable

from .api_helpers import GenerationResponse, TokenCounts, as_int, encode_image


def generate_anthropic(
    client,
    system_prompt: str,
    user_prompt: str,
    images: list[str | Path] | None = None,
) -> GenerationResponse:
    """Generate text with the Claude Messages API."""
    config = client.config

    content: str | list[dict] = user_prompt
    if images:
        blocks: list[dict] = []
        for image in images:
            media_type, data = encode_image(image)
            blocks.append(
                {
                    "type": "image",
                    "source": {"type": "base64", "media_type": media_type, "data": data},
                }
            )
        blocks.append({"type": "text", "text": user_prompt})
        content = blocks

    kwargs: dict[str, Any] = {
        "model": config.model_name,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "messages": [{"role": "user", "content": content}],
    }
    if system_prompt:
        kwargs["system"] = system_prompt

    try:
        response = client.anthropic_sdk.messages.create(**kwargs)
    except anthropic.APIConnectionError as e:
        raise ProviderUnavailable(f"Anthropic API unreachable: {e}") from e
    except anthropic.APIStatusError as e:
        raise ProviderError(f"Anthropic API error (status {e.status_code}): {e}") from e

    texts = [
        block.text
        for block in getattr(response, "content", None) or []
        if getattr(block, "type", None) == "text"
    ]
    if not texts:
        raise ProviderError("Anthropic API response has no text content")

    usage = getattr(response, "usage", None)
    return GenerationResponse(
        text="".join(texts),
        usage=TokenCounts(
            input_tokens=as_int(getattr(usage, "input_tokens", 0)),
            output_tokens=as_int(getattr(usage, "output_tokens", 0)),
        ),
    )
