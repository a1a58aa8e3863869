"""OpenAI-compatible provider implementation (OpenAI, OpenRouter, DeepSeek)."""

from pathlib import Path

from penpard.errors import ProviderError

from .api_helpers import (
    GenerationResponse,
    TokenCounts,
    as_int,
    encode_image,
    post_json,
    require_text,
)

_DEFAULT_BASES = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "deepseek": "https://api.deepseek.com/v1",
}


def generate_openai(
    client,
    system_prompt: str,
    user_prompt: str,
    images: list[str | Path] | None = None,
) -> GenerationResponse:
    """Generate text with a chat-completions API."""
    config = client.config
    base = config.base_url or _DEFAULT_BASES.get(config.provider, _DEFAULT_BASES["openai"])
    url = f"{base.rstrip('/')}/chat/completions"

    headers = {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json",
    }

    content: str | list[dict] = user_prompt
    if images:
        parts: list[dict] = [{"type": "text", "text": user_prompt}]
        for image in images:
            media_type, data = encode_image(image)
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{media_type};base64,{data}"},
                }
            )
        content = parts

    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": content})

    payload = {
        "model": config.model_name,
        "messages": messages,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }

    label = config.provider.capitalize()
    data = post_json(client.http, url, payload, label=label, headers=headers)

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ProviderError(f"{label} API response missing or invalid 'choices'")
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise ProviderError(f"{label} API response choices[0] missing 'message'")
    text = require_text(message.get("content"), label, "choices[0].message.content")

    usage = data.get("usage") or {}
    return GenerationResponse(
        text=text,
        usage=TokenCounts(
            input_tokens=as_int(usage.get("prompt_tokens")),
            output_tokens=as_int(usage.get("completion_tokens")),
        ),
    )
