"""Ollama provider implementation."""

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

OLLAMA_DEFAULT_BASE = "http://localhost:11434"


def generate_ollama(
    client,
    system_prompt: str,
    user_prompt: str,
    images: list[str | Path] | None = None,
) -> GenerationResponse:
    """Generate text with a local Ollama server."""
    config = client.config
    base = config.base_url or OLLAMA_DEFAULT_BASE
    url = f"{base.rstrip('/')}/api/chat"

    user_message: dict = {"role": "user", "content": user_prompt}
    if images:
        user_message["images"] = [encode_image(image)[1] for image in images]

    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append(user_message)

    payload = {
        "model": config.model_name,
        "messages": messages,
        "stream": False,
        "options": {"temperature": config.temperature, "num_predict": config.max_tokens},
    }

    data = post_json(client.http, url, payload, label="Ollama")
    message = data.get("message")
    if not isinstance(message, dict):
        raise ProviderError("Ollama API response missing 'message'")
    text = require_text(message.get("content"), "Ollama", "message.content")

    return GenerationResponse(
        text=text,
        usage=TokenCounts(
            input_tokens=as_int(data.get("prompt_eval_count")),
            output_tokens=as_int(data.get("eval_count")),
        ),
    )
