"""Google Gemini provider implementation."""

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

GEMINI_DEFAULT_BASE = "https://generativelanguage.googleapis.com/v1beta"


def generate_gemini(
    client,
    system_prompt: str,
    user_prompt: str,
    images: list[str | Path] | None = None,
) -> GenerationResponse:
    """Generate text with the Gemini generateContent REST API."""
    config = client.config
    base = config.base_url or GEMINI_DEFAULT_BASE
    url = f"{base.rstrip('/')}/models/{config.model_name}:generateContent"

    parts: list[dict] = [{"text": user_prompt}]
    for image in images or []:
        media_type, data = encode_image(image)
        parts.append({"inline_data": {"mime_type": media_type, "data": data}})

    payload: dict = {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "temperature": config.temperature,
            "maxOutputTokens": config.max_tokens,
        },
    }
    if system_prompt:
        payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

    data = post_json(
        client.http,
        url,
        payload,
        label="Gemini",
        params={"key": config.api_key or ""},
    )

    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ProviderError("Gemini API response has no candidates")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    answer_parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(answer_parts, list) or not answer_parts:
        raise ProviderError("Gemini API response candidate has no parts")
    text = "".join(
        require_text(part.get("text"), "Gemini", "candidates[0].content.parts")
        for part in answer_parts
        if isinstance(part, dict)
    )

    usage = data.get("usageMetadata") or {}
    return GenerationResponse(
        text=text,
        usage=TokenCounts(
            input_tokens=as_int(usage.get("promptTokenCount")),
            output_tokens=as_int(usage.get("candidatesTokenCount")),
        ),
    )
