"""Shared HTTP helpers and error mapping for provider transports."""

from __future__ import annotations

import base64
import json
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from penpard.errors import ProviderError, ProviderUnavailable


@dataclass(frozen=True)
class TokenCounts:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class GenerationResponse:
    text: str
    usage: TokenCounts = TokenCounts()


def post_json(
    http: httpx.Client | None,
    url: str,
    payload: dict[str, Any],
    *,
    label: str,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded object, mapping failures."""
    if http is None:
        raise ProviderUnavailable(f"{label} client is closed")

    try:
        response = http.post(url, headers=headers, params=params, json=payload)
    except httpx.TransportError as e:
        raise ProviderUnavailable(f"{label} API unreachable: {e}") from e

    raw_text = response.text
    if response.status_code >= 400:
        raise ProviderError(
            f"{label} API error (status {response.status_code}): {raw_text[:500]!r}"
        )

    try:
        data = response.json()
    except json.JSONDecodeError as e:
        raise ProviderError(
            f"{label} API returned invalid JSON (status {response.status_code}): {e}. "
            f"Raw response: {raw_text[:500]!r}"
        ) from e

    if not isinstance(data, dict):
        raise ProviderError(
            f"{label} API response is not a dict (got {type(data).__name__}). "
            f"Raw response: {raw_text[:500]!r}"
        )
    return data


def require_text(value: Any, label: str, where: str) -> str:
    if not isinstance(value, str):
        raise ProviderError(f"{label} API response missing text at {where}")
    return value


def as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def encode_image(path: str | Path) -> tuple[str, str]:
    """Return (media_type, base64 data) for an image file."""
    image_path = Path(path)
    media_type = mimetypes.guess_type(image_path.name)[0] or "image/png"
    data = base64.b64encode(image_path.read_bytes()).decode("ascii")
    return media_type, data
