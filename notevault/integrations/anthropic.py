from __future__ import annotations

import logging

import httpx

from notevault.capture.errors import GenerationError
from notevault.capture.templates import DEFAULT_SYSTEM_PROMPT

log = logging.getLogger("notevault.anthropic")

DEFAULT_MAX_TOKENS = 1000


def _truncate(s: str, n: int = 200) -> str:
    s = s or ""
    return s if len(s) <= n else s[:n] + "…"


class AnthropicGenerator:
    """Text generation through the Anthropic Messages API."""

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        api_base: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        timeout_s: float = 120.0,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base
        self.api_version = api_version
        self.timeout_s = timeout_s

    @classmethod
    def from_settings(cls) -> "AnthropicGenerator":
        from notevault.core.config import settings

        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            api_base=settings.ANTHROPIC_API_BASE,
            api_version=settings.ANTHROPIC_VERSION,
            timeout_s=settings.ANTHROPIC_TIMEOUT_S,
        )

    def generate(self, *, prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS, system: str = DEFAULT_SYSTEM_PROMPT) -> str:
        if not self.api_key:
            raise GenerationError("ANTHROPIC_API_KEY is not configured")

        log.debug("Generation prompt: %s", prompt)
        url = f"{self.api_base.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            log.error("Generation API error: %s", e)
            raise GenerationError(f"Generation request failed: {type(e).__name__}: {e}") from e

        if r.status_code >= 400:
            log.error("Generation API error: status=%s body=%s", r.status_code, _truncate(r.text))
            raise GenerationError(f"Generation failed: status={r.status_code} body={_truncate(r.text)}")

        try:
            data = r.json()
        except ValueError as e:
            raise GenerationError(f"Non-JSON response: status={r.status_code} body={_truncate(r.text)}") from e

        text = extract_text(data)
        log.debug("Generation response: %s", text)
        return text


def extract_text(data: dict) -> str:
    """Text of the first content block, or "" when the response carries none."""

    try:
        return data["content"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""
