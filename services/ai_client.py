"""
External AI scoring boundary: text prompt in, free-form text out.

Every failure on this boundary (transport error, timeout, non-2xx,
malformed envelope) is raised as AIScoringUnavailable so the caller can
treat them all as "tier failed".
"""
from __future__ import annotations

from typing import Any, Optional

import requests
from openai import APIError, OpenAI
from pydantic import BaseModel

from utils.http_client import HttpClient

GEMINI_URL = "https://generativelanguage.googleapis.com/v1/models/{model}:generateContent"


class ScoringTierError(Exception):
    """A scoring tier could not produce a usable result."""


class AIScoringUnavailable(ScoringTierError):
    pass


class ScoringResponseError(ScoringTierError):
    pass


class AIScoringConfig(BaseModel):
    provider: str = "gemini"
    api_key: Optional[str] = None
    model: Optional[str] = None
    timeout_seconds: float = 10.0
    max_retries: int = 1
    max_prompt_candidates: int = 200

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip()) and bool(self.model)

    @property
    def attempt_timeout_seconds(self) -> float:
        """Per-attempt timeout; all attempts together stay within timeout_seconds."""
        return self.timeout_seconds / (max(0, self.max_retries) + 1)

    @property
    def masked_key(self) -> str:
        if not self.api_key:
            return "NULL"
        key = self.api_key.strip()
        return key[:5] + "..." if len(key) > 5 else "***"

    @classmethod
    def from_settings(cls, settings: Any) -> "AIScoringConfig":
        provider = (settings.ai_provider or "gemini").strip().lower()
        if provider == "openai":
            key, model = settings.openai_api_key, settings.openai_model
        else:
            key, model = settings.gemini_api_key, settings.gemini_model
        return cls(
            provider=provider,
            api_key=key.strip() if key else None,
            model=model.strip() if model else None,
            timeout_seconds=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
            max_prompt_candidates=settings.max_prompt_candidates,
        )


class ScoringBackend:
    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class GeminiBackend(ScoringBackend):
    def __init__(self, config: AIScoringConfig, http: Optional[HttpClient] = None):
        self._config = config
        self._http = http or HttpClient(
            timeout=config.attempt_timeout_seconds, max_retries=config.max_retries
        )

    def generate(self, prompt: str) -> str:
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            payload = self._http.post_json(
                GEMINI_URL.format(model=self._config.model),
                json=body,
                headers={"x-goog-api-key": self._config.api_key or ""},
                timeout=self._config.attempt_timeout_seconds,
            )
        except (requests.RequestException, ValueError) as exc:
            raise AIScoringUnavailable(f"gemini request failed: {exc!r}") from exc
        return _gemini_text(payload)


def _gemini_text(payload: Any) -> str:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise AIScoringUnavailable("gemini response has no text part") from exc
    if not isinstance(text, str) or not text.strip():
        raise AIScoringUnavailable("gemini response text is empty")
    return text


class OpenAIBackend(ScoringBackend):
    def __init__(self, config: AIScoringConfig, client: Optional[OpenAI] = None):
        self._config = config
        self._client = client or OpenAI(
            api_key=config.api_key,
            timeout=config.attempt_timeout_seconds,
            max_retries=config.max_retries,
        )

    def generate(self, prompt: str) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self._config.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
            )
        except APIError as exc:
            raise AIScoringUnavailable(f"openai request failed: {exc!r}") from exc

        choices = getattr(resp, "choices", None) or []
        text = choices[0].message.content if choices else None
        if not text or not text.strip():
            raise AIScoringUnavailable("openai response text is empty")
        return text


def build_backend(config: AIScoringConfig) -> Optional[ScoringBackend]:
    if not config.is_configured:
        return None
    if config.provider == "openai":
        return OpenAIBackend(config)
    return GeminiBackend(config)
