from __future__ import annotations

from typing import Optional

import pytest

from services.ai_client import AIScoringConfig, ScoringBackend


class FakeBackend(ScoringBackend):
    """Records prompts and answers with a canned reply (or raises)."""

    def __init__(self, reply: Optional[str] = None, exc: Optional[Exception] = None):
        self.reply = reply
        self.exc = exc
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.exc is not None:
            raise self.exc
        return self.reply


@pytest.fixture
def ai_config() -> AIScoringConfig:
    return AIScoringConfig(provider="gemini", api_key="test-key-123", model="gemini-2.5-flash")


@pytest.fixture
def fake_backend():
    def _make(reply: Optional[str] = None, exc: Optional[Exception] = None) -> FakeBackend:
        return FakeBackend(reply=reply, exc=exc)

    return _make
