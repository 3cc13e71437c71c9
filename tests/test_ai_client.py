import socket
import threading
import time
from types import SimpleNamespace

import httpx
import openai
import pytest
import requests

from schemas import Candidate, Event
from services import ai_client
from services.ai_client import (
    AIScoringConfig,
    AIScoringUnavailable,
    GeminiBackend,
    OpenAIBackend,
    build_backend,
)
from services.participant_ranker import build_participant_ranker


class _FakeHttp:
    def __init__(self, payload=None, exc=None):
        self.payload = payload
        self.exc = exc
        self.calls = []

    def post_json(self, url, *, json=None, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.payload


CONFIG = AIScoringConfig(api_key="secret-key", model="gemini-2.5-flash", timeout_seconds=7)


def _gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_gemini_returns_first_text_part():
    http = _FakeHttp(payload=_gemini_payload("[]"))
    assert GeminiBackend(CONFIG, http=http).generate("hello") == "[]"

    call = http.calls[0]
    assert "gemini-2.5-flash:generateContent" in call["url"]
    assert "secret-key" not in call["url"]
    assert call["headers"]["x-goog-api-key"] == "secret-key"
    assert call["json"]["contents"][0]["parts"][0]["text"] == "hello"
    assert call["timeout"] == 3.5  # 7s budget split over two attempts


@pytest.mark.parametrize(
    "exc",
    [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        requests.HTTPError("503 Server Error"),
        ValueError("not json"),
    ],
)
def test_gemini_transport_failures(exc):
    with pytest.raises(AIScoringUnavailable):
        GeminiBackend(CONFIG, http=_FakeHttp(exc=exc)).generate("hello")


@pytest.mark.parametrize("payload", [{}, {"candidates": []}, _gemini_payload("  "), ["odd"]])
def test_gemini_malformed_envelope(payload):
    with pytest.raises(AIScoringUnavailable):
        GeminiBackend(CONFIG, http=_FakeHttp(payload=payload)).generate("hello")


def _openai_client(content=None, exc=None):
    def create(**kwargs):
        if exc is not None:
            raise exc
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_openai_backend_text():
    backend = OpenAIBackend(CONFIG, client=_openai_client(content='[{"candidateId": "u1"}]'))
    assert backend.generate("hi") == '[{"candidateId": "u1"}]'


def test_openai_backend_timeout():
    exc = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    with pytest.raises(AIScoringUnavailable):
        OpenAIBackend(CONFIG, client=_openai_client(exc=exc)).generate("hi")


def test_openai_backend_empty_reply():
    with pytest.raises(AIScoringUnavailable):
        OpenAIBackend(CONFIG, client=_openai_client(content="")).generate("hi")


def _settings(**overrides):
    base = dict(
        ai_provider="gemini",
        gemini_api_key="  gem-key-abc  ",
        gemini_model="gemini-2.5-flash",
        openai_api_key=None,
        openai_model="gpt-4o-mini",
        ai_timeout_seconds=10.0,
        ai_max_retries=1,
        max_prompt_candidates=200,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def test_config_from_settings():
    config = AIScoringConfig.from_settings(_settings())
    assert config.api_key == "gem-key-abc"
    assert config.is_configured
    assert config.masked_key == "gem-k..."

    openai_config = AIScoringConfig.from_settings(_settings(ai_provider="OpenAI"))
    assert openai_config.provider == "openai"
    assert openai_config.model == "gpt-4o-mini"
    assert not openai_config.is_configured


def test_build_backend_requires_configuration():
    assert build_backend(AIScoringConfig(api_key="   ", model="m")) is None
    assert build_backend(AIScoringConfig(api_key=None, model="m")) is None
    assert isinstance(build_backend(CONFIG), GeminiBackend)


def test_attempt_timeout_splits_budget():
    assert AIScoringConfig(timeout_seconds=10, max_retries=1).attempt_timeout_seconds == 5
    assert AIScoringConfig(timeout_seconds=10, max_retries=0).attempt_timeout_seconds == 10
    assert AIScoringConfig(timeout_seconds=9, max_retries=2).attempt_timeout_seconds == 3


@pytest.fixture
def silent_server(monkeypatch):
    """Accepts connections and never answers."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    srv.settimeout(0.05)
    stop = threading.Event()
    held = []

    def serve():
        while not stop.is_set():
            try:
                conn, _ = srv.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            held.append(conn)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    port = srv.getsockname()[1]
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.setattr(
        ai_client,
        "GEMINI_URL",
        f"http://127.0.0.1:{port}/v1/models/{{model}}:generateContent",
    )
    yield port

    stop.set()
    thread.join(timeout=1)
    for conn in held:
        conn.close()
    srv.close()


SILENT_CONFIG = AIScoringConfig(
    api_key="secret-key", model="gemini-2.5-flash", timeout_seconds=1.0, max_retries=1
)


def test_gemini_gives_up_within_timeout_on_silent_server(silent_server):
    start = time.monotonic()
    with pytest.raises(AIScoringUnavailable):
        GeminiBackend(SILENT_CONFIG).generate("hello")
    assert time.monotonic() - start < SILENT_CONFIG.timeout_seconds


def test_ranking_falls_back_within_timeout_on_silent_server(silent_server):
    event = Event(id="h1", required_technologies=["Python"])
    candidates = [Candidate(id="u1", display_name="Ana", proficiency={"python": 200})]

    start = time.monotonic()
    out = build_participant_ranker(SILENT_CONFIG).rank_candidates(event, candidates)
    elapsed = time.monotonic() - start

    assert elapsed < SILENT_CONFIG.timeout_seconds
    assert [(s.candidate_id, s.score) for s in out] == [("u1", 20)]
