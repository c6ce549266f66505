"""
Integration tests for POST /api/chat.

The Gemini API is replaced by httpx.MockTransport, so tests do not need a key
or network access. build_client is patched to inject the transport.
"""

import json
import logging
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from skillup_chat.agent.llm import GeminiClient
from skillup_chat.main import app

GENERATE = "POST /{version}/models/{model}:generateContent"


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture(autouse=True)
def chat_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    for name in ("GOOGLE_MODEL", "GOOGLE_API_VERSION", "GOOGLE_API_BASE", "GOOGLE_API_TIMEOUT", "KNOWLEDGE_BASE_PATH"):
        monkeypatch.delenv(name, raising=False)


class FakeGemini:
    """
    Route table for the mock transport: "METHOD /path" -> list of responses
    (consumed in order, last one repeats). Unknown routes return 404.
    """

    def __init__(self, routes: dict[str, list[httpx.Response]]) -> None:
        self.routes = routes
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        key = f"{request.method} {request.url.path}"
        self.calls.append(key)
        responses = self.routes.get(key)
        if not responses:
            return httpx.Response(404, json={"error": {"code": 404, "status": "NOT_FOUND"}})
        return responses.pop(0) if len(responses) > 1 else responses[0]

    def patch_client(self):
        transport = httpx.MockTransport(self)
        return patch(
            "skillup_chat.services.chat_service.build_client",
            side_effect=lambda s: GeminiClient(s.api_key, s.api_base, s.timeout, transport=transport),
        )


def _gen(version: str, model: str) -> str:
    return GENERATE.format(version=version, model=model)


def _reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _listing(*model_ids: str) -> httpx.Response:
    return httpx.Response(200, json={"models": [
        {"name": f"models/{m}", "supportedGenerationMethods": ["generateContent"]} for m in model_ids
    ]})


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"ok": True}


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": 42}, {"message": None}, ["hi"], "hi"])
def test_invalid_message_returns_400_without_upstream_call(client: TestClient, body) -> None:
    with patch("skillup_chat.services.chat_service.build_client") as mock_build:
        response = client.post("/api/chat", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid message"}
    mock_build.assert_not_called()


def test_malformed_json_returns_400(client: TestClient) -> None:
    with patch("skillup_chat.services.chat_service.build_client") as mock_build:
        response = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    mock_build.assert_not_called()


def test_missing_api_key_returns_500_without_upstream_call(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with patch("skillup_chat.services.chat_service.build_client") as mock_build:
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 500
    assert response.json() == {"error": "Missing GOOGLE_API_KEY"}
    mock_build.assert_not_called()


def test_invalid_api_version_returns_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_API_VERSION", "v2")
    response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 500
    assert "GOOGLE_API_VERSION" in response.json()["error"]


def test_knowledge_base_failure_returns_generic_500(client: TestClient, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("KNOWLEDGE_BASE_PATH", str(tmp_path / "missing.json"))
    with patch("skillup_chat.services.chat_service.build_client") as mock_build:
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
    mock_build.assert_not_called()


def test_reply_from_primary_model(client: TestClient) -> None:
    fake = FakeGemini({_gen("v1", "gemini-2.0-flash"): [_reply("We offer X, Y, Z.")]})
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "What courses do you offer?"})
    assert response.status_code == 200
    assert response.json() == {"reply": "We offer X, Y, Z."}
    assert fake.calls == [_gen("v1", "gemini-2.0-flash")]


def test_api_key_never_logged(client: TestClient, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    """Gemini URLs carry ?key=...; no log record may contain the key."""
    monkeypatch.setenv("GOOGLE_API_KEY", "SECRET-KEY-123")
    caplog.set_level(logging.INFO)
    fake = FakeGemini({
        "GET /v1/models": [_listing("gemini-2.0-flash-001")],
        _gen("v1", "gemini-2.0-flash-001"): [_reply("Recovered reply.")],
    })
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 200
    assert "GET /v1/models" in fake.calls
    assert caplog.records
    assert not [r for r in caplog.records if "SECRET-KEY-123" in r.getMessage()]


def test_prompt_contains_question_and_knowledge_base(client: TestClient) -> None:
    prompts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        prompts.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
        return _reply("ok")

    transport = httpx.MockTransport(handler)
    with patch(
        "skillup_chat.services.chat_service.build_client",
        side_effect=lambda s: GeminiClient(s.api_key, s.api_base, s.timeout, transport=transport),
    ):
        client.post("/api/chat", json={"message": "What are the fees?"})
    assert 'USER QUESTION: "What are the fees?"' in prompts[0]
    assert "KNOWLEDGE BASE:" in prompts[0]
    assert "Full Stack Web Development" in prompts[0]


def test_listing_fallback_recovers_and_stops(client: TestClient) -> None:
    fake = FakeGemini({
        # 404 on the primary call, success when the listing pick retries it
        _gen("v1", "gemini-2.0-flash"): [httpx.Response(404, text="not found"), _reply("Recovered reply.")],
        "GET /v1/models": [_listing("gemini-1.5-flash", "gemini-2.0-flash")],
        "GET /v1beta/models": [_listing("gemini-2.0-flash")],
    })
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "What courses do you offer?"})
    assert response.status_code == 200
    assert response.json() == {"reply": "Recovered reply."}
    assert fake.calls == [
        _gen("v1", "gemini-2.0-flash"),
        _gen("v1", "gemini-2.0-flash-latest"),
        _gen("v1beta", "gemini-2.0-flash"),
        "GET /v1/models",
        _gen("v1", "gemini-2.0-flash"),
    ]


def test_listing_error_is_skipped(client: TestClient) -> None:
    fake = FakeGemini({
        "GET /v1/models": [httpx.Response(500, text="listing down")],
        "GET /v1beta/models": [_listing("gemini-2.0-flash-001")],
        _gen("v1beta", "gemini-2.0-flash-001"): [_reply("From the family fallback.")],
    })
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 200
    assert response.json() == {"reply": "From the family fallback."}
    assert fake.calls[-3:] == ["GET /v1/models", "GET /v1beta/models", _gen("v1beta", "gemini-2.0-flash-001")]


def test_exhausted_fallbacks_with_403_returns_502_with_key_hint(client: TestClient) -> None:
    forbidden = httpx.Response(403, text='{"error": {"status": "PERMISSION_DENIED"}}')
    fake = FakeGemini({
        "GET /v1/models": [httpx.Response(403, text="denied")],
        "GET /v1beta/models": [_listing("gemini-2.0-flash-lite")],
        _gen("v1beta", "gemini-2.0-flash-lite"): [forbidden],
    })
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "Upstream error"
    assert body["status"] == 403
    assert body["details"] == '{"error": {"status": "PERMISSION_DENIED"}}'
    assert body["model"] == "gemini-2.0-flash-lite"
    assert body["apiVersion"] == "v1beta"
    assert "key" in body["hint"] and "endpoint" in body["hint"]


def test_404_everywhere_returns_502_with_model_hint(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_MODEL", "gemini-pro")
    fake = FakeGemini({})
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 502
    body = response.json()
    assert body["status"] == 404
    assert body["model"] == "gemini-1.0-pro"
    assert body["apiVersion"] == "v1"
    assert "GOOGLE_MODEL=gemini-1.5-flash-latest" in body["hint"]
    assert fake.calls == [
        _gen("v1beta", "gemini-1.0-pro"),
        _gen("v1beta", "gemini-1.0-pro-latest"),
        _gen("v1", "gemini-1.0-pro"),
        "GET /v1beta/models",
        "GET /v1/models",
    ]


def test_other_upstream_status_is_not_retried(client: TestClient) -> None:
    fake = FakeGemini({_gen("v1", "gemini-2.0-flash"): [httpx.Response(429, text="quota")]})
    with fake.patch_client():
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 502
    body = response.json()
    assert body["status"] == 429
    assert "hint" not in body
    assert fake.calls == [_gen("v1", "gemini-2.0-flash")]


def test_transport_failure_returns_generic_500(client: TestClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    transport = httpx.MockTransport(handler)
    with patch(
        "skillup_chat.services.chat_service.build_client",
        side_effect=lambda s: GeminiClient(s.api_key, s.api_base, s.timeout, transport=transport),
    ):
        response = client.post("/api/chat", json={"message": "Hi"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
