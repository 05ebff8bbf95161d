"""
HTTP API tests using FastAPI's TestClient against a scripted model.
"""
import aiosqlite
import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedAIClient, text_response
from luna_chat.api.server import create_app
from luna_chat.app import LunaApp
from luna_chat.errors import UpstreamBusyError

ADMIN = {"X-Admin-Secret": "s3cret"}


@pytest.fixture
def ai_client():
    return ScriptedAIClient([])


@pytest.fixture
def luna(app_config, ai_client):
    return LunaApp(app_config, ai_client=ai_client)


@pytest.fixture
def client(app_config, luna, ai_client):
    with TestClient(create_app(app_config, luna=luna)) as test_client:
        yield test_client
    assert ai_client.closed


def test_generate_returns_text_and_persists(client, ai_client):
    ai_client._responses.append(text_response("Oi, meu bem! 😘"))

    response = client.post("/api/generate", json={"prompt": "oi", "sessionId": "web-1"})

    assert response.status_code == 200
    assert response.json() == {"generatedText": "Oi, meu bem! 😘"}
    assert response.headers["X-Request-ID"]

    detail = client.get("/api/chat/historicos/web-1").json()
    assert detail["messageCount"] == 2
    assert [m["sender"] for m in detail["messages"]] == ["user", "ai"]
    assert detail["userIP"] == "testclient"


def test_generate_missing_prompt_is_400(client, ai_client):
    response = client.post("/api/generate", json={"sessionId": "web-2"})

    assert response.status_code == 400
    assert "error" in response.json()
    assert ai_client.calls == []


def test_generate_accepts_null_history(client, ai_client):
    ai_client._responses.append(text_response("oi, amor"))

    response = client.post("/api/generate", json={"prompt": "oi", "sessionId": "web-null", "history": None})

    assert response.status_code == 200
    assert response.json() == {"generatedText": "oi, amor"}


@pytest.mark.parametrize(
    "body",
    [
        {"prompt": 42, "sessionId": "web-bad"},
        {"prompt": "oi", "sessionId": "web-bad", "history": "nope"},
        {"prompt": "oi", "sessionId": "web-bad", "history": [{"sender": "user"}]},
    ],
)
def test_generate_invalid_body_is_400(client, ai_client, body):
    response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert set(payload) == {"error", "details"}
    assert "body" in payload["details"]
    assert ai_client.calls == []


def test_generate_save_failure_is_500(client, luna, ai_client, monkeypatch):
    async def broken_save(*args, **kwargs):
        raise aiosqlite.OperationalError("disk I/O error")

    monkeypatch.setattr(luna.session_repo, "save_turn", broken_save)
    ai_client._responses.append(text_response("oi"))

    response = client.post("/api/generate", json={"prompt": "oi", "sessionId": "web-db"})

    assert response.status_code == 500
    assert response.json() == {"error": "Erro ao salvar a conversa."}


def test_generate_load_failure_is_500(client, luna, ai_client, monkeypatch):
    async def broken_load(session_id):
        raise aiosqlite.DatabaseError("database disk image is malformed")

    monkeypatch.setattr(luna.session_repo, "get_session", broken_load)

    response = client.post("/api/generate", json={"prompt": "oi", "sessionId": "web-db"})

    assert response.status_code == 500
    assert response.json() == {"error": "Erro ao carregar o histórico da conversa."}
    assert "Traceback" not in response.text
    assert ai_client.calls == []


def test_generate_passes_through_rate_limit(client, ai_client):
    ai_client._responses.append(UpstreamBusyError(status_code=429))

    response = client.post("/api/generate", json={"prompt": "oi", "sessionId": "web-3"})

    assert response.status_code == 429
    assert response.json()["error"]
    assert client.get("/api/chat/historicos/web-3").json()["messages"] == []


def test_history_listing(client, ai_client):
    ai_client._responses.extend([text_response("a"), text_response("b")])
    client.post("/api/generate", json={"prompt": "primeira", "sessionId": "h-1"})
    client.post("/api/generate", json={"prompt": "segunda", "sessionId": "h-2"})

    listing = client.get("/api/chat/historicos").json()

    assert {item["sessionId"] for item in listing} == {"h-1", "h-2"}
    first = next(item for item in listing if item["sessionId"] == "h-1")
    assert first["messageCount"] == 2
    assert first["firstUserMessage"] == "primeira"


def test_missing_session_detail_is_empty_placeholder(client):
    response = client.get("/api/chat/historicos/unknown")

    assert response.status_code == 200
    body = response.json()
    assert body["sessionId"] == "unknown"
    assert body["messages"] == []
    assert body["messageCount"] == 0


def test_delete_session(client, ai_client):
    assert client.delete("/api/chat/historicos/nope").status_code == 404

    ai_client._responses.append(text_response("ok"))
    client.post("/api/generate", json={"prompt": "oi", "sessionId": "del-1"})

    assert client.delete("/api/chat/historicos/del-1").status_code == 200
    assert client.get("/api/chat/historicos/del-1").json()["messages"] == []


def test_datetime_endpoint(client):
    body = client.get("/api/datetime").json()

    assert " de " in body["datetime"]
    assert isinstance(body["timestamp"], int)


def test_log_connection_and_stats(client):
    response = client.post(
        "/api/log-connection",
        json={"action": "page_view"},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert response.status_code == 201

    stats = client.get("/api/admin/stats", headers=ADMIN).json()
    assert stats["total_connections"] == 1
    assert stats["unique_ips"] == 1
    assert stats["total_sessions"] == 0
    assert stats["last_activity"] is not None


def test_admin_requires_secret(client):
    assert client.get("/api/admin/stats").status_code == 401
    assert client.get("/api/admin/stats", headers={"X-Admin-Secret": "wrong"}).status_code == 401


def test_admin_persona_roundtrip(client, ai_client):
    response = client.put(
        "/api/admin/system-instruction",
        json={"instruction": "Seja a Luna, em poucas palavras."},
        headers=ADMIN,
    )
    assert response.status_code == 200
    got = client.get("/api/admin/system-instruction", headers=ADMIN).json()
    assert got["instruction"] == "Seja a Luna, em poucas palavras."

    ai_client._responses.append(text_response("ok"))
    client.post("/api/generate", json={"prompt": "oi", "sessionId": "p-1"})
    assert ai_client.calls[-1]["system"] == "Seja a Luna, em poucas palavras."


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] is True
