# tests/test_api.py
from datetime import datetime, timedelta

import pydantic
import pytest
from sqlalchemy.exc import OperationalError

from modelchat.core.config import Settings
from modelchat.dependencies import get_storage

from .conftest import StubProvider


def create_chat(client, title="Trip planning", model="gpt-4o-mini"):
    response = client.post("/api/chats", json={"title": title, "model": model})
    assert response.status_code == 200
    return response.json()


def test_send_message_scenario(make_client):
    with make_client(StubProvider(reply="Hello!")) as client:
        chat = create_chat(client)
        assert isinstance(chat["id"], int)
        assert isinstance(chat["publicId"], str)
        assert chat["title"] == "Trip planning"

        response = client.post("/api/messages", json={"chatId": chat["publicId"], "content": "Hi", "username": "alice"})

        assert response.status_code == 200
        body = response.json()
        assert [(m["role"], m["content"]) for m in body] == [("user", "Hi"), ("assistant", "Hello!")]
        assert all(m["chatId"] == chat["id"] for m in body)

    with make_client(StubProvider(error=RuntimeError("provider down"))) as client:
        chat = create_chat(client)

        response = client.post("/api/messages", json={"chatId": chat["publicId"], "content": "Hi", "username": "alice"})

        assert response.status_code == 200
        assert [(m["role"], m["content"]) for m in response.json()] == [("user", "Hi")]


def test_chat_lookup_by_id_and_public_id(client):
    chat = create_chat(client)

    for identifier in (chat["id"], chat["publicId"]):
        response = client.get(f"/api/chats/{identifier}")
        assert response.status_code == 200
        assert response.json() == chat


def test_list_chats(client):
    create_chat(client, title="First")
    create_chat(client, title="Second")

    response = client.get("/api/chats")
    assert response.status_code == 200
    assert [chat["title"] for chat in response.json()] == ["First", "Second"]


def test_messages_listed_in_order(client):
    chat = create_chat(client)
    client.post("/api/messages", json={"chatId": chat["id"], "content": "one", "username": "alice"})
    client.post("/api/messages", json={"chatId": str(chat["id"]), "content": "two", "username": "alice"})

    response = client.get(f"/api/chats/{chat['publicId']}/messages")
    assert response.status_code == 200
    assert [m["content"] for m in response.json()] == ["one", "Hello!", "two", "Hello!"]


def test_unknown_chat_is_404(client):
    for path in ("/api/chats/4242", "/api/chats/unknown-chat", "/api/chats/unknown-chat/messages"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CHAT_001"

    response = client.post("/api/messages", json={"chatId": 4242, "content": "Hi", "username": "alice"})
    assert response.status_code == 404


@pytest.mark.parametrize("body", [
    {"title": "No model"},
    {"title": "", "model": "gpt-4o"},
    {"title": "   ", "model": "gpt-4o"},
    {},
])
def test_create_chat_rejects_invalid_body(client, body):
    response = client.post("/api/chats", json=body)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_001"
    assert response.json()["success"] is False


@pytest.mark.parametrize("body", [
    {"chatId": 1, "content": "", "username": "alice"},
    {"chatId": True, "content": "Hi", "username": "alice"},
    {"chatId": 1.5, "content": "Hi", "username": "alice"},
    {"chatId": 1, "content": "Hi"},
    {"content": "Hi", "username": "alice"},
])
def test_send_message_rejects_invalid_body(client, provider, body):
    create_chat(client)
    response = client.post("/api/messages", json=body)
    assert response.status_code == 400
    assert provider.calls == []


def test_rename_chat(client):
    chat = create_chat(client)

    response = client.patch(f"/api/chats/{chat['id']}", json={"title": "Renamed"})
    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"
    assert response.json()["model"] == chat["model"]

    response = client.patch(f"/api/chats/{chat['id']}", json={"model": "gpt-4o"})
    assert response.json()["title"] == "Renamed"
    assert response.json()["model"] == "gpt-4o"


def test_rename_to_empty_title_fails(client):
    chat = create_chat(client)

    response = client.patch(f"/api/chats/{chat['id']}", json={"title": ""})
    assert response.status_code == 400
    assert client.get(f"/api/chats/{chat['id']}").json()["title"] == "Trip planning"


def test_update_unknown_chat(client):
    response = client.patch("/api/chats/999", json={"title": "Nope"})
    assert response.status_code == 404


def test_out_of_range_ids_are_unknown_chats(client):
    huge = 10 ** 20

    assert client.patch(f"/api/chats/{huge}", json={"title": "Nope"}).status_code == 404
    assert client.delete(f"/api/chats/{huge}").status_code == 204
    assert client.get(f"/api/chats/{huge}").status_code == 404


def test_delete_chat(client):
    chat = create_chat(client)
    client.post("/api/messages", json={"chatId": chat["id"], "content": "Hi", "username": "alice"})

    response = client.delete(f"/api/chats/{chat['id']}")
    assert response.status_code == 204

    assert client.get(f"/api/chats/{chat['id']}").status_code == 404
    assert client.get(f"/api/chats/{chat['publicId']}").status_code == 404
    assert client.get(f"/api/chats/{chat['publicId']}/messages").status_code == 404
    assert client.delete(f"/api/chats/{chat['id']}").status_code == 204


def test_message_submission_is_rate_limited(make_client, provider):
    with make_client(RATE_LIMIT_MAX_REQUESTS=3) as client:
        chat = create_chat(client)
        body = {"chatId": chat["id"], "content": "Hi", "username": "alice"}

        for remaining in (2, 1, 0):
            response = client.post("/api/messages", json=body)
            assert response.status_code == 200
            assert response.headers["RateLimit-Remaining"] == str(remaining)
            assert response.headers["RateLimit-Limit"] == "3"

        response = client.post("/api/messages", json=body)
        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_001"
        assert response.headers["RateLimit-Remaining"] == "0"
        assert int(response.headers["Retry-After"]) > 0

        assert len(provider.calls) == 3
        assert len(client.get(f"/api/chats/{chat['id']}/messages").json()) == 6


def test_chat_routes_are_not_rate_limited(make_client):
    with make_client(RATE_LIMIT_MAX_REQUESTS=1) as client:
        for _ in range(3):
            create_chat(client)
        assert len(client.get("/api/chats").json()) == 3


def test_storage_failure_is_500_without_details(client):
    chat = create_chat(client)

    class BrokenStorage:
        async def get_chat(self, chat_id):
            raise OperationalError("SELECT", {}, Exception("connection refused"))

    client.app.dependency_overrides[get_storage] = lambda: BrokenStorage()
    try:
        response = client.post("/api/messages", json={"chatId": chat["id"], "content": "Hi", "username": "alice"})
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INTERNAL_001"
    assert error["details"] is None
    assert "connection refused" not in response.text


def test_models_and_health(client):
    models = client.get("/api/models").json()
    assert "gpt-4o-mini" in [model["id"] for model in models]

    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert health["database"] is True


def test_provider_closed_on_shutdown(make_client, provider):
    with make_client():
        pass
    assert provider.closed


def test_missing_api_key_fails_at_startup(monkeypatch):
    monkeypatch.delenv("COMPLETION_API_KEY", raising=False)
    monkeypatch.delenv("AIMLAPI_KEY", raising=False)

    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None)


def test_legacy_api_key_variable(monkeypatch):
    monkeypatch.delenv("COMPLETION_API_KEY", raising=False)
    monkeypatch.setenv("AIMLAPI_KEY", "legacy-key")

    assert Settings(_env_file=None).COMPLETION_API_KEY == "legacy-key"


def test_client_partitioned_rate_limit(make_client):
    with make_client(RATE_LIMIT_MAX_REQUESTS=1, RATE_LIMIT_PARTITION="client") as client:
        chat = create_chat(client)
        body = {"chatId": chat["id"], "content": "Hi", "username": "alice"}

        assert client.post("/api/messages", json=body).status_code == 200
        assert client.post("/api/messages", json=body).status_code == 429
        assert list(client.app.state.rate_limiter._windows) == ["client:testclient"]


def test_timestamps_carry_utc_offset(client):
    chat = create_chat(client)
    client.post("/api/messages", json={"chatId": chat["id"], "content": "Hi", "username": "alice"})

    stored = client.get(f"/api/chats/{chat['id']}").json()
    messages = client.get(f"/api/chats/{chat['id']}/messages").json()
    for created_at in [chat["createdAt"], stored["createdAt"]] + [m["createdAt"] for m in messages]:
        assert datetime.fromisoformat(created_at.replace("Z", "+00:00")).utcoffset() == timedelta(0)
