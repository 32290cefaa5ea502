# test_interactions.py

import orjson
import pytest
from fastapi.testclient import TestClient

import Tierbot.app as appmod
from Tierbot.config import Settings
from Tierbot.metrics import get_counter

from conftest import SpyStore, command_body

client = TestClient(appmod.app)

SCORES = {"playstyle": 50, "movement": 50, "pvp": 50, "building": 50, "projectiles": 50}


@pytest.fixture(autouse=True)
def _spy(monkeypatch, spy_store):
    monkeypatch.setattr(appmod, "store", spy_store)
    return spy_store


def test_missing_headers_401(spy_store):
    r = client.post("/", content=command_body("addrank", {"username": "Bob", **SCORES}))
    assert r.status_code == 401
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "unauthorized"
    assert spy_store.saved == []


def test_bad_signature_401_and_no_persistence(sign, spy_store):
    body = command_body("addrank", {"username": "Bob", **SCORES})
    headers = sign(body)
    tampered = body.replace(b"Bob", b"Eve")
    r = client.post("/", content=tampered, headers=headers)
    assert r.status_code == 401
    assert spy_store.saved == []
    assert get_counter("interactions.unauthorized") == 1


def test_ping_acknowledged(sign):
    body = orjson.dumps({"type": 1, "id": "x", "data": {"name": "ignored"}, "extra": [1, 2]})
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/json"
    assert r.json() == {"type": 1}


def test_ping_ignores_malformed_fields(sign):
    body = b'{"type": 1, "data": "garbage", "member": 7}'
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    assert r.json() == {"type": 1}


def test_any_post_path_accepted(sign):
    body = b'{"type":1}'
    r = client.post("/interactions", content=body, headers=sign(body))
    assert r.status_code == 200
    assert r.json() == {"type": 1}


def test_malformed_json_400(sign):
    body = b"{not json"
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 400
    assert r.json() == {"error": "invalid interaction payload"}


def test_non_interaction_json_400(sign):
    for body in (b"[1, 2]", b'{"data": {}}', b'{"type": "ping"}'):
        r = client.post("/", content=body, headers=sign(body))
        assert r.status_code == 400, body


def test_unsupported_type_is_ephemeral(sign):
    body = b'{"type": 3}'
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    data = r.json()
    assert data["type"] == 4
    assert data["data"]["flags"] == 64
    assert "Unhandled interaction type: 3" in data["data"]["content"]


def test_unknown_command_200_ephemeral(sign):
    body = command_body("foo")
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    data = r.json()
    assert data["type"] == 4
    assert data["data"]["flags"] == 64
    assert "Unknown command: foo" in data["data"]["content"]


def test_ping_command(sign):
    body = command_body("ping")
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    assert "Pong" in r.json()["data"]["content"]
    assert "flags" not in r.json()["data"]


def test_addrank_records_and_summarizes(sign, spy_store):
    body = command_body("addrank", {"username": "Bob", **SCORES})
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    content = r.json()["data"]["content"]
    assert "**Bob**" in content
    assert "LT4" in content
    assert "50.0" in content
    assert [s.username for s in spy_store.saved] == ["Bob"]


def test_addrank_missing_username_no_persistence(sign, spy_store):
    body = command_body("addrank", SCORES)
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    assert r.json()["data"]["flags"] == 64
    assert spy_store.saved == []


def test_store_crash_gets_generic_ephemeral_reply(sign, monkeypatch):
    class BrokenStore:
        async def upsert(self, ranking):
            raise ConnectionRefusedError(111, "Connect call failed")

    monkeypatch.setattr(appmod, "store", BrokenStore())
    body = command_body("addrank", {"username": "Bob", **SCORES})
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["flags"] == 64
    assert "Failed to save" in data["content"]
    assert "Connect call failed" not in r.text
    assert get_counter("addrank.store_failed") == 1


def test_unexpected_error_becomes_500(sign, monkeypatch):
    async def crash(inter, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(appmod, "handle_interaction", crash)
    body = command_body("ping")
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 500
    assert r.json() == {"error": "Bot error occurred"}
    assert "boom" not in r.text


def test_missing_credentials_500(sign, monkeypatch):
    broken = Settings(discord_bot_token="", discord_public_key="")
    monkeypatch.setattr(appmod, "settings", broken)
    body = b'{"type":1}'
    r = client.post("/", content=body, headers=sign(body))
    assert r.status_code == 500
    payload = r.json()
    assert payload["error"] == "Missing Discord bot credentials"
    assert set(payload["missing"]) == {"DISCORD_BOT_TOKEN", "DISCORD_PUBLIC_KEY"}


def test_options_preflight():
    r = client.options("/anything")
    assert r.status_code == 200
    assert r.content == b""
    assert r.headers["access-control-allow-origin"] == "*"


def test_metrics_disabled_by_default():
    r = client.get("/metrics")
    assert r.status_code == 404


def test_metrics_enabled(monkeypatch, sign):
    monkeypatch.setattr(appmod, "settings", Settings(metrics_endpoint_enabled=True))
    body = b'{"type":1}'
    client.post("/", content=body, headers=sign(body))
    r = client.get("/metrics")
    assert r.status_code == 200
    assert r.json()["interactions.received"] == 1
