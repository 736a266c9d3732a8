from datetime import timedelta

from jose import jwt

from chat_gateway.core.config import settings
from chat_gateway.services.auth_service import create_access_token


def _seed(gateway, connect):
    alice = connect().join("Alice", "alice@example.com")
    connect().join("Bob")
    alice.emit("send_message", {"text": "hello"})
    return alice


def test_root_lists_endpoints(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["endpoints"]["websocket"] == "/chat"


def test_health_reports_counts(client, gateway, connect):
    _seed(gateway, connect)
    connect()

    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "connections": 3, "users": 2, "active_rooms": 1}


def test_metrics_exposes_gateway_counters(client, gateway, connect):
    _seed(gateway, connect)

    body = client.get("/metrics").json()
    assert body["messages_sent"] == 1
    assert body["stored_messages"] == 1
    assert body["active_rooms"] == {"general": 2}


def test_stats_requires_configured_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "")

    resp = client.get("/api/chat/stats")
    assert resp.status_code == 503


def test_stats_requires_token(client, jwt_secret):
    resp = client.get("/api/chat/stats")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "No token, authorization denied"


def test_stats_rejects_bad_and_expired_tokens(client, jwt_secret):
    forged = jwt.encode({"isAdmin": True}, "other-secret", algorithm="HS256")
    expired = create_access_token({"isAdmin": True}, expires_in=timedelta(seconds=-10))

    for token in (forged, expired, "garbage"):
        resp = client.get("/api/chat/stats", headers={"x-auth-token": token})
        assert resp.status_code == 401


def test_stats_rejects_non_admin(client, jwt_secret):
    token = create_access_token({"email": "user@example.com", "isAdmin": False})

    resp = client.get("/api/chat/stats", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_stats_returns_snapshot(client, gateway, connect, admin_token):
    _seed(gateway, connect)

    resp = client.get("/api/chat/stats", headers={"x-auth-token": admin_token})
    assert resp.status_code == 200

    body = resp.json()
    assert body["connectedUsers"] == 2
    assert body["totalMessages"] == 1
    assert [u["name"] for u in body["users"]] == ["Alice", "Bob"]
    assert body["users"][0]["email"] == "alice@example.com"
    assert "joinedAt" in body["users"][0]


def test_bearer_token_accepted(client, admin_token):
    resp = client.get("/api/chat/stats", headers={"Authorization": f"Bearer {admin_token}"})
    assert resp.status_code == 200


def test_clear_history_leaves_presence_alone(client, gateway, connect, admin_token):
    _seed(gateway, connect)

    resp = client.delete("/api/chat/history", headers={"x-auth-token": admin_token})
    assert resp.status_code == 200
    assert resp.json() == {"status": "cleared", "totalMessages": 0}

    assert len(gateway.store) == 0
    assert gateway.get_stats().connected_users == 2


def test_clear_history_requires_admin(client, gateway, connect, jwt_secret):
    _seed(gateway, connect)

    resp = client.delete("/api/chat/history")
    assert resp.status_code == 401
    assert len(gateway.store) == 1
