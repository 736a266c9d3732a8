from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from chat_gateway.core.config import settings
from chat_gateway.main import create_app
from chat_gateway.services.auth_service import create_access_token
from chat_gateway.services.connection_manager import ConnectionManager
from chat_gateway.services.gateway import ChatGateway


def drain(outbox: asyncio.Queue) -> list[dict[str, Any]]:
    frames = []
    while not outbox.empty():
        frame = outbox.get_nowait()
        if frame is not None:
            frames.append(frame)
    return frames


class FakeConnection:
    """A transport connection driven directly against the gateway."""

    def __init__(self, gateway: ChatGateway) -> None:
        self.gateway = gateway
        self.handle, self.outbox = gateway.connect()

    def emit(self, event: str, data: Any = None) -> None:
        self.gateway.dispatch(self.handle, event, data)

    def join(self, name: str | None = None, email: str | None = None) -> "FakeConnection":
        self.emit("join_chat", {"name": name, "email": email})
        return self

    def frames(self) -> list[dict[str, Any]]:
        return drain(self.outbox)

    def events(self, name: str) -> list[Any]:
        return [frame["data"] for frame in self.frames() if frame["event"] == name]

    def disconnect(self) -> None:
        self.gateway.disconnect(self.handle)


@pytest.fixture
def gateway() -> ChatGateway:
    return ChatGateway(ConnectionManager(outbox_size=500), history_limit=100)


@pytest.fixture
def connect(gateway: ChatGateway) -> Callable[[], FakeConnection]:
    def _connect() -> FakeConnection:
        return FakeConnection(gateway)

    return _connect


@pytest.fixture
def client(gateway: ChatGateway) -> Iterator[TestClient]:
    # Entered as a context manager so every WebSocket session shares one loop.
    with TestClient(create_app(gateway)) as test_client:
        yield test_client


@pytest.fixture
def jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    return "test-secret"


@pytest.fixture
def admin_token(jwt_secret: str) -> str:
    return create_access_token({"email": "admin@example.com", "isAdmin": True})
