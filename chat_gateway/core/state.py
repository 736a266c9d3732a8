# chat_gateway/core/state.py
from __future__ import annotations

from starlette.requests import HTTPConnection

from chat_gateway.core.config import settings
from chat_gateway.services.connection_manager import ConnectionManager
from chat_gateway.services.gateway import ChatGateway


def build_gateway() -> ChatGateway:
    """Construct the gateway and its connection manager from settings."""
    connection_manager = ConnectionManager(outbox_size=settings.CHAT_OUTBOX_SIZE)
    return ChatGateway(connection_manager, history_limit=settings.CHAT_HISTORY_LIMIT)


def get_gateway(connection: HTTPConnection) -> ChatGateway:
    """
    FastAPI dependency returning the app's gateway.

    Works for both HTTP requests and WebSocket connections.
    """
    return connection.app.state.chat_gateway
