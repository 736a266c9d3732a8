# chat_gateway/api/websocket.py

from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from chat_gateway.core.config import settings
from chat_gateway.core.state import get_gateway
from chat_gateway.services.gateway import ChatGateway

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# CHAT WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket(settings.CHAT_NAMESPACE)
async def chat_endpoint(websocket: WebSocket, gateway: ChatGateway = Depends(get_gateway)):
    """
    WebSocket endpoint for the realtime chat.

    Protocol:
    =========
    Every frame, in both directions, is {"event": "<name>", "data": <payload>}.

    Client -> Server Events:
    ------------------------
    join_chat     {"name": "Alice", "email": "alice@example.com"}
        -> chat_history [...] (to you), user_joined {user, connectedUsers} (to all)

    send_message  {"text": "Hello!", "room": "general"}
        -> new_message {id, text, user, room, timestamp, type} (to the room)

    join_room     {"room": "design"}  (or just "design")
        -> new_message (system, to the room), joined_room {room} (to you)

    leave_room    {"room": "design"}  (or just "design")
        -> new_message (system, to the room), left_room {room} (to you)

    typing / stop_typing  {"room": "general"}
        -> user_typing / user_stop_typing {user, room} (to everyone else)

    Server -> Client Only:
    ----------------------
    user_left {user, connectedUsers}   when someone disconnects
    error {message}                    when one of your events failed

    Lifecycle:
    ==========
    1. Connection accepted and given a handle and an outbox
    2. Client sends join_chat (other chat events are rejected before that)
    3. Frames are handled one at a time; replies go through the outbox
    4. On disconnect the user is removed and everyone else is told
    """
    await websocket.accept()
    handle, outbox = gateway.connect()
    writer = asyncio.create_task(gateway.connections.pump(handle, outbox, websocket))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            if message.get("text") is not None:
                gateway.handle_frame(handle, message["text"])
            elif message.get("bytes") is not None:
                gateway.handle_frame(handle, message["bytes"])

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error for %s: %s", handle, e)
    finally:
        gateway.disconnect(handle)
        writer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await writer
