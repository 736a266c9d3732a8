# chat_gateway/services/gateway.py

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Tuple, Union
import logging

from pydantic import ValidationError

from chat_gateway.core.exceptions import ChatGatewayError, MalformedPayloadError, NotJoinedError
from chat_gateway.models.models import (
    INBOUND_EVENTS,
    ChatStats,
    InboundEvent,
    JoinChat,
    JoinRoom,
    LeaveRoom,
    SendMessage,
    StopTyping,
    Typing,
    inbound_event_adapter,
)
from chat_gateway.services.connection_manager import ConnectionManager
from chat_gateway.services.connection_registry import ConnectionRegistry
from chat_gateway.services.message_store import DEFAULT_HISTORY_LIMIT, MessageStore
from chat_gateway.services.presence import PresenceCoordinator
from chat_gateway.services.room_manager import RoomManager

logger = logging.getLogger(__name__)

# Events whose payload may be sent as a bare room label instead of an object.
ROOM_EVENTS = frozenset(["join_room", "leave_room", "typing", "stop_typing"])

FAULT_MESSAGES = {
    "join_chat": "Failed to join chat",
    "send_message": "Failed to send message",
    "join_room": "Failed to join room",
    "leave_room": "Failed to leave room",
    "typing": "Failed to update typing status",
    "stop_typing": "Failed to update typing status",
}

# ============================================================================
# CHAT GATEWAY
# ============================================================================

class ChatGateway:
    """
    Single entry point between chat transports and the chat state.

    Owns the registry, room membership, message history and the presence
    coordinator; the transport side (``ConnectionManager``) is injected so
    each application or test gets its own isolated instance.

    Inbound frames:
        {"event": "send_message", "data": {"text": "hi", "room": "general"}}

    Every inbound event is validated once here, with defaults applied, and
    then handed to the coordinator as a typed model. Failures never escape:
    known chat errors and unexpected faults alike end up as a private
    ``error`` frame for the offending connection.
    """

    def __init__(
        self,
        connections: ConnectionManager,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self.connections = connections
        self.registry = ConnectionRegistry()
        self.rooms = RoomManager()
        self.store = MessageStore(history_limit)
        self.presence = PresenceCoordinator(self.registry, self.rooms, self.store, connections)

        self.started_at = datetime.now(timezone.utc)
        self.events_handled: int = 0
        self.errors_reported: int = 0
        self.handler_faults: int = 0

    # ------------------------------------------------------------------ transport

    def connect(self) -> Tuple[str, asyncio.Queue]:
        """Attach a new transport connection; returns (handle, outbox)."""
        return self.connections.attach()

    def disconnect(self, handle: str) -> None:
        """Clean up after a transport disconnect. Safe to call more than once."""
        try:
            self.presence.disconnect(handle)
        except Exception:
            logger.exception("Error handling disconnect for %s", handle)
        finally:
            self.connections.detach(handle)

    def handle_frame(self, handle: str, raw: Union[str, bytes]) -> None:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError:
                self._report(handle, "Invalid frame")
                return

        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            self._report(handle, "Invalid JSON")
            return

        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            self._report(handle, "Invalid frame")
            return

        self.dispatch(handle, frame["event"], frame.get("data"))

    def dispatch(self, handle: str, event_name: str, data: Any = None) -> None:
        self.events_handled += 1
        logger.debug("Chat input from %s: event=%s data=%r", handle, event_name, data)

        try:
            if event_name in INBOUND_EVENTS and event_name != "join_chat":
                if handle not in self.registry:
                    raise NotJoinedError()
            event = self.parse_event(event_name, data)
            self._route(handle, event)
        except ChatGatewayError as e:
            self._report(handle, e.message)
        except Exception:
            self.handler_faults += 1
            logger.exception("Error handling %s from %s", event_name, handle)
            self._report(handle, FAULT_MESSAGES.get(event_name, "Failed to process event"))

    @staticmethod
    def parse_event(event_name: str, data: Any) -> InboundEvent:
        """
        Build the typed event for one inbound payload.

        Raises:
            MalformedPayloadError: unknown event, or a payload that stays
                unusable after defaulting (e.g. ``send_message`` with no text)
        """
        if event_name not in INBOUND_EVENTS:
            raise MalformedPayloadError(f"Unknown event: {event_name}")

        if data is None:
            payload = {}
        elif isinstance(data, str) and event_name in ROOM_EVENTS:
            payload = {"room": data}
        elif isinstance(data, dict):
            payload = dict(data)
        elif event_name == "join_chat":
            payload = {}
        else:
            raise MalformedPayloadError(f"Invalid payload for {event_name}")

        payload["event"] = event_name
        try:
            return inbound_event_adapter.validate_python(payload)
        except ValidationError as e:
            if any("text" in error["loc"] for error in e.errors()):
                raise MalformedPayloadError("Message text is required") from e
            raise MalformedPayloadError(f"Invalid payload for {event_name}") from e

    def _route(self, handle: str, event: InboundEvent) -> None:
        if isinstance(event, JoinChat):
            self.presence.join_chat(handle, event)
        elif isinstance(event, SendMessage):
            self.presence.send_message(handle, event)
        elif isinstance(event, JoinRoom):
            self.presence.join_room(handle, event)
        elif isinstance(event, LeaveRoom):
            self.presence.leave_room(handle, event)
        elif isinstance(event, (Typing, StopTyping)):
            self.presence.typing(handle, event)

    def _report(self, handle: str, message: str) -> None:
        self.errors_reported += 1
        self.connections.send(handle, "error", {"message": message})

    # ------------------------------------------------------------------ admin

    def get_stats(self) -> ChatStats:
        return ChatStats(
            connected_users=len(self.registry),
            total_messages=len(self.store),
            users=self.registry.all_connections(),
        )

    def clear_history(self) -> None:
        removed = self.store.clear()
        logger.info("Chat history cleared (%d messages removed)", removed)

    def get_metrics(self) -> dict:
        uptime = (datetime.now(timezone.utc) - self.started_at).total_seconds()
        return {
            "uptime_seconds": round(uptime, 2),
            "events_handled": self.events_handled,
            "messages_sent": self.presence.messages_sent,
            "errors_reported": self.errors_reported,
            "handler_faults": self.handler_faults,
            "frames_dropped": self.connections.frames_dropped,
            "concurrent_connections": len(self.connections.outboxes),
            "registered_users": len(self.registry),
            "stored_messages": len(self.store),
            "active_rooms": self.rooms.active_rooms(),
        }

    def shutdown(self) -> None:
        """Detach every connection; used at application teardown."""
        logger.info("Shutting down chat gateway (%d connections)", len(self.connections.outboxes))
        self.connections.close_all()
