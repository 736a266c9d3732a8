# chat_gateway/services/presence.py

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import List, Optional, Union
import logging

from chat_gateway.core.exceptions import NotJoinedError
from chat_gateway.models.models import (
    DEFAULT_ROOM,
    SYSTEM_AUTHOR,
    ChatMessage,
    ChatUser,
    JoinChat,
    JoinRoom,
    LeaveRoom,
    MessageAuthor,
    SendMessage,
    StopTyping,
    Typing,
)
from chat_gateway.services.connection_manager import ConnectionManager
from chat_gateway.services.connection_registry import ConnectionRegistry
from chat_gateway.services.message_store import MessageStore
from chat_gateway.services.room_manager import RoomManager

logger = logging.getLogger(__name__)


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


# ============================================================================
# PRESENCE / BROADCAST COORDINATOR
# ============================================================================

class PresenceCoordinator:
    """
    Turns registry, membership and history changes into outbound events.

    Every method mutates state first and only then queues the frames that
    describe the change, so anyone handling a ``user_joined`` or
    ``user_left`` sees a presence list that already matches the registry.
    None of the methods await, which makes each one atomic with respect to
    other events on the loop.

    Audiences:
        chat_history            -> the joining connection only
        user_joined / user_left -> every attached connection
        new_message (message)   -> everyone for "general", else room members
        new_message (system)    -> members of the room
        user_typing / stop      -> every attached connection except sender
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        rooms: RoomManager,
        store: MessageStore,
        connections: ConnectionManager,
    ) -> None:
        self.registry = registry
        self.rooms = rooms
        self.store = store
        self.connections = connections
        self.messages_sent: int = 0
        self._sequence = itertools.count(1)

    # ------------------------------------------------------------------ helpers

    def require_user(self, handle: str) -> ChatUser:
        user = self.registry.lookup(handle)
        if user is None:
            raise NotJoinedError()
        return user

    def presence_list(self) -> List[dict]:
        return [_dump(user) for user in self.registry.all_connections()]

    def _new_message(
        self,
        text: str,
        author: MessageAuthor,
        room: str,
        kind: str = "message",
    ) -> ChatMessage:
        now = datetime.now(timezone.utc)
        message_id = f"{int(now.timestamp() * 1000):012x}-{next(self._sequence):08d}"
        return ChatMessage(
            id=message_id,
            text=text,
            user=author,
            room=room,
            timestamp=now,
            type=kind,
        )

    def _deliver_to_room(self, room: str, event: str, data: dict) -> int:
        if room == DEFAULT_ROOM:
            return self.connections.broadcast(event, data)
        return self.connections.send_many(self.rooms.members_of(room), event, data)

    # ------------------------------------------------------------------ events

    def join_chat(self, handle: str, event: JoinChat) -> ChatUser:
        user = self.registry.register(handle, event.name, event.email)
        self.rooms.join(handle, DEFAULT_ROOM)

        history = [_dump(message) for message in self.store.recent()]
        self.connections.send(handle, "chat_history", history)
        self.connections.broadcast(
            "user_joined",
            {"user": _dump(user), "connectedUsers": self.presence_list()},
        )

        logger.info("User %s joined chat (%d online)", user.name, len(self.registry))
        return user

    def send_message(self, handle: str, event: SendMessage) -> ChatMessage:
        user = self.require_user(handle)
        message = self._new_message(event.text, MessageAuthor.from_user(user), event.room)

        self.store.append(message)
        self._deliver_to_room(message.room, "new_message", _dump(message))
        self.messages_sent += 1

        logger.info("Message sent by %s in room %s", user.name, message.room)
        return message

    def join_room(self, handle: str, event: JoinRoom) -> ChatMessage:
        user = self.require_user(handle)
        self.rooms.join(handle, event.room)

        notice = self._new_message(f"{user.name} joined the room", SYSTEM_AUTHOR, event.room, "system")
        self.connections.send_many(self.rooms.members_of(event.room), "new_message", _dump(notice))
        self.connections.send(handle, "joined_room", {"room": event.room})

        logger.info("User %s joined room %s", user.name, event.room)
        return notice

    def leave_room(self, handle: str, event: LeaveRoom) -> ChatMessage:
        user = self.require_user(handle)
        self.rooms.leave(handle, event.room)

        notice = self._new_message(f"{user.name} left the room", SYSTEM_AUTHOR, event.room, "system")
        self.connections.send_many(self.rooms.members_of(event.room), "new_message", _dump(notice))
        self.connections.send(handle, "left_room", {"room": event.room})

        logger.info("User %s left room %s", user.name, event.room)
        return notice

    def typing(self, handle: str, event: Union[Typing, StopTyping]) -> None:
        # Goes to every connection, not just the room's members.
        user = self.require_user(handle)
        name = "user_typing" if isinstance(event, Typing) else "user_stop_typing"
        self.connections.broadcast(name, {"user": _dump(user), "room": event.room}, exclude=handle)

    def disconnect(self, handle: str) -> Optional[ChatUser]:
        """
        Remove a connection from the registry and every room.

        Returns:
            The departed user, or None if the handle never joined the chat
        """
        user = self.registry.remove(handle)
        self.rooms.drop(handle)
        if user is None:
            return None

        self.connections.broadcast(
            "user_left",
            {"user": _dump(user), "connectedUsers": self.presence_list()},
            exclude=handle,
        )
        logger.info("User %s disconnected from chat (%d online)", user.name, len(self.registry))
        return user
