# chat_gateway/models/models.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, field_validator

DEFAULT_ROOM = "general"
DEFAULT_NAME = "Anonymous"

# ============================================================================
# OUTBOUND RECORDS
# ============================================================================

class ChatUser(BaseModel):
    """A registered chat connection as seen by other participants."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = DEFAULT_NAME
    email: str = ""
    joined_at: datetime = Field(alias="joinedAt")


class MessageAuthor(BaseModel):
    """Copy of the sender's identity taken when a message is created."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str = ""

    @classmethod
    def from_user(cls, user: ChatUser) -> "MessageAuthor":
        return cls(id=user.id, name=user.name, email=user.email)


SYSTEM_AUTHOR = MessageAuthor(id="system", name="System", email="")


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    user: MessageAuthor
    room: str = DEFAULT_ROOM
    timestamp: datetime
    type: Literal["message", "system"] = "message"


class ChatStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    connected_users: int = Field(alias="connectedUsers")
    total_messages: int = Field(alias="totalMessages")
    users: List[ChatUser] = []


# ============================================================================
# INBOUND EVENTS
# ============================================================================

def _room_or_default(value: Any) -> Any:
    if value is None:
        return DEFAULT_ROOM
    if isinstance(value, str):
        return value.strip() or DEFAULT_ROOM
    return value


RoomLabel = Annotated[str, BeforeValidator(_room_or_default)]


class JoinChat(BaseModel):
    event: Literal["join_chat"] = "join_chat"
    name: str = DEFAULT_NAME
    email: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_NAME
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _default_email(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""


class SendMessage(BaseModel):
    event: Literal["send_message"] = "send_message"
    text: str
    room: RoomLabel = DEFAULT_ROOM

    @field_validator("text")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message text is required")
        return value


class JoinRoom(BaseModel):
    event: Literal["join_room"] = "join_room"
    room: RoomLabel = DEFAULT_ROOM


class LeaveRoom(BaseModel):
    event: Literal["leave_room"] = "leave_room"
    room: RoomLabel = DEFAULT_ROOM


class Typing(BaseModel):
    event: Literal["typing"] = "typing"
    room: RoomLabel = DEFAULT_ROOM


class StopTyping(BaseModel):
    event: Literal["stop_typing"] = "stop_typing"
    room: RoomLabel = DEFAULT_ROOM


InboundEvent = Annotated[
    Union[JoinChat, SendMessage, JoinRoom, LeaveRoom, Typing, StopTyping],
    Field(discriminator="event"),
]

inbound_event_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)

INBOUND_EVENTS = frozenset(
    ["join_chat", "send_message", "join_room", "leave_room", "typing", "stop_typing"]
)
