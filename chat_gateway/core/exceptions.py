# chat_gateway/core/exceptions.py

from __future__ import annotations


class ChatGatewayError(Exception):
    """
    Base class for errors reported back to a single chat connection.

    ``message`` is the text sent to the client in the ``error`` event, so it
    must never carry internal details.
    """

    default_message = "Chat error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotJoinedError(ChatGatewayError):
    """The connection sent a chat event before ``join_chat``."""

    default_message = "User not found"


class MalformedPayloadError(ChatGatewayError):
    """The payload could not be used even after applying defaults."""

    default_message = "Invalid payload"
