# chat_gateway/services/message_store.py

from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from chat_gateway.models.models import ChatMessage

DEFAULT_HISTORY_LIMIT = 100


class MessageStore:
    """
    Recent chat history, oldest first, bounded to ``limit`` entries.

    Appending past the bound evicts from the head in the same call. The
    store lives in memory only and starts empty on every process start.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit <= 0:
            raise ValueError(f"History limit must be positive, got {limit}")
        self._messages: Deque[ChatMessage] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._messages.maxlen or 0

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    def recent(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def clear(self) -> int:
        """Drop every stored message and return how many were removed."""
        removed = len(self._messages)
        self._messages.clear()
        return removed

    def __len__(self) -> int:
        return len(self._messages)
