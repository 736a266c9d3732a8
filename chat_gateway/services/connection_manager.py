# chat_gateway/services/connection_manager.py

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Dict, Iterable, Optional, Tuple
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)

# Put on an outbox to tell its writer the connection is gone.
_CLOSED = None

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Owns the outbound side of every attached chat connection.

    Each connection gets a handle and a bounded outbox queue. Chat handlers
    only ever call ``send``/``send_many``/``broadcast``, which enqueue with
    ``put_nowait`` and return immediately; a writer task per connection
    (``pump``) drains the outbox to the socket. A slow client therefore
    only backs up its own queue and never stalls event handling or other
    recipients.

    Data Structures:
        outboxes: Maps handle -> asyncio.Queue of pending frames
                  Example: {"9f1c...": <Queue maxsize=500>}

    Frames are plain JSON-ready dicts: {"event": "new_message", "data": {...}}

    Backpressure:
        When an outbox is full the oldest pending frame is discarded to make
        room. Delivery is best effort; ``frames_dropped`` counts the losses.
    """

    def __init__(self, outbox_size: int = 500) -> None:
        if outbox_size <= 0:
            raise ValueError(f"Outbox size must be positive, got {outbox_size}")
        self.outbox_size = outbox_size
        self.outboxes: Dict[str, asyncio.Queue] = {}
        self.frames_dropped: int = 0

    def attach(self, handle: Optional[str] = None) -> Tuple[str, asyncio.Queue]:
        """
        Register a new transport connection.

        Args:
            handle: Connection id to use (a random one is assigned if omitted)

        Returns:
            (handle, outbox) for the new connection
        """
        handle = handle or uuid.uuid4().hex
        outbox: asyncio.Queue = asyncio.Queue(maxsize=self.outbox_size)
        self.outboxes[handle] = outbox

        logger.info("✓ Connection %s attached. Total: %d", handle, len(self.outboxes))
        return handle, outbox

    def detach(self, handle: str) -> None:
        """Forget a connection and wake its writer so it can exit."""
        outbox = self.outboxes.pop(handle, None)
        if outbox is None:
            return
        self._put(handle, outbox, _CLOSED)
        logger.info("✗ Connection %s detached. Total: %d", handle, len(self.outboxes))

    def is_attached(self, handle: str) -> bool:
        return handle in self.outboxes

    def send(self, handle: str, event: str, data: Any) -> bool:
        """
        Queue one frame for a single connection.

        Returns:
            False if the handle is not attached (frame discarded)
        """
        outbox = self.outboxes.get(handle)
        if outbox is None:
            return False
        self._put(handle, outbox, {"event": event, "data": data})
        return True

    def send_many(self, handles: Iterable[str], event: str, data: Any) -> int:
        """Queue the same frame for several connections; returns how many got it."""
        frame = {"event": event, "data": data}
        delivered = 0
        for handle in handles:
            outbox = self.outboxes.get(handle)
            if outbox is None:
                continue
            self._put(handle, outbox, frame)
            delivered += 1
        return delivered

    def broadcast(self, event: str, data: Any, exclude: Optional[str] = None) -> int:
        """Queue a frame for every attached connection except ``exclude``."""
        targets = [handle for handle in self.outboxes if handle != exclude]
        return self.send_many(targets, event, data)

    def close_all(self) -> None:
        for handle in list(self.outboxes):
            self.detach(handle)

    def _put(self, handle: str, outbox: asyncio.Queue, frame: Optional[dict]) -> None:
        try:
            outbox.put_nowait(frame)
        except asyncio.QueueFull:
            outbox.get_nowait()
            self.frames_dropped += 1
            logger.warning("Outbox full for %s, dropped oldest frame", handle)
            outbox.put_nowait(frame)

    async def pump(self, handle: str, outbox: asyncio.Queue, websocket: WebSocket) -> None:
        """
        Writer loop: deliver queued frames to the socket in order.

        Runs as one task per connection and ends when the connection is
        detached or a send fails. A failed send detaches the connection so
        later broadcasts skip it until the receive loop finishes cleanup.
        """
        while True:
            frame = await outbox.get()
            if frame is _CLOSED:
                return
            try:
                await websocket.send_json(frame)
            except Exception as e:
                logger.error("Send error for %s: %s", handle, e)
                if self.outboxes.get(handle) is outbox:
                    self.detach(handle)
                return
