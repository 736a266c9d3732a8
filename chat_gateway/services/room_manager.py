# chat_gateway/services/room_manager.py

from __future__ import annotations

from typing import Dict, Set
import logging

logger = logging.getLogger(__name__)

# ============================================================================
# ROOM MEMBERSHIP MANAGER
# ============================================================================

class RoomManager:
    """
    Tracks which connection handles are subscribed to which rooms.

    Rooms are never created or deleted explicitly. A room exists while at
    least one connection is subscribed to it; the last member leaving
    removes the label from memory.

    Data Structures:
        rooms: Maps room label -> Set of connection handles in that room
               Example: {"general": {"a1", "b2"}, "design": {"a1"}}

        connection_rooms: Maps handle -> Set of room labels it belongs to
                          Example: {"a1": {"general", "design"}}

    Both maps are kept in step by every mutation, so looking a connection up
    in either direction is O(1).
    """

    def __init__(self) -> None:
        self.rooms: Dict[str, Set[str]] = {}
        self.connection_rooms: Dict[str, Set[str]] = {}

    def join(self, handle: str, room: str) -> bool:
        """
        Subscribe a handle to a room.

        Returns:
            True if the handle was added, False if it was already a member
        """
        members = self.rooms.setdefault(room, set())
        if handle in members:
            return False
        members.add(handle)
        self.connection_rooms.setdefault(handle, set()).add(room)
        logger.debug("→ %s joined '%s' (%d members)", handle, room, len(members))
        return True

    def leave(self, handle: str, room: str) -> bool:
        """
        Unsubscribe a handle from a room.

        Returns:
            True if the handle was removed, False if it was not a member
        """
        members = self.rooms.get(room)
        if not members or handle not in members:
            return False

        members.discard(handle)
        if not members:
            del self.rooms[room]

        joined = self.connection_rooms.get(handle)
        if joined is not None:
            joined.discard(room)
            if not joined:
                del self.connection_rooms[handle]

        logger.debug("← %s left '%s'", handle, room)
        return True

    def drop(self, handle: str) -> Set[str]:
        """
        Remove a handle from every room it belongs to.

        Returns:
            The labels the handle was removed from
        """
        joined = self.connection_rooms.pop(handle, set())
        for room in joined:
            members = self.rooms.get(room)
            if members is None:
                continue
            members.discard(handle)
            if not members:
                del self.rooms[room]
        return joined

    def members_of(self, room: str) -> Set[str]:
        return set(self.rooms.get(room, ()))

    def rooms_of(self, handle: str) -> Set[str]:
        return set(self.connection_rooms.get(handle, ()))

    def active_rooms(self) -> Dict[str, int]:
        """Room label -> member count, for health and metrics endpoints."""
        return {room: len(members) for room, members in self.rooms.items()}
