# chat_gateway/services/connection_registry.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from chat_gateway.models.models import ChatUser, DEFAULT_NAME

# ============================================================================
# CONNECTION REGISTRY
# ============================================================================

class ConnectionRegistry:
    """
    Maps live connection handles to the identity supplied in ``join_chat``.

    A handle is only present between ``join_chat`` and transport disconnect.
    Handles are assigned by the transport layer, so registering never
    conflicts; registering the same handle again replaces its record.

    Data Structures:
        users: Maps handle -> ChatUser
               Example: {"9f1c...": ChatUser(id="9f1c...", name="Alice", ...)}
    """

    def __init__(self) -> None:
        self.users: Dict[str, ChatUser] = {}

    def register(
        self,
        handle: str,
        name: str = DEFAULT_NAME,
        email: str = "",
        joined_at: Optional[datetime] = None,
    ) -> ChatUser:
        user = ChatUser(
            id=handle,
            name=name or DEFAULT_NAME,
            email=email or "",
            joined_at=joined_at or datetime.now(timezone.utc),
        )
        self.users[handle] = user
        return user

    def lookup(self, handle: str) -> Optional[ChatUser]:
        return self.users.get(handle)

    def remove(self, handle: str) -> Optional[ChatUser]:
        """Forget a handle. Unknown handles are ignored."""
        return self.users.pop(handle, None)

    def all_connections(self) -> List[ChatUser]:
        """Snapshot of registered users in registration order."""
        return list(self.users.values())

    def __len__(self) -> int:
        return len(self.users)

    def __contains__(self, handle: object) -> bool:
        return handle in self.users
