# chat_gateway/api/routes/chat.py

from fastapi import APIRouter, Depends

from chat_gateway.core.state import get_gateway
from chat_gateway.models.models import ChatStats
from chat_gateway.services.auth_service import require_admin
from chat_gateway.services.gateway import ChatGateway

router = APIRouter(prefix="/api/chat", tags=["Chat admin"], dependencies=[Depends(require_admin)])

# ============================================================================
# CHAT ADMIN ENDPOINTS
# ============================================================================

@router.get("/stats", response_model=ChatStats, response_model_by_alias=True)
async def chat_stats(gateway: ChatGateway = Depends(get_gateway)):
    """
    Snapshot of who is connected and how much history is held.

    Returns:
        ChatStats: {"connectedUsers": 2, "totalMessages": 40, "users": [...]}
    """
    return gateway.get_stats()


@router.delete("/history")
async def clear_chat_history(gateway: ChatGateway = Depends(get_gateway)):
    """
    Wipe the stored message history.

    Connected users and room memberships are left untouched; only what new
    joiners get replayed is cleared.
    """
    gateway.clear_history()
    return {"status": "cleared", "totalMessages": len(gateway.store)}
