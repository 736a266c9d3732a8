# chat_gateway/api/routes/root.py

from fastapi import APIRouter

from chat_gateway.core.config import settings

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.

    Returns basic info about the gateway and where its endpoints live.
    """
    return {
        "message": "Card Chat Gateway",
        "version": "1.0",
        "transport": "websocket",
        "events": [
            "join_chat",
            "send_message",
            "join_room",
            "leave_room",
            "typing",
            "stop_typing",
        ],
        "endpoints": {
            "websocket": settings.CHAT_NAMESPACE,
            "health": "/health",
            "metrics": "/metrics",
            "stats": "/api/chat/stats",
            "history": "/api/chat/history",
        },
    }
