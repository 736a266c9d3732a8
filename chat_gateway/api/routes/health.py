# chat_gateway/api/routes/health.py

from fastapi import APIRouter, Depends

from chat_gateway.core.state import get_gateway
from chat_gateway.services.gateway import ChatGateway

router = APIRouter()

@router.get("/health")
async def health(gateway: ChatGateway = Depends(get_gateway)):
    """
    Health check endpoint.

    Returns current system status, open connections, registered users and
    rooms that currently have members. Used by container health probes.

    Returns:
        dict: Status, connection count, user count, active room count
    """
    return {
        "status": "healthy",
        "connections": len(gateway.connections.outboxes),
        "users": len(gateway.registry),
        "active_rooms": len(gateway.rooms.rooms),
    }
